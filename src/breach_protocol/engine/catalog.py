"""Scenario catalog loading and validation.

The catalog is the ordered, read-only list of scenarios a session walks
through. It is validated exactly once, at load time; after that every
consumer can rely on:

- at least one scenario, with unique scenario ids
- at least one choice per scenario, with unique choice ids
- learning objective ids unique across the whole catalog
- every classification set and objective trigger referencing real choices

Usage:
    from breach_protocol.engine import ScenarioCatalog

    catalog = ScenarioCatalog.default()
    for scenario in catalog:
        print(scenario.title)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from breach_protocol.errors import ValidationError
from breach_protocol.models.scenario import LearningObjective, Scenario

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "scenarios.json"


def _format_pydantic_errors(index: int, exc: PydanticValidationError) -> list[str]:
    """Flatten pydantic errors into readable one-liners."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        prefix = f"scenario[{index}]" + (f".{location}" if location else "")
        messages.append(f"{prefix}: {error['msg']}")
    return messages


class ScenarioCatalog:
    """Immutable ordered sequence of validated scenarios.

    Attributes:
        name: Human-readable catalog name
        source: Where the raw content came from (file path or "<memory>")
    """

    def __init__(
        self,
        raw_scenarios: Sequence[dict[str, Any] | Scenario],
        name: str = "",
        source: str = "<memory>",
    ) -> None:
        self.name = name
        self.source = source
        self._raw = list(raw_scenarios)
        self._scenarios: tuple[Scenario, ...] | None = None
        self._by_id: dict[str, Scenario] = {}

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_data(cls, data: Any, source: str = "<memory>") -> "ScenarioCatalog":
        """Build and load a catalog from parsed JSON.

        Accepts either a bare list of scenarios or an object with a
        ``scenarios`` list and optional ``name``.

        Raises:
            ValidationError: If the content is malformed
        """
        if isinstance(data, dict):
            raw = data.get("scenarios")
            name = data.get("name", "")
        else:
            raw = data
            name = ""

        if not isinstance(raw, list):
            raise ValidationError(f"Catalog {source} must contain a list of scenarios")

        catalog = cls(raw, name=name, source=source)
        catalog.load()
        return catalog

    @classmethod
    def from_file(cls, path: str | Path) -> "ScenarioCatalog":
        """Load a catalog from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file is not valid JSON or content is malformed
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Catalog {path} is not valid JSON: {e}") from e
        return cls.from_data(data, source=str(path))

    @classmethod
    def default(cls) -> "ScenarioCatalog":
        """Load the bundled AI safety scenarios."""
        return cls.from_file(DEFAULT_CATALOG_PATH)

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self) -> tuple[Scenario, ...]:
        """Validate the raw content and return the ordered scenarios.

        The result is cached; validation runs only on the first call.

        Raises:
            ValidationError: With every problem found, not just the first
        """
        if self._scenarios is not None:
            return self._scenarios

        errors: list[str] = []
        scenarios: list[Scenario] = []

        if not self._raw:
            errors.append("catalog contains no scenarios")

        for index, raw in enumerate(self._raw):
            if isinstance(raw, Scenario):
                scenarios.append(raw)
                continue
            try:
                scenarios.append(Scenario.model_validate(raw))
            except PydanticValidationError as e:
                errors.extend(_format_pydantic_errors(index, e))

        seen: set[str] = set()
        for scenario in scenarios:
            if scenario.id in seen:
                errors.append(f"duplicate scenario id '{scenario.id}'")
            seen.add(scenario.id)

        # Objective ids are unique catalog-wide
        objective_owners: dict[str, list[str]] = {}
        for scenario in scenarios:
            for objective in scenario.objectives:
                objective_owners.setdefault(objective.id, []).append(scenario.id)
        for objective_id, owners in objective_owners.items():
            if len(owners) > 1:
                errors.append(
                    f"duplicate objective id '{objective_id}' in scenarios "
                    + ", ".join(f"'{owner}'" for owner in owners)
                )

        if errors:
            logger.error(f"Catalog {self.source} failed validation with {len(errors)} error(s)")
            raise ValidationError(
                f"Invalid scenario catalog {self.source}:\n  " + "\n  ".join(errors),
                errors=errors,
            )

        self._scenarios = tuple(scenarios)
        self._by_id = {scenario.id: scenario for scenario in scenarios}
        logger.info(f"Loaded {len(scenarios)} scenarios from {self.source}")
        return self._scenarios

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def scenarios(self) -> tuple[Scenario, ...]:
        return self.load()

    def get(self, scenario_id: str) -> Scenario | None:
        """Look up a scenario by id."""
        self.load()
        return self._by_id.get(scenario_id)

    def index_of(self, scenario_id: str) -> int:
        """Position of a scenario in the sequence.

        Raises:
            KeyError: If no scenario has this id
        """
        for index, scenario in enumerate(self.load()):
            if scenario.id == scenario_id:
                return index
        raise KeyError(scenario_id)

    def objectives(self) -> list[LearningObjective]:
        """All learning objectives across the catalog, in scenario order."""
        return [objective for scenario in self.load() for objective in scenario.objectives]

    def summaries(self) -> list[dict[str, Any]]:
        """Metadata for listing scenarios without their full content."""
        return [
            {
                "id": scenario.id,
                "title": scenario.title,
                "description": scenario.description,
                "category": scenario.category,
                "difficulty": scenario.difficulty,
                "choice_count": len(scenario.choices),
            }
            for scenario in self.load()
        ]

    def __len__(self) -> int:
        return len(self.load())

    def __getitem__(self, index: int) -> Scenario:
        return self.load()[index]

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self.load())
