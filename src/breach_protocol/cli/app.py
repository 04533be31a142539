"""Breach Protocol CLI Application.

A Textual-based terminal interface for the AI safety training simulation:
- Main menu
- Session screen with scenario, AI recommendation, choices and feedback
- Human oversight controls (pause, review, override)
- Completion screen with the progress report
- AI console relaying free text to the wargame model

The session screen is a PresentationGateway: the engine publishes display
events to it and the screen renders them.
"""

from __future__ import annotations

import os
from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, OptionList, Rule, Static
from textual.widgets.option_list import Option

from breach_protocol.engine import ProgressionEngine, ScenarioCatalog
from breach_protocol.errors import BreachProtocolError, InvalidStateError, RelayUnavailable
from breach_protocol.models import (
    AIRecommendation,
    ChoiceFeedback,
    DisplayEvent,
    MetricsSnapshot,
    ObjectiveAchieved,
    OversightRecorded,
    ScenarioPresented,
    SequenceCompleted,
)
from breach_protocol.relay import RelayService
from breach_protocol.reporting import ProgressReport, build_progress_report

# =============================================================================
# Formatting helpers
# =============================================================================


def format_recommendation(recommendation: AIRecommendation) -> str:
    lines = [
        f"AI RECOMMENDATION ({recommendation.confidence_percent}% confidence)",
        f"Action: {recommendation.action}",
    ]
    if recommendation.reasoning:
        lines.append(f"Reasoning: {recommendation.reasoning}")
    if recommendation.potential_risks:
        lines.append("Potential risks:")
        lines.extend(f"  - {risk}" for risk in recommendation.potential_risks)
    if recommendation.alignment_issues:
        lines.append("Alignment issues:")
        lines.extend(f"  - {issue}" for issue in recommendation.alignment_issues)
    return "\n".join(lines)


def format_scenario(event: ScenarioPresented) -> str:
    """Render a presented scenario as plain text."""
    lines = [
        f"[{event.index + 1}/{event.total}] {event.title} ({event.difficulty})",
        "",
        event.situation,
    ]
    if event.context:
        lines.extend(["", f"Context: {event.context}"])
    if event.recommendation:
        lines.extend(["", format_recommendation(event.recommendation)])
    if event.objectives:
        lines.extend(["", "Learning objectives:"])
        lines.extend(f"  * {objective.title}" for objective in event.objectives)
    return "\n".join(lines)


def format_feedback(event: ChoiceFeedback) -> str:
    lines = [event.message]
    if event.learning_points:
        lines.append("")
        lines.extend(f"+ {point}" for point in event.learning_points)
    if event.improvement_suggestions:
        lines.append("")
        lines.extend(f"> {suggestion}" for suggestion in event.improvement_suggestions)
    return "\n".join(lines)


def format_metrics(snapshot: MetricsSnapshot, progress_percent: float) -> str:
    return (
        f"Safety: {snapshot.safety_score}/100    "
        f"Oversight actions: {snapshot.oversight_action_count}    "
        f"Objectives: {len(snapshot.objectives_achieved)}    "
        f"Progress: {progress_percent:.0f}%"
    )


def format_report(report: ProgressReport) -> str:
    """Render the end-of-session report."""
    lines = [
        f"Scenarios completed: {report.scenarios_completed}/{report.scenarios_total}",
        f"Final safety score: {report.safety_score}/100",
        f"Oversight actions: {report.oversight_action_count}",
        f"Objectives achieved: {len(report.objectives_achieved)}",
        f"Educational progress: {report.educational_progress:.0f}%",
    ]
    if report.decision_quality:
        lines.append(f"Decision quality: {', '.join(report.decision_quality)}")
    if report.recommendations:
        lines.extend(["", "Recommendations:"])
        lines.extend(f"  - {item}" for item in report.recommendations)
    return "\n".join(lines)


# =============================================================================
# Theme and Styles
# =============================================================================

CSS = """
Screen {
    background: $surface;
}

#main-menu, #completion {
    align: center middle;
    width: 100%;
    height: 100%;
}

.menu-container {
    width: 70;
    height: auto;
    border: solid green;
    padding: 1 2;
}

.menu-title {
    text-align: center;
    text-style: bold;
    color: $success;
    margin-bottom: 1;
}

.menu-subtitle {
    text-align: center;
    color: $text-muted;
}

.menu-button {
    width: 100%;
    margin: 1 0;
}

.panel-title {
    text-style: bold;
    color: $secondary;
    margin-bottom: 1;
}

#status-bar {
    dock: top;
    height: 1;
    background: $primary-darken-2;
    color: $text;
    padding: 0 1;
}

#scenario-panel {
    height: 1fr;
    border: solid $primary;
    padding: 0 1;
}

#bottom-row {
    height: 1fr;
    layout: horizontal;
}

#choices-panel {
    width: 1fr;
    border: solid $success;
    padding: 0 1;
}

#feedback-panel {
    width: 1fr;
    border: solid $warning;
    padding: 0 1;
}

OptionList {
    height: auto;
    max-height: 10;
}

#console-log {
    height: 1fr;
    border: solid $primary;
    padding: 0 1;
}
"""


# =============================================================================
# Screens
# =============================================================================


class MainMenuScreen(Screen):
    """Main menu screen."""

    BINDINGS = [
        Binding("s", "start_session", "Start"),
        Binding("a", "open_console", "AI Console"),
        Binding("q", "quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main-menu"):
            with Vertical(classes="menu-container"):
                yield Static("BREACH PROTOCOL", classes="menu-title")
                yield Static("AI Safety Training Simulation", classes="menu-subtitle")
                yield Rule()
                yield Button("Start Session", id="start-session", classes="menu-button", variant="success")
                yield Button("AI Console", id="ai-console", classes="menu-button", variant="primary")
                yield Button("Quit", id="quit", classes="menu-button", variant="error")
        yield Footer()

    @on(Button.Pressed, "#start-session")
    def action_start_session(self) -> None:
        self.app.push_screen(SessionScreen(self.app.catalog))

    @on(Button.Pressed, "#ai-console")
    def action_open_console(self) -> None:
        self.app.push_screen(RelayConsoleScreen(self.app.relay))

    @on(Button.Pressed, "#quit")
    def quit_app(self) -> None:
        self.app.exit()


class SessionScreen(Screen):
    """One run through the scenario sequence."""

    BINDINGS = [
        Binding("escape", "go_back", "Main Menu"),
        Binding("p", "oversight('pause_ai')", "Pause AI"),
        Binding("r", "oversight('review_decision')", "Review"),
        Binding("o", "oversight('override_ai')", "Override"),
        Binding("1", "choose(1)", "Choice 1", show=False),
        Binding("2", "choose(2)", "Choice 2", show=False),
        Binding("3", "choose(3)", "Choice 3", show=False),
        Binding("4", "choose(4)", "Choice 4", show=False),
    ]

    def __init__(self, catalog: ScenarioCatalog) -> None:
        super().__init__()
        self.engine = ProgressionEngine(catalog, gateways=[self])
        self.choice_ids: list[str] = []
        self.published: list[DisplayEvent] = []
        self.report: Optional[ProgressReport] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="status-bar")
        with VerticalScroll(id="scenario-panel"):
            yield Static("SCENARIO", classes="panel-title")
            yield Static("Loading...", id="scenario-text")
        with Horizontal(id="bottom-row"):
            with Vertical(id="choices-panel"):
                yield Static("CHOICES (1-4 to select)", classes="panel-title")
                yield OptionList(id="choice-list")
            with VerticalScroll(id="feedback-panel"):
                yield Static("FEEDBACK", classes="panel-title")
                yield Static("", id="feedback-text")
        yield Footer()

    def on_mount(self) -> None:
        self.engine.start()

    # =========================================================================
    # PresentationGateway
    # =========================================================================

    def publish(self, event: DisplayEvent) -> None:
        """Render one display event."""
        self.published.append(event)

        if isinstance(event, ScenarioPresented):
            self.query_one("#scenario-text", Static).update(format_scenario(event))
            self.choice_ids = [choice.id for choice in event.choices]
            choice_list = self.query_one("#choice-list", OptionList)
            choice_list.clear_options()
            for number, choice in enumerate(event.choices, start=1):
                choice_list.add_option(Option(f"{number}. {choice.text}", id=choice.id))
        elif isinstance(event, ChoiceFeedback):
            self.query_one("#feedback-text", Static).update(format_feedback(event))
        elif isinstance(event, ObjectiveAchieved):
            self.notify(f"Objective achieved: {event.title}", timeout=4)
        elif isinstance(event, OversightRecorded):
            self.notify(event.message, title=event.title, timeout=5)
        elif isinstance(event, SequenceCompleted):
            self.choice_ids = []
            self.query_one("#choice-list", OptionList).clear_options()
            self.report = build_progress_report(self.engine.state, len(self.engine.catalog))
            self.app.push_screen(CompletionScreen(self.report))

        self._update_status()

    def _update_status(self) -> None:
        self.query_one("#status-bar", Static).update(
            format_metrics(self.engine.snapshot(), self.engine.progress_percent)
        )

    # =========================================================================
    # Input
    # =========================================================================

    @on(OptionList.OptionSelected, "#choice-list")
    def choice_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id:
            self.submit(event.option.id)

    def action_choose(self, number: int) -> None:
        if 1 <= number <= len(self.choice_ids):
            self.submit(self.choice_ids[number - 1])

    def submit(self, choice_id: str) -> None:
        try:
            self.engine.submit_choice(choice_id)
        except BreachProtocolError as e:
            self.notify(str(e), severity="error")

    def action_oversight(self, kind: str) -> None:
        try:
            self.engine.record_oversight_action(kind)
        except InvalidStateError as e:
            self.notify(str(e), severity="warning")

    def action_go_back(self) -> None:
        self.app.pop_screen()


class CompletionScreen(Screen):
    """End-of-session report."""

    BINDINGS = [
        Binding("escape", "main_menu", "Main Menu"),
        Binding("m", "main_menu", "Main Menu"),
    ]

    def __init__(self, report: ProgressReport) -> None:
        super().__init__()
        self.report = report

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="completion"):
            with Vertical(classes="menu-container"):
                yield Static("SESSION COMPLETE", classes="menu-title")
                yield Static(format_report(self.report), id="report-text")
                yield Rule()
                yield Button("Main Menu", id="main-menu-button", classes="menu-button", variant="primary")
        yield Footer()

    @on(Button.Pressed, "#main-menu-button")
    def action_main_menu(self) -> None:
        # Pop all screens back to main menu (keep base Screen + MainMenuScreen)
        while len(self.app.screen_stack) > 2:
            self.app.pop_screen()


class RelayConsoleScreen(Screen):
    """Free-text console to the wargame AI."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
    ]

    def __init__(self, relay: RelayService) -> None:
        super().__init__()
        self.relay = relay
        self.history: list[dict] = []
        self.transcript: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="console-log"):
            yield Static("AI CONSOLE", classes="panel-title")
            yield Static("", id="console-text")
        yield Input(placeholder="Message the AI system...", id="console-input")
        yield Footer()

    @on(Input.Submitted, "#console-input")
    def send_message(self, event: Input.Submitted) -> None:
        user = event.value.strip()
        if not user:
            return
        event.input.value = ""
        # One request in flight; the reply handler re-enables input
        event.input.disabled = True
        self._append(f"> {user}")
        self.relay_message(user, list(self.history))

    @work(thread=True)
    def relay_message(self, user: str, history: list[dict]) -> None:
        """Call the relay off the event loop."""
        try:
            text = self.relay.complete(user, history)
        except RelayUnavailable as e:
            self.app.call_from_thread(self._relay_failed, str(e))
            return
        self.app.call_from_thread(self._record_reply, user, text)

    def _record_reply(self, user: str, text: str) -> None:
        self.history.extend(
            [{"role": "user", "content": user}, {"role": "assistant", "content": text}]
        )
        self._append(text)
        self._enable_input()

    def _relay_failed(self, message: str) -> None:
        self._append(f"!! {message}")
        self._enable_input()

    def _enable_input(self) -> None:
        console_input = self.query_one("#console-input", Input)
        console_input.disabled = False
        console_input.focus()

    def _append(self, line: str) -> None:
        self.transcript.append(line)
        self.query_one("#console-text", Static).update("\n\n".join(self.transcript))

    def action_go_back(self) -> None:
        self.app.pop_screen()


# =============================================================================
# Main Application
# =============================================================================


class BreachProtocolApp(App):
    """Main Breach Protocol CLI application."""

    TITLE = "Breach Protocol"
    SUB_TITLE = "AI Safety Training Simulation"
    CSS = CSS

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(
        self,
        catalog: ScenarioCatalog | None = None,
        relay: RelayService | None = None,
    ) -> None:
        super().__init__()
        if catalog is None:
            scenarios_file = os.environ.get("BREACH_PROTOCOL_SCENARIOS_FILE")
            catalog = ScenarioCatalog.from_file(scenarios_file) if scenarios_file else ScenarioCatalog.default()
        self.catalog = catalog
        self.relay = relay or RelayService()

    def on_mount(self) -> None:
        """Show main menu when app starts."""
        self.push_screen(MainMenuScreen())


def main() -> None:
    """Entry point for the `breach-protocol` command.

    For debugging with Textual devtools:
        1. In one terminal: textual console
        2. In another terminal: textual run --dev src/breach_protocol/cli/app.py
    """
    app = BreachProtocolApp()
    app.run()


if __name__ == "__main__":
    main()
