"""Session reporting for Breach Protocol.

- progress: Educational progress figure, recommendations and the session report
- feedback: Quick rating and detailed feedback submissions
- compliance: Disclaimer acceptance and educational focus checks
- export: Session export document and completion certificate
"""

from breach_protocol.reporting.compliance import (
    DISCLAIMER_EVENT_KIND,
    EDUCATIONAL_REMINDER,
    FOCUS_CHECK_EVENT_KIND,
    FocusIndicators,
    check_educational_focus,
    disclaimer_entry,
    focus_check_entry,
)
from breach_protocol.reporting.export import Certificate, build_certificate, build_session_export
from breach_protocol.reporting.feedback import (
    DetailedFeedback,
    FeedbackSubmission,
    QuickFeedback,
    parse_feedback,
)
from breach_protocol.reporting.progress import (
    ProgressReport,
    build_progress_report,
    calculate_educational_progress,
    generate_recommendations,
)

__all__ = [
    "ProgressReport",
    "build_progress_report",
    "calculate_educational_progress",
    "generate_recommendations",
    "QuickFeedback",
    "DetailedFeedback",
    "FeedbackSubmission",
    "parse_feedback",
    "FocusIndicators",
    "check_educational_focus",
    "disclaimer_entry",
    "focus_check_entry",
    "DISCLAIMER_EVENT_KIND",
    "FOCUS_CHECK_EVENT_KIND",
    "EDUCATIONAL_REMINDER",
    "Certificate",
    "build_certificate",
    "build_session_export",
]
