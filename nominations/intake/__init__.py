"""
Nomination Intake

Accepts a nomination, enriches it, and fans it out.

Key Components:
- validate_submission: Required-field checks and sanitization
- InsightGenerator: Optional LLM showrunner insights
- build_slack_message: Block Kit rendering
- IntakeOrchestrator: Concurrent dispatch to Slack (mandatory) and CloudKit (best-effort)
- Handlers: Channel-specific senders (Slack, CloudKit)

Rules for intake:
1. Every free-text field is trimmed and capped at 5000 characters
2. Only a Slack failure fails a submission
3. Enrichment and CloudKit failures are logged, never surfaced as errors
4. Every external call is attempted exactly once
5. Diagnostics report presence, never secret values
"""

from .validator import validate_submission, sanitize, ValidationResult
from .insights import InsightGenerator
from .formatter import build_slack_message
from .orchestrator import IntakeOrchestrator, IntakeResult, IntakeState, DispatchOutcome

__all__ = [
    "validate_submission",
    "sanitize",
    "ValidationResult",
    "InsightGenerator",
    "build_slack_message",
    "IntakeOrchestrator",
    "IntakeResult",
    "IntakeState",
    "DispatchOutcome",
]
