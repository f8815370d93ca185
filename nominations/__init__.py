"""
Nominations Intake

Server-side intake for "What's the 661" docuseries nominations.

Philosophy:
- Slack is the mandatory channel: if the team never sees it, it didn't happen
- Enrichment and durable storage are best-effort and never fail a submission
- Untrusted input is trimmed and bounded before it reaches any external system
- Secrets are read once at startup and never echoed back

Usage:
    from nominations.common import load_config
    from nominations.intake import IntakeOrchestrator, validate_submission
    from nominations.intake.handlers import SlackNotifier, CloudKitClient
"""

__version__ = "0.1.0"
