"""
Intake Orchestrator

Runs one nomination through the pipeline and returns a single outcome.

State machine:
    RECEIVED -> VALIDATED -> ENRICHING -> DISPATCHING -> COMPLETED
         \\            \\                        \\
          +-> REJECTED  +-> REJECTED              +-> REJECTED (Slack failed)

Channels:
- Slack (mandatory): failure fails the request with a 500
- CloudKit (best-effort): failure is logged and reported as cloudkitOk=false
- LLM enrichment (optional): failure means no insights, nothing else

Slack and CloudKit are dispatched concurrently and both outcomes are always
collected.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from ..common.config import NominationsConfig
from ..common.llm_client import LLMClient
from ..common.schemas import Insights, Submission
from .formatter import build_slack_message
from .handlers import ChannelResult, CloudKitClient, SlackNotifier
from .insights import InsightGenerator
from .validator import INVALID_BODY_MESSAGE, MISSING_FIELDS_MESSAGE, validate_submission

logger = logging.getLogger("nominations.intake.orchestrator")

SLACK_NOT_CONFIGURED_MESSAGE = "Slack not configured"
SEND_FAILED_MESSAGE = "Failed to send nomination. Please try again later."
DIAGNOSTIC_STATUS = "diagnostic"


class IntakeState(str, Enum):
    """Lifecycle of a single submission"""
    RECEIVED = "received"
    VALIDATED = "validated"
    ENRICHING = "enriching"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass
class DispatchOutcome:
    """Both channel results for one submission"""
    notification: ChannelResult
    record_store: ChannelResult

    @property
    def succeeded(self) -> bool:
        return self.notification.ok


@dataclass
class IntakeResult:
    """Aggregated result returned to the caller"""
    status_code: int
    success: bool
    state: IntakeState
    error: Optional[str] = None
    outcome: Optional[DispatchOutcome] = None
    insights: Optional[Insights] = None

    def to_response(self) -> Dict[str, Any]:
        """JSON body for the HTTP response"""
        body: Dict[str, Any] = {"success": self.success}
        if self.error:
            body["error"] = self.error

        if self.success and self.outcome and not self.outcome.record_store.skipped:
            body["cloudkitOk"] = self.outcome.record_store.ok
            if not self.outcome.record_store.ok:
                body["cloudkitError"] = self.outcome.record_store.error

        return body


def _rejected(status_code: int, error: str) -> IntakeResult:
    return IntakeResult(
        status_code=status_code, success=False, state=IntakeState.REJECTED, error=error
    )


class IntakeOrchestrator:
    """
    Entry point for nomination submissions.

    Collaborators default to the ones described by the config; tests inject
    fakes instead.
    """

    def __init__(
        self,
        config: NominationsConfig,
        notifier: Optional[SlackNotifier] = None,
        record_store: Optional[CloudKitClient] = None,
        insight_generator: Optional[InsightGenerator] = None,
    ):
        self._config = config
        self._notifier = notifier or SlackNotifier(webhook_url=config.slack.webhook_url)
        self._record_store = record_store or CloudKitClient.from_config(config.cloudkit)
        if insight_generator is None:
            insight_generator = InsightGenerator(
                LLMClient.from_config(config.llm),
                series_name=config.series.name,
                series_region=config.series.region,
                max_tokens=config.llm.max_tokens,
                temperature=config.llm.temperature,
            )
        self._insights = insight_generator

    @property
    def notifier(self) -> SlackNotifier:
        return self._notifier

    @property
    def record_store(self) -> CloudKitClient:
        return self._record_store

    @property
    def insight_generator(self) -> InsightGenerator:
        return self._insights

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(self, payload: Any) -> IntakeResult:
        """
        Process one nomination.

        Args:
            payload: Parsed JSON body (None if the body was not valid JSON)

        Returns:
            IntakeResult; never raises for downstream failures
        """
        if not self._notifier.is_configured:
            logger.error("SLACK_WEBHOOK_URL is not configured")
            return _rejected(500, SLACK_NOT_CONFIGURED_MESSAGE)

        if not isinstance(payload, dict):
            return _rejected(400, INVALID_BODY_MESSAGE)

        validation = validate_submission(payload)
        if not validation.is_valid:
            logger.info("Rejected nomination: %s", "; ".join(validation.errors))
            return _rejected(400, MISSING_FIELDS_MESSAGE)

        submission = validation.submission

        insights = await self._enrich(submission)

        message = build_slack_message(submission, insights, series_name=self._config.series.name)
        outcome = await self._dispatch(submission, insights, message)

        if not outcome.succeeded:
            logger.error("Error sending to Slack: %s", outcome.notification.error)
            return IntakeResult(
                status_code=500,
                success=False,
                state=IntakeState.REJECTED,
                error=SEND_FAILED_MESSAGE,
                outcome=outcome,
                insights=insights,
            )

        logger.info("Nomination delivered: %s", submission.business_name)
        return IntakeResult(
            status_code=200,
            success=True,
            state=IntakeState.COMPLETED,
            outcome=outcome,
            insights=insights,
        )

    async def _enrich(self, submission: Submission) -> Optional[Insights]:
        try:
            return await self._insights.generate(submission)
        except Exception as e:
            logger.warning("Failed to generate AI insights: %s", e)
            return None

    async def _store(self, submission: Submission, insights: Optional[Insights]) -> ChannelResult:
        if not self._record_store.is_configured:
            logger.warning("CloudKit is not configured; skipping record write.")
            return ChannelResult.not_configured("cloudkit")

        record_name = await self._record_store.create_nomination(submission, insights)
        return ChannelResult.success("cloudkit", detail=record_name)

    async def _dispatch(
        self,
        submission: Submission,
        insights: Optional[Insights],
        message: Dict[str, Any],
    ) -> DispatchOutcome:
        """Send to Slack and CloudKit concurrently; collect both outcomes."""
        slack_result, cloudkit_result = await asyncio.gather(
            self._notifier.send(message),
            self._store(submission, insights),
            return_exceptions=True,
        )

        if isinstance(slack_result, BaseException):
            notification = ChannelResult.from_exception("slack", slack_result)
        else:
            notification = ChannelResult.success("slack")

        if isinstance(cloudkit_result, BaseException):
            logger.warning("CloudKit write failed: %s", cloudkit_result)
            record_store = ChannelResult.from_exception("cloudkit", cloudkit_result)
        else:
            record_store = cloudkit_result

        return DispatchOutcome(notification=notification, record_store=record_store)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    async def diagnose(self) -> Dict[str, Any]:
        """
        Report configuration presence and run a live CloudKit test write.

        Never returns secret values and never touches Slack. Each call
        creates a real record (status "diagnostic") when CloudKit is
        configured.
        """
        now = datetime.now(timezone.utc)
        llm = self._config.llm

        return {
            "service": "nominations-intake",
            "timestamp": now.isoformat(),
            "config": {
                "slack": self._notifier.config_status(),
                "llm": {
                    "provider": llm.provider,
                    "apiKey": bool(llm.api_key_for()),
                    "available": self._insights.is_available,
                },
                "cloudkit": self._record_store.config_status(),
            },
            "cloudkitTest": await self._cloudkit_test_write(now),
        }

    async def _cloudkit_test_write(self, now: datetime) -> Dict[str, Any]:
        if not self._record_store.is_configured:
            return {"attempted": False, "ok": False, "error": "CloudKit not configured"}

        probe = Submission(
            nominator_name="Diagnostics",
            nominator_email="diagnostics@example.com",
            business_name="CloudKit write test",
            reason=f"Diagnostic write at {now.isoformat()}",
        )
        try:
            record_name = await self._record_store.create_nomination(
                probe, None, status=DIAGNOSTIC_STATUS
            )
        except Exception as e:
            logger.warning("CloudKit diagnostic write failed: %s", e)
            return {
                "attempted": True,
                "ok": False,
                "error": str(e) or type(e).__name__,
                "statusCode": getattr(e, "status_code", None),
            }

        return {"attempted": True, "ok": True, "recordName": record_name}
