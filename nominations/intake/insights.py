"""
Showrunner Insight Generator

Asks an LLM to read a nomination the way a story producer would: logline,
angle, tone, priority, interview questions, b-roll, research leads.

Enrichment is strictly optional. Any failure (no credential, SDK error, empty
or unparsable response) yields None and a warning; it never raises.
Single attempt, no retries.
"""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from ..common.llm_client import LLMClient
from ..common.llm_utils import parse_llm_json
from ..common.schemas import Insights, Submission

logger = logging.getLogger("nominations.intake.insights")

DEFAULT_MAX_TOKENS = 800
DEFAULT_TEMPERATURE = 0.7


SYSTEM_PROMPT = """You are a senior showrunner and story producer for a cinematic docuseries called "{series_name}" about {series_region}. Given a nomination for a local business or person, your job is to:

- Understand the potential story.
- Suggest an emotional and thematic angle for an episode.
- Propose a one-sentence logline.
- Generate strong interview questions.
- Propose specific b-roll / visual ideas.
- Tag the nomination with themes.
- Suggest a priority score from 1-10 based on story potential.

If you recognize the type of business, you may use general knowledge (e.g. what a yoga studio or coffee shop usually represents) but do not pretend you have actually looked this specific business up online. Make reasonable guesses, but do not fabricate specific facts about the business.

Return ONLY valid JSON with this exact shape (no markdown, no code blocks, just raw JSON):
{{
  "logline": "string - one sentence episode logline",
  "episodeAngle": "string - the story angle to pursue",
  "emotionalTone": "string - the emotional tone (e.g., hopeful, gritty, redemptive)",
  "priorityScore": number 1-10,
  "keyThemes": ["array", "of", "theme", "strings"],
  "suggestedQuestions": ["interview", "questions", "as", "strings"],
  "brollIdeas": ["visual", "shot", "ideas"],
  "researchIdeas": ["things", "to", "research", "further"],
  "notesForShowrunner": "string - additional thoughts, red flags, or potential"
}}"""


def build_user_prompt(submission: Submission) -> str:
    """Render the per-nomination user message. Empty optional lines are dropped."""
    lines = ["Here's a new nomination:", "", f"Business Name: {submission.business_name}"]
    if submission.business_website:
        lines.append(f"Website/Instagram: {submission.business_website}")

    lines += ["", f"Nominated by: {submission.nominator_name} ({submission.nominator_email})"]
    if submission.nominator_phone:
        lines.append(f"Phone: {submission.nominator_phone}")

    lines += ["", "Reason for nomination:", submission.reason, ""]
    if submission.notify_business:
        lines.append("The nominator wants the business notified.")
    if submission.business_contact:
        lines.append(f"Business contact: {submission.business_contact}")

    lines += ["", "Generate showrunner insights for this nomination."]
    return "\n".join(lines)


class InsightGenerator:
    """
    LLM-backed enrichment for nominations.

    Availability follows the underlying LLMClient: no API key for the
    configured provider means no call is ever attempted.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient],
        series_name: str = "What's the 661",
        series_region: str = "Bakersfield, California",
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self._llm = llm_client
        self._system_prompt = SYSTEM_PROMPT.format(
            series_name=series_name, series_region=series_region
        )
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def is_available(self) -> bool:
        return self._llm is not None and self._llm.is_available

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def generate(self, submission: Submission) -> Optional[Insights]:
        """
        Generate insights for a submission.

        Returns:
            Insights, or None when unavailable or on any failure
        """
        if not self.is_available:
            logger.warning("LLM API key is not set; skipping AI enrichment.")
            return None

        try:
            raw = await asyncio.to_thread(
                self._llm.generate,
                build_user_prompt(submission),
                system=self._system_prompt,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as e:
            logger.warning("Error generating AI insights: %s", e)
            return None

        if not raw:
            logger.warning("LLM returned empty content")
            return None

        return self._parse_response(raw)

    def _parse_response(self, raw: str) -> Optional[Insights]:
        data = parse_llm_json(raw)
        if not data:
            logger.warning("Could not parse AI insights from LLM response")
            return None

        try:
            return Insights.model_validate(data)
        except ValidationError as e:
            logger.warning("AI insights did not match the expected shape: %s", e)
            return None
