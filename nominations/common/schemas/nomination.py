"""
Nomination Schemas

Submission is the sanitized nomination payload; Insights is the optional
showrunner enrichment produced by an LLM. Both accept the camelCase keys used
on the wire.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Hard cap applied to every free-text field before downstream use
MAX_FIELD_LENGTH = 5000

PRIORITY_MIN = 1
PRIORITY_MAX = 10


# ============================================================================
# Submission
# ============================================================================

class Submission(BaseModel):
    """A validated, sanitized nomination. Immutable once built."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    nominator_name: str = Field(..., alias="nominatorName")
    nominator_email: str = Field(..., alias="nominatorEmail")
    nominator_phone: str = Field(default="", alias="nominatorPhone")
    business_name: str = Field(..., alias="businessName")
    business_website: str = Field(default="", alias="businessWebsite")
    reason: str = Field(..., alias="reason")
    notify_business: bool = Field(default=False, alias="notifyBusiness")
    business_contact: str = Field(default="", alias="businessContact")


# ============================================================================
# Insights
# ============================================================================

def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class Insights(BaseModel):
    """Showrunner insights for a nomination"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    logline: str = ""
    episode_angle: str = Field(default="", alias="episodeAngle")
    emotional_tone: str = Field(default="", alias="emotionalTone")
    priority_score: Optional[int] = Field(default=None, alias="priorityScore")
    key_themes: List[str] = Field(default_factory=list, alias="keyThemes")
    suggested_questions: List[str] = Field(default_factory=list, alias="suggestedQuestions")
    broll_ideas: List[str] = Field(default_factory=list, alias="brollIdeas")
    research_ideas: List[str] = Field(default_factory=list, alias="researchIdeas")
    notes_for_showrunner: str = Field(default="", alias="notesForShowrunner")

    @field_validator(
        "logline", "episode_angle", "emotional_tone", "notes_for_showrunner",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator(
        "key_themes", "suggested_questions", "broll_ideas", "research_ideas",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [text for text in (_as_text(v) for v in value) if text]

    @field_validator("priority_score", mode="before")
    @classmethod
    def _clamp_priority(cls, value: Any) -> Optional[int]:
        """Clamp to 1-10; anything non-numeric becomes None"""
        if value is None or isinstance(value, bool):
            return None
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError, OverflowError):
            return None
        return max(PRIORITY_MIN, min(PRIORITY_MAX, score))

    @property
    def has_headline(self) -> bool:
        return bool(
            self.logline or self.episode_angle or self.emotional_tone
            or self.priority_score is not None or self.key_themes
        )
