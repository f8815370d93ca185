"""
Slack Message Formatter

Renders a nomination (plus optional insights) as Slack Block Kit JSON.
Pure: the same inputs always produce the same payload.
"""

from typing import Any, Dict, List, Optional

from ..common.schemas import Insights, Submission

INSIGHTS_UNAVAILABLE_TEXT = "_AI insights unavailable for this nomination._"


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _bullets(items: List[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def _summary_text(submission: Submission) -> str:
    business = submission.business_name
    if submission.business_website:
        business += f" ({submission.business_website})"

    nominator = f"{submission.nominator_name} ({submission.nominator_email}"
    if submission.nominator_phone:
        nominator += f", {submission.nominator_phone}"
    nominator += ")"

    notify = "Yes" if submission.notify_business else "No"
    if submission.business_contact:
        notify += f" — Contact: {submission.business_contact}"

    return (
        f"*Business:* {business}\n"
        f"*Nominator:* {nominator}\n"
        f"*Notify business?:* {notify}"
    )


def _headline_text(insights: Insights) -> str:
    parts = []
    if insights.logline:
        parts.append(f"*Logline:* {insights.logline}")
    if insights.episode_angle:
        parts.append(f"*Episode Angle:* {insights.episode_angle}")
    if insights.emotional_tone:
        parts.append(f"*Emotional Tone:* {insights.emotional_tone}")
    if insights.priority_score is not None:
        parts.append(f"*Priority Score:* {insights.priority_score}/10")
    if insights.key_themes:
        parts.append(f"*Key Themes:* {', '.join(insights.key_themes)}")
    return "🤖 *AI Showrunner Insights*\n\n" + "\n\n".join(parts)


def build_insight_blocks(insights: Insights) -> List[Dict[str, Any]]:
    """One block per populated insight category; empty categories are skipped."""
    blocks = []

    if insights.has_headline:
        blocks.append(_section(_headline_text(insights)))

    if insights.suggested_questions:
        blocks.append(_section(
            f"*📝 Suggested Interview Questions:*\n{_bullets(insights.suggested_questions)}"
        ))

    if insights.broll_ideas:
        blocks.append(_section(f"*🎥 B-Roll Ideas:*\n{_bullets(insights.broll_ideas)}"))

    if insights.research_ideas:
        blocks.append(_section(f"*🔍 Research Ideas:*\n{_bullets(insights.research_ideas)}"))

    if insights.notes_for_showrunner:
        blocks.append(_section(f"*📋 Notes for Showrunner:*\n{insights.notes_for_showrunner}"))

    return blocks


def build_slack_message(
    submission: Submission,
    insights: Optional[Insights],
    series_name: str = "What's the 661",
) -> Dict[str, Any]:
    """
    Build the Slack webhook payload for a nomination.

    Args:
        submission: Sanitized nomination
        insights: Showrunner insights, or None if enrichment did not happen
        series_name: Shown in the header block

    Returns:
        {"text": fallback text, "blocks": [...]}
    """
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"🎬 New {series_name} Nomination",
                "emoji": True,
            },
        },
        _section(_summary_text(submission)),
        _section(f"*Reason for nomination:*\n{submission.reason}"),
        {"type": "divider"},
    ]

    if insights is not None:
        blocks.extend(build_insight_blocks(insights))
    else:
        blocks.append({
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": INSIGHTS_UNAVAILABLE_TEXT}],
        })

    return {
        "text": f"New nomination: {submission.business_name}",
        "blocks": blocks,
    }
