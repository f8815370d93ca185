"""Shared fixtures for intake tests."""

from typing import Any, Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec


# ============================================================================
# Fakes
# ============================================================================

class FakeNotifier:
    """Stands in for SlackNotifier"""

    def __init__(self, configured: bool = True, error: Optional[BaseException] = None):
        self._configured = configured
        self._error = error
        self.sent: List[Dict[str, Any]] = []
        self.channel_name = "slack"

    @property
    def is_configured(self) -> bool:
        return self._configured

    def config_status(self) -> Dict[str, Any]:
        return {"webhookUrl": self._configured}

    async def send(self, message: Dict[str, Any]) -> None:
        self.sent.append(message)
        if self._error is not None:
            raise self._error


class FakeRecordStore:
    """Stands in for CloudKitClient"""

    def __init__(self, configured: bool = True, error: Optional[BaseException] = None):
        self._configured = configured
        self._error = error
        self.created: List[tuple] = []
        self.channel_name = "cloudkit"
        self.environment = "development"

    @property
    def is_configured(self) -> bool:
        return self._configured

    def config_status(self) -> Dict[str, Any]:
        return {"containerId": self._configured, "keyId": self._configured, "privateKey": self._configured}

    async def create_nomination(self, submission, insights=None, status: str = "new") -> str:
        self.created.append((submission, insights, status))
        if self._error is not None:
            raise self._error
        return "REC-1"


class FakeInsightGenerator:
    """Stands in for InsightGenerator"""

    def __init__(self, insights=None, error: Optional[BaseException] = None):
        self._insights = insights
        self._error = error
        self.calls = 0

    @property
    def is_available(self) -> bool:
        return True

    async def generate(self, submission):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._insights


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_notifier():
    return FakeNotifier


@pytest.fixture
def fake_record_store():
    return FakeRecordStore


@pytest.fixture
def fake_insight_generator():
    return FakeInsightGenerator


@pytest.fixture(scope="session")
def ec_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_pem(ec_private_key) -> str:
    """SEC1 ("EC PRIVATE KEY") PEM, as openssl ecparam -genkey writes it"""
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def ec_pkcs8_pem(ec_private_key) -> str:
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def valid_payload() -> Dict[str, Any]:
    return {
        "nominatorName": "Jo",
        "nominatorEmail": "jo@x.com",
        "businessName": "Jo's Cafe",
        "reason": "Great coffee",
    }


@pytest.fixture
def full_payload() -> Dict[str, Any]:
    return {
        "nominatorName": "  Maria Lopez ",
        "nominatorEmail": "Maria.Lopez@Example.COM",
        "nominatorPhone": "661-555-0100",
        "businessName": "Dewar's Candy Shop",
        "businessWebsite": "@dewarscandy",
        "reason": "Four generations making taffy on Chester Ave.",
        "notifyBusiness": True,
        "businessContact": "owner@dewars.example",
    }


@pytest.fixture
def sample_submission():
    from nominations.common.schemas import Submission

    return Submission(
        nominator_name="Maria Lopez",
        nominator_email="maria.lopez@example.com",
        nominator_phone="661-555-0100",
        business_name="Dewar's Candy Shop",
        business_website="@dewarscandy",
        reason="Four generations making taffy on Chester Ave.",
        notify_business=True,
        business_contact="owner@dewars.example",
    )


@pytest.fixture
def minimal_submission():
    from nominations.common.schemas import Submission

    return Submission(
        nominator_name="Jo",
        nominator_email="jo@x.com",
        business_name="Jo's Cafe",
        reason="Great coffee",
    )


@pytest.fixture
def sample_insights():
    from nominations.common.schemas import Insights

    return Insights.model_validate({
        "logline": "A century-old candy counter keeps a downtown sweet.",
        "episodeAngle": "Family legacy versus a changing downtown",
        "emotionalTone": "nostalgic, hopeful",
        "priorityScore": 8,
        "keyThemes": ["legacy", "family", "downtown"],
        "suggestedQuestions": ["Who taught you to pull taffy?", "What has changed on Chester?"],
        "brollIdeas": ["Taffy pulling machine close-ups"],
        "researchIdeas": ["Founding year and original location"],
        "notesForShowrunner": "Strong visual hook.",
    })


@pytest.fixture
def intake_config():
    from nominations.common.config import NominationsConfig

    config = NominationsConfig()
    config.slack.webhook_url = "https://hooks.slack.com/services/T000/B000/SECRETWEBHOOK"
    return config
