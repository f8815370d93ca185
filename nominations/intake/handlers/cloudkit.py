"""
CloudKit Handler

Writes nominations to a CloudKit public database using a server-to-server
key. Best-effort: callers treat every outcome as non-fatal.

Signing protocol (CloudKit Web Services, SignatureV1):
1. body      = compact JSON of the modify request
2. digest    = base64(SHA-256(body))
3. timestamp = ISO-8601 UTC, whole seconds ("2025-01-31T18:04:05Z")
4. message   = "{timestamp}:{digest}:{path}"
5. signature = base64(ECDSA-P256-SHA256(message)) with the tenant key
6. POST body with the key id, timestamp and signature headers
"""

import base64
import binascii
import hashlib
import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from ...common.schemas import Insights, Submission
from .base import BaseHandler, DispatchError, preview

logger = logging.getLogger("nominations.intake.handlers.cloudkit")

API_VERSION = "1"
DATABASE = "public"

HEADER_KEY_ID = "X-Apple-CloudKit-Request-KeyID"
HEADER_DATE = "X-Apple-CloudKit-Request-ISO8601Date"
HEADER_SIGNATURE = "X-Apple-CloudKit-Request-SignatureV1"

STATUS_NEW = "new"

_PEM_RE = re.compile(
    r"-----BEGIN ([A-Z0-9 ]+)-----(.*?)-----END \1-----", re.DOTALL
)


class CloudKitError(DispatchError):
    """CloudKit rejected the request or a record operation."""


# =============================================================================
# Key material
# =============================================================================

def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1].strip()
    return value


def _unescape_newlines(value: str) -> str:
    return (
        value.replace("\\r\\n", "\n")
        .replace("\\n", "\n")
        .replace("\r\n", "\n")
    )


def detect_key_format(raw: Optional[str]) -> str:
    """
    Classify how a private key was supplied.

    Returns one of: "missing", "pem", "escaped_pem", "base64", "unknown".
    Only the shape is inspected; no key material is returned.
    """
    if not raw or not raw.strip():
        return "missing"
    value = _strip_quotes(raw.strip())
    if "-----BEGIN" in value:
        return "escaped_pem" if "\\n" in value else "pem"
    try:
        base64.b64decode("".join(_unescape_newlines(value).split()), validate=True)
        return "base64"
    except (binascii.Error, ValueError):
        return "unknown"


def _der_label(der: bytes) -> str:
    """
    Pick the PEM label for an unframed DER private key.

    SEC1 (EC):   SEQUENCE { INTEGER 1, OCTET STRING ... }
    PKCS#1 RSA:  SEQUENCE { INTEGER 0, INTEGER modulus ... }
    PKCS#8:      SEQUENCE { INTEGER 0, SEQUENCE algorithm ... }
    """
    if len(der) < 6 or der[0] != 0x30:
        raise ValueError("private key is not a DER sequence")
    offset = 2 if der[1] < 0x80 else 2 + (der[1] & 0x7F)
    version = der[offset:offset + 3]
    next_tag = der[offset + 3] if len(der) > offset + 3 else None

    if version == b"\x02\x01\x01":
        return "EC PRIVATE KEY"
    if version == b"\x02\x01\x00" and next_tag == 0x02:
        return "RSA PRIVATE KEY"
    return "PRIVATE KEY"


def _frame(label: str, b64: str) -> str:
    lines = [b64[i:i + 64] for i in range(0, len(b64), 64)]
    return "\n".join([f"-----BEGIN {label}-----", *lines, f"-----END {label}-----"]) + "\n"


def normalize_private_key(raw: str) -> str:
    """
    Normalize private key material into a canonical PEM block.

    Accepted variants:
    - PEM with real newlines
    - PEM with literal "\\n" (or "\\r\\n") escapes, as env files often store it
    - PEM with CRLF line endings
    - Any of the above wrapped in single or double quotes
    - PEM whose base64 body was re-wrapped or collapsed onto one line
    - Bare base64 DER with no framing (SEC1, PKCS#1 or PKCS#8; label inferred)

    Raises:
        ValueError: empty input, malformed PEM, or undecodable base64
    """
    if not raw or not raw.strip():
        raise ValueError("private key is empty")

    value = _unescape_newlines(_strip_quotes(raw.strip()))

    if "-----BEGIN" in value:
        match = _PEM_RE.search(value)
        if not match:
            raise ValueError("private key has a malformed PEM block")
        label, body = match.group(1).strip(), match.group(2)
        return _frame(label, "".join(body.split()))

    b64 = "".join(value.split())
    try:
        der = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("private key is neither PEM nor base64")
    return _frame(_der_label(der), b64)


def load_private_key(raw: str):
    """Normalize and load a private key (EC or RSA)."""
    pem = normalize_private_key(raw)
    return serialization.load_pem_private_key(pem.encode("ascii"), password=None)


# =============================================================================
# Signing
# =============================================================================

def canonical_json(body: Dict[str, Any]) -> str:
    """Compact JSON; the exact bytes sent are the bytes digested"""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


def body_digest(body: str) -> str:
    return base64.b64encode(hashlib.sha256(body.encode("utf-8")).digest()).decode("ascii")


def iso8601_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp truncated to whole seconds"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def signing_message(timestamp: str, digest: str, path: str) -> str:
    return f"{timestamp}:{digest}:{path}"


def sign_message(message: str, private_key) -> str:
    """Sign with SHA-256 and return the base64 signature"""
    data = message.encode("utf-8")
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        signature = private_key.sign(data, ec.ECDSA(hashes.SHA256()))
    elif isinstance(private_key, rsa.RSAPrivateKey):
        signature = private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    else:
        raise ValueError(f"Unsupported private key type: {type(private_key).__name__}")
    return base64.b64encode(signature).decode("ascii")


@dataclass
class SignedRequest:
    """A fully signed request, ready to send"""
    url: str
    path: str
    body: str
    timestamp: str
    digest: str
    signature: str
    headers: Dict[str, str]

    @property
    def message(self) -> str:
        return signing_message(self.timestamp, self.digest, self.path)


# =============================================================================
# Record construction
# =============================================================================

def _field(value: Any, field_type: str) -> Dict[str, Any]:
    return {"value": value, "type": field_type}


def build_record_fields(
    submission: Submission,
    insights: Optional[Insights],
    submitted_at_ms: int,
    status: str = STATUS_NEW,
) -> Dict[str, Dict[str, Any]]:
    """
    Map a submission (and insights) to typed CloudKit record fields.

    Optional submission fields and empty insight fields are omitted.
    """
    fields = {
        "businessName": _field(submission.business_name, "STRING"),
        "nominatorName": _field(submission.nominator_name, "STRING"),
        "nominatorEmail": _field(submission.nominator_email, "STRING"),
        "reason": _field(submission.reason, "STRING"),
        "status": _field(status, "STRING"),
        "submittedAt": _field(submitted_at_ms, "TIMESTAMP"),
        "notifyBusiness": _field(1 if submission.notify_business else 0, "INT64"),
    }

    optional = {
        "nominatorPhone": submission.nominator_phone,
        "businessWebsite": submission.business_website,
        "businessContact": submission.business_contact,
    }
    for name, value in optional.items():
        if value:
            fields[name] = _field(value, "STRING")

    if insights is None:
        return fields

    scalars = {
        "aiLogline": insights.logline,
        "aiEpisodeAngle": insights.episode_angle,
        "aiEmotionalTone": insights.emotional_tone,
        "aiNotesForShowrunner": insights.notes_for_showrunner,
    }
    for name, value in scalars.items():
        if value:
            fields[name] = _field(value, "STRING")

    if insights.priority_score is not None:
        fields["aiPriorityScore"] = _field(insights.priority_score, "INT64")

    lists: Dict[str, List[str]] = {
        "aiKeyThemes": insights.key_themes,
        "aiSuggestedQuestions": insights.suggested_questions,
        "aiBrollIdeas": insights.broll_ideas,
        "aiResearchIdeas": insights.research_ideas,
    }
    for name, values in lists.items():
        if values:
            fields[name] = _field(list(values), "STRING_LIST")

    return fields


# =============================================================================
# Client
# =============================================================================

class CloudKitClient(BaseHandler):
    """
    Signed CloudKit Web Services client for nomination records.

    Not configured (any of container id, key id, key missing) is a normal
    state: the orchestrator skips the write.
    """

    def __init__(
        self,
        container_id: str = "",
        key_id: str = "",
        private_key: str = "",
        environment: str = "development",
        host: str = "api.apple-cloudkit.com",
        record_type: str = "Nomination",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__("cloudkit")
        self._container_id = container_id
        self._key_id = key_id
        self._raw_private_key = private_key
        self._environment = environment or "development"
        self._host = host
        self._record_type = record_type
        self._transport = transport
        self._private_key = None

    @classmethod
    def from_config(cls, cloudkit_config, transport=None) -> "CloudKitClient":
        return cls(
            container_id=cloudkit_config.container_id,
            key_id=cloudkit_config.key_id,
            private_key=cloudkit_config.private_key,
            environment=cloudkit_config.environment,
            host=cloudkit_config.host,
            record_type=cloudkit_config.record_type,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._container_id and self._key_id and self._raw_private_key)

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def records_path(self) -> str:
        return (
            f"/database/{API_VERSION}/{self._container_id}/"
            f"{self._environment}/{DATABASE}/records/modify"
        )

    def config_status(self) -> Dict[str, Any]:
        return {
            "containerId": bool(self._container_id),
            "keyId": bool(self._key_id),
            "privateKey": bool(self._raw_private_key),
            "environment": self._environment,
            "containerIdPreview": preview(self._container_id, 12),
            "keyIdPreview": preview(self._key_id, 6),
            "privateKeyFormat": detect_key_format(self._raw_private_key),
        }

    def _signing_key(self):
        if self._private_key is None:
            self._private_key = load_private_key(self._raw_private_key)
        return self._private_key

    def build_create_body(
        self,
        submission: Submission,
        insights: Optional[Insights] = None,
        status: str = STATUS_NEW,
        submitted_at_ms: Optional[int] = None,
    ) -> Dict[str, Any]:
        if submitted_at_ms is None:
            submitted_at_ms = int(time.time() * 1000)
        return {
            "operations": [
                {
                    "operationType": "create",
                    "record": {
                        "recordType": self._record_type,
                        "fields": build_record_fields(
                            submission, insights, submitted_at_ms, status=status
                        ),
                    },
                }
            ]
        }

    def sign_request(self, body: Dict[str, Any], now: Optional[datetime] = None) -> SignedRequest:
        """
        Serialize and sign a request body.

        Raises:
            ValueError: private key missing or unreadable
        """
        path = self.records_path
        payload = canonical_json(body)
        digest = body_digest(payload)
        timestamp = iso8601_timestamp(now)
        signature = sign_message(signing_message(timestamp, digest, path), self._signing_key())

        return SignedRequest(
            url=f"https://{self._host}{path}",
            path=path,
            body=payload,
            timestamp=timestamp,
            digest=digest,
            signature=signature,
            headers={
                "Content-Type": "application/json",
                HEADER_KEY_ID: self._key_id,
                HEADER_DATE: timestamp,
                HEADER_SIGNATURE: signature,
            },
        )

    async def create_nomination(
        self,
        submission: Submission,
        insights: Optional[Insights] = None,
        status: str = STATUS_NEW,
    ) -> str:
        """
        Create a nomination record.

        Returns:
            The recordName CloudKit assigned

        Raises:
            CloudKitError: non-2xx response or a per-record server error
            ValueError: client not configured or key unreadable
            httpx.HTTPError: transport failure
        """
        if not self.is_configured:
            raise ValueError("CloudKit is not configured")

        signed = self.sign_request(self.build_create_body(submission, insights, status=status))

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                signed.url,
                content=signed.body.encode("utf-8"),
                headers=signed.headers,
            )

        if not response.is_success:
            raise CloudKitError(
                f"CloudKit returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            raise CloudKitError(
                "CloudKit returned a non-JSON response",
                status_code=response.status_code,
                body=response.text,
            )

        records = data.get("records", []) if isinstance(data, dict) else []
        for record in records:
            if record.get("serverErrorCode"):
                raise CloudKitError(
                    f"CloudKit record error {record['serverErrorCode']}: {record.get('reason', '')}",
                    status_code=response.status_code,
                    body=response.text,
                )

        record_name = records[0].get("recordName", "") if records else ""
        logger.info("CloudKit record created: %s", record_name or "(unnamed)")
        return record_name
