"""
Configuration Management for the Nominations Intake

Loads configuration from ~/.nominations/config.json and environment variables.
The resulting NominationsConfig is built once at process start and handed to
the orchestrator; business logic never reads the environment directly.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger("nominations.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".nominations"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_CLOUDKIT_ENVIRONMENT = "development"


@dataclass
class SlackConfig:
    """Slack incoming webhook configuration"""
    webhook_url: str = ""


@dataclass
class LLMConfig:
    """LLM provider configuration for showrunner insights"""
    provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"
    max_tokens: int = 800
    temperature: float = 0.7

    def api_key_for(self, provider: Optional[str] = None) -> str:
        """Return the API key for a provider (defaults to the configured one)"""
        provider = (provider or self.provider or "").lower()
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "google": self.google_api_key,
        }.get(provider, "")

    def model_for(self, provider: Optional[str] = None) -> str:
        provider = (provider or self.provider or "").lower()
        return {
            "openai": self.openai_model,
            "anthropic": self.anthropic_model,
            "google": self.google_model,
        }.get(provider, "")


@dataclass
class CloudKitConfig:
    """CloudKit Web Services (server-to-server key) configuration"""
    container_id: str = ""
    key_id: str = ""
    private_key: str = ""
    environment: str = DEFAULT_CLOUDKIT_ENVIRONMENT
    host: str = "api.apple-cloudkit.com"
    record_type: str = "Nomination"


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class SeriesConfig:
    """The docuseries the nominations are for"""
    name: str = "What's the 661"
    region: str = "Bakersfield, California"


@dataclass
class NominationsConfig:
    """Main intake configuration"""
    slack: SlackConfig = field(default_factory=SlackConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    cloudkit: CloudKitConfig = field(default_factory=CloudKitConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    series: SeriesConfig = field(default_factory=SeriesConfig)


def _parse_slack_config(data: dict) -> SlackConfig:
    """Parse slack section from config dict"""
    slack_data = data.get("slack", {})
    return SlackConfig(webhook_url=slack_data.get("webhook_url", ""))


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    defaults = LLMConfig()
    return LLMConfig(
        provider=llm_data.get("provider", defaults.provider),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", defaults.openai_model),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", defaults.anthropic_model),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", defaults.google_model),
        max_tokens=int(llm_data.get("max_tokens", defaults.max_tokens)),
        temperature=float(llm_data.get("temperature", defaults.temperature)),
    )


def _parse_cloudkit_config(data: dict) -> CloudKitConfig:
    """Parse cloudkit section from config dict"""
    ck_data = data.get("cloudkit", {})
    defaults = CloudKitConfig()
    return CloudKitConfig(
        container_id=ck_data.get("container_id", ""),
        key_id=ck_data.get("key_id", ""),
        private_key=ck_data.get("private_key", ""),
        environment=ck_data.get("environment") or defaults.environment,
        host=ck_data.get("host", defaults.host),
        record_type=ck_data.get("record_type", defaults.record_type),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 8080)),
    )


def _parse_series_config(data: dict) -> SeriesConfig:
    series_data = data.get("series", {})
    defaults = SeriesConfig()
    return SeriesConfig(
        name=series_data.get("name", defaults.name),
        region=series_data.get("region", defaults.region),
    )


def _config_path() -> Path:
    override = os.getenv("NOMINATIONS_CONFIG")
    return Path(override).expanduser() if override else CONFIG_PATH


def load_config() -> NominationsConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (NOMINATIONS_CONFIG or ~/.nominations/config.json)
    3. Default values
    """
    config = NominationsConfig()

    path = _config_path()
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)

            config.slack = _parse_slack_config(data)
            config.llm = _parse_llm_config(data)
            config.cloudkit = _parse_cloudkit_config(data)
            config.server = _parse_server_config(data)
            config.series = _parse_series_config(data)
        except (json.JSONDecodeError, IOError, ValueError, AttributeError) as e:
            logger.warning("Failed to load config file %s: %s", path, e)

    # Environment variable overrides
    if os.getenv("SLACK_WEBHOOK_URL"):
        config.slack.webhook_url = os.getenv("SLACK_WEBHOOK_URL")

    _env_llm_map = {
        "NOMINATIONS_LLM_PROVIDER": "provider",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)

    _env_cloudkit_map = {
        "CLOUDKIT_CONTAINER_ID": "container_id",
        "CLOUDKIT_KEY_ID": "key_id",
        "CLOUDKIT_PRIVATE_KEY": "private_key",
        "CLOUDKIT_ENVIRONMENT": "environment",
    }
    for env_var, attr in _env_cloudkit_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.cloudkit, attr, val)

    if os.getenv("NOMINATIONS_HOST"):
        config.server.host = os.getenv("NOMINATIONS_HOST")
    if os.getenv("NOMINATIONS_PORT"):
        config.server.port = int(os.getenv("NOMINATIONS_PORT"))

    return config
