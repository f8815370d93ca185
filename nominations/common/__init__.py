"""
Nominations Common Module

Shared infrastructure for the intake service.
"""

from .config import NominationsConfig, load_config
from .llm_client import LLMClient

__all__ = [
    "NominationsConfig",
    "load_config",
    "LLMClient",
]
