"""Configuration module for the referral advisor."""
from .settings import (
    AppSettings,
    ExplanationSettings,
    get_llm_service,
    get_services,
    get_settings,
    reset_services,
)

__all__ = [
    "AppSettings",
    "ExplanationSettings",
    "get_services",
    "get_settings",
    "get_llm_service",
    "reset_services",
]
