"""Configuration and service factory for the referral advisor."""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Any, Dict

from ..core.logging_utils import log_event
from ..services.llm import (
    BaseLLMModel,
    DemoExplanationModel,
    LlamaCppExplanationService,
    LLMGenerationError,
)

_SUPPORTED_EXPLANATION_MODES = ("disabled", "demo", "live")
_DEFAULT_CORS_ORIGINS = (
    "http://127.0.0.1:5500",
    "http://127.0.0.1:3000",
    "http://localhost:5500",
    "http://localhost:3000",
)

# Singleton service instances
_services: Dict[str, Any] | None = None
_services_lock = threading.Lock()


def _normalize_choice(env_name: str, supported: tuple[str, ...], default: str) -> str:
    raw = os.environ.get(env_name, default).strip().lower()
    if raw in supported:
        return raw
    supported_values = ", ".join(supported)
    raise ValueError(
        f"Unsupported {env_name} value '{raw}'. Supported values: {supported_values}."
    )


def _get_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, str(default))
    try:
        value = float(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be a number") from err
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _get_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        value = int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer") from err
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class ExplanationSettings:
    """Narrative explanation toggles, read once at startup."""

    mode: str = "disabled"
    timeout_s: float = 8.0
    max_new_tokens: int = 256

    @property
    def enabled(self) -> bool:
        return self.mode != "disabled"

    @classmethod
    def from_env(cls) -> "ExplanationSettings":
        return cls(
            mode=_normalize_choice("EXPLANATION_MODE", _SUPPORTED_EXPLANATION_MODES, "disabled"),
            timeout_s=_get_float_env("EXPLANATION_TIMEOUT_S", 8.0),
            max_new_tokens=_get_int_env("EXPLANATION_MAX_NEW_TOKENS", 256),
        )


@dataclass(frozen=True)
class AppSettings:
    """HTTP boundary settings."""

    name: str = "Referral Advisor"
    cors_allowed_origins: tuple[str, ...] = _DEFAULT_CORS_ORIGINS
    max_body_bytes: int = 1024 * 1024
    port: int = 3001
    explanation: ExplanationSettings = ExplanationSettings()

    @classmethod
    def from_env(cls) -> "AppSettings":
        return cls(
            cors_allowed_origins=_get_list_env("CORS_ALLOWED_ORIGINS", _DEFAULT_CORS_ORIGINS),
            max_body_bytes=_get_int_env("MAX_BODY_BYTES", 1024 * 1024),
            port=_get_int_env("PORT", 3001),
            explanation=ExplanationSettings.from_env(),
        )


def _build_llm(settings: ExplanationSettings) -> tuple[BaseLLMModel | None, str | None]:
    """Return (model, load_error). A live model that fails to load is reported, not raised."""
    if settings.mode == "demo":
        return DemoExplanationModel(), None
    if settings.mode == "live":
        try:
            return LlamaCppExplanationService(), None
        except (LLMGenerationError, OSError, ValueError) as err:
            log_event(
                component="config",
                event="explanation_model_unavailable",
                level="WARNING",
                details={"error": str(err)},
            )
            return None, str(err)
    return None, None


def get_services(settings: AppSettings | None = None) -> Dict[str, Any]:
    """
    Factory function to get or initialize service instances.

    Returns a dictionary with:
        - 'settings': AppSettings in effect
        - 'llm': explanation model, or None when disabled/unavailable
        - 'llm_lock': lock serializing access to the model
        - 'llm_load_error': load failure message for live mode, if any
    """
    global _services
    with _services_lock:
        stale = settings is not None and _services is not None and _services["settings"] != settings
        if _services is None or stale:
            resolved = settings or AppSettings.from_env()
            llm, load_error = _build_llm(resolved.explanation)
            _services = {
                "settings": resolved,
                "llm": llm,
                "llm_lock": threading.RLock(),
                "llm_load_error": load_error,
            }
            log_event(
                component="config",
                event="services_ready",
                details={
                    "explanation_mode": resolved.explanation.mode,
                    "llm_loaded": llm is not None,
                },
            )
    return _services


def get_settings() -> AppSettings:
    return get_services()["settings"]


def get_llm_service() -> BaseLLMModel | None:
    return get_services()["llm"]


def reset_services() -> None:
    """Drop cached services so the next call re-reads the environment."""
    global _services
    with _services_lock:
        _services = None
