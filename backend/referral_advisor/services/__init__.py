"""Referral advisor services (explanation LLM backends)."""
from .llm import (
    BaseLLMModel,
    DemoExplanationModel,
    GenerationOptions,
    LlamaCppExplanationService,
    LLMContextBudgetExceededError,
    LLMDecodeError,
    LLMGenerationError,
    LLMUnavailableError,
)

__all__ = [
    "BaseLLMModel",
    "GenerationOptions",
    "LLMGenerationError",
    "LLMContextBudgetExceededError",
    "LLMDecodeError",
    "LLMUnavailableError",
    "DemoExplanationModel",
    "LlamaCppExplanationService",
]
