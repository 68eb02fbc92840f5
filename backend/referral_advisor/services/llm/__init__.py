"""Language Model service module."""
from .base import (
    BaseLLMModel,
    GenerationOptions,
    LLMContextBudgetExceededError,
    LLMDecodeError,
    LLMGenerationError,
    LLMUnavailableError,
)
from .demo import DemoExplanationModel
from .llamacpp import LlamaCppConfig, LlamaCppExplanationService

__all__ = [
    "BaseLLMModel",
    "GenerationOptions",
    "LLMGenerationError",
    "LLMContextBudgetExceededError",
    "LLMDecodeError",
    "LLMUnavailableError",
    "DemoExplanationModel",
    "LlamaCppConfig",
    "LlamaCppExplanationService",
]
