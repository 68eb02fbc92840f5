"""Local GGUF explanation model through llama.cpp."""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path

from .base import (
    BaseLLMModel,
    GenerationOptions,
    LLMContextBudgetExceededError,
    LLMDecodeError,
    LLMGenerationError,
    LLMUnavailableError,
    apply_stop_sequences,
)


@dataclass(frozen=True)
class LlamaCppConfig:
    """Configuration for llama.cpp backend."""

    gguf_path: Path
    n_ctx: int = 4096
    n_threads: int = 0
    n_batch: int = 128
    max_new_tokens: int = 256
    gpu_layers: int = -1
    context_margin: int = 64

    @classmethod
    def from_env(cls) -> "LlamaCppConfig":
        gguf_path_raw = os.getenv("EXPLAINER_GGUF_PATH", "")
        if not gguf_path_raw:
            raise LLMUnavailableError(
                "EXPLAINER_GGUF_PATH is required for the live explanation backend."
            )
        gguf_path = Path(gguf_path_raw)
        if not gguf_path.exists():
            raise LLMUnavailableError(
                f"EXPLAINER_GGUF_PATH does not exist: {gguf_path}"
            )

        return cls(
            gguf_path=gguf_path,
            n_ctx=_get_int_env("EXPLAINER_N_CTX", 4096),
            n_threads=_get_int_env("EXPLAINER_N_THREADS", 0),
            n_batch=_get_int_env("EXPLAINER_N_BATCH", 128),
            max_new_tokens=_get_int_env("EXPLANATION_MAX_NEW_TOKENS", 256),
            gpu_layers=_get_int_env("EXPLAINER_GPU_LAYERS", -1),
            context_margin=_get_int_env("EXPLAINER_CONTEXT_MARGIN", 64),
        )


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{name} must be an integer") from err


class LlamaCppExplanationService(BaseLLMModel):
    """Local explanation model using llama.cpp (GGUF)."""

    def __init__(self, config: LlamaCppConfig | None = None) -> None:
        self.config = config or LlamaCppConfig.from_env()
        self._generate_lock = threading.Lock()

        try:
            from llama_cpp import Llama  # type: ignore
        except Exception as err:
            raise LLMUnavailableError(
                "llama_cpp is required for the live explanation backend. "
                "Install llama-cpp-python."
            ) from err

        n_threads = self.config.n_threads or (os.cpu_count() or 1)

        self.client = Llama(
            model_path=str(self.config.gguf_path),
            n_ctx=self.config.n_ctx,
            n_threads=n_threads,
            n_batch=self.config.n_batch,
            n_gpu_layers=self.config.gpu_layers,
            verbose=False,
        )

    @staticmethod
    def _is_context_overflow_error(message: str) -> bool:
        lowered = message.lower()
        return (
            "requested tokens" in lowered and "exceed context window" in lowered
        ) or "context window" in lowered

    @staticmethod
    def _is_decode_error(message: str) -> bool:
        lowered = message.lower()
        return "llama_decode returned -1" in lowered or "decode" in lowered

    def _estimate_prompt_tokens(self, prompt: str) -> int:
        try:
            return len(self.client.tokenize(prompt.encode("utf-8")))
        except Exception:
            # Tokenizer not exposed; use a rough chars-per-token estimate.
            return max(1, len(prompt) // 4)

    def _resolve_max_tokens(self, prompt: str, requested_max_tokens: int) -> int:
        prompt_tokens = self._estimate_prompt_tokens(prompt)
        available = self.config.n_ctx - prompt_tokens - self.config.context_margin
        if available < 1:
            raise LLMContextBudgetExceededError(
                "Prompt exceeds llama.cpp context budget."
            )
        if requested_max_tokens < 1:
            raise LLMContextBudgetExceededError(
                "Requested output tokens must be positive."
            )
        return min(requested_max_tokens, available)

    def _generate_once(
        self,
        prompt: str,
        generation_options: GenerationOptions,
        max_tokens: int,
        stops: list[str],
    ) -> str:
        temperature = (
            generation_options.temperature
            if generation_options.temperature is not None
            else 0.2
        )
        request_kwargs: dict[str, object] = {
            "max_tokens": max_tokens,
            "temperature": temperature,
            "top_p": 1.0,
            "stop": stops,
        }

        if generation_options.messages and hasattr(self.client, "create_chat_completion"):
            response = self.client.create_chat_completion(
                messages=[
                    {"role": message.get("role", "user"), "content": message.get("content", "")}
                    for message in generation_options.messages
                ],
                **request_kwargs,
            )
            text = (
                response.get("choices", [{}])[0]
                .get("message", {})
                .get("content", "")
            )
        else:
            response = self.client(prompt, **request_kwargs)
            text = response.get("choices", [{}])[0].get("text", "")
        return apply_stop_sequences((text or "").strip(), stops)

    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        lock = getattr(self, "_generate_lock", None)
        if lock is None:
            lock = threading.Lock()
            self._generate_lock = lock
        with lock:
            generation_options = options or GenerationOptions()
            stops = list(generation_options.stop) if generation_options.stop else ["</s>"]
            max_tokens = (
                generation_options.max_new_tokens
                if generation_options.max_new_tokens is not None
                else self.config.max_new_tokens
            )
            try:
                bounded_tokens = self._resolve_max_tokens(prompt, max_tokens)
                return self._generate_once(prompt, generation_options, bounded_tokens, stops)
            except LLMGenerationError:
                raise
            except Exception as err:
                message = str(err)
                if self._is_context_overflow_error(message):
                    raise LLMContextBudgetExceededError(message) from err
                if self._is_decode_error(message):
                    raise LLMDecodeError(message) from err
                raise LLMGenerationError(message) from err
