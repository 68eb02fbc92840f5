"""Offline explanation backend used for demos."""
from .base import BaseLLMModel, GenerationOptions

DEMO_EXPLANATION = (
    "This explanation is generated in DEMO mode (no model call).\n\n"
    "Based on the confirmed clinical findings and patient context, the decision engine "
    "identified genetic red flags that may justify a referral for genetic counseling.\n\n"
    "This explanation is provided for educational purposes only.\n"
    "Final clinical decisions remain the responsibility of the physician."
)


class DemoExplanationModel(BaseLLMModel):
    """Returns a fixed explanation without loading any model."""

    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        return DEMO_EXPLANATION
