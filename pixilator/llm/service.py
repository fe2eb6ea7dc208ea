"""Best-effort prompt refinement on top of the text-generation client.

Architectural role:
    Turns a raw user prompt into a more descriptive image prompt before synthesis.
    This is the only consumer of `pixilator.llm.client` in the pipeline.

Model call flow:
    raw prompt -> instruction template (`prompting.prompt_builder`) ->
    `client.send_text_request(...)` -> `generated_text` extraction.

Failure handling:
    Refinement never fails the caller. Transport errors, non-success statuses,
    malformed bodies and empty outputs all degrade to the original prompt and are
    logged. Callers only ever observe a string.

Determinism:
    Payload construction and fallback selection are deterministic. Generated text
    is model-dependent and non-deterministic.
"""

import logging

from pixilator.llm.client import send_text_request
from pixilator.llm.provider_config import (
    PROMPT_ENHANCEMENT_ENABLED,
    PROMPT_ENHANCEMENT_MODEL,
    TEXT_PROVIDER,
)
from pixilator.prompting.prompt_builder import build_enhancement_prompt


logger = logging.getLogger(__name__)

ENHANCEMENT_MAX_LENGTH = 150
ENHANCEMENT_TEMPERATURE = 0.7


def extract_generated_text(data) -> str | None:
    """Return the `generated_text` field from a text-generation response.

    Accepts both shapes the inference API uses: a list of result objects
    (first item wins) or a single result object. Anything else yields `None`.
    """
    if isinstance(data, list):
        data = data[0] if data else None

    if not isinstance(data, dict):
        return None

    text = data.get("generated_text")
    if not isinstance(text, str) or not text:
        return None

    return text


class PromptRefiner:
    """Enhance prompts through an external text model, degrading to the input.

    Args:
        model: Text-generation model id.
        provider: Key into `TEXT_PROVIDERS`.
        enabled: When `False`, `refine` returns the raw prompt without any call.
        send: Transport callable, injectable for tests.
    """

    def __init__(
        self,
        model: str = PROMPT_ENHANCEMENT_MODEL,
        provider: str = TEXT_PROVIDER,
        enabled: bool = PROMPT_ENHANCEMENT_ENABLED,
        send=send_text_request,
    ):
        self.model = model
        self.provider = provider
        self.enabled = enabled
        self._send = send

    def build_payload(self, raw_prompt: str) -> dict:
        return {
            "inputs": build_enhancement_prompt(raw_prompt),
            "parameters": {
                "max_length": ENHANCEMENT_MAX_LENGTH,
                "temperature": ENHANCEMENT_TEMPERATURE,
            },
        }

    def refine(self, raw_prompt: str) -> str:
        """Return an enhanced prompt, or `raw_prompt` unchanged on any failure.

        Failure scenarios (all absorbed):
            - Transport error, timeout, non-2xx status, missing key.
            - Malformed JSON or unexpected response shape.
            - Missing or empty `generated_text`.
        """
        if not self.enabled:
            return raw_prompt

        try:
            data = self._send(self.build_payload(raw_prompt), self.model, provider=self.provider)
        except Exception:
            logger.exception("Prompt enhancement failed; using original prompt")
            return raw_prompt

        refined = extract_generated_text(data)
        if refined is None:
            logger.warning("Prompt enhancement returned no generated_text; using original prompt")
            return raw_prompt

        return refined
