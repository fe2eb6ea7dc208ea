"""Image synthesizer used by the generation pipeline.

Role in pipeline:
    - Maps the requested aspect ratio to pixel dimensions.
    - Builds the inference payload with fixed guidance/step parameters.
    - Invokes the provider client and normalizes bytes into a PNG data URI.

Error handling strategy:
    Unlike prompt refinement, synthesis failure is fatal for the request: every
    provider/transport error is re-raised as `SynthesisError`.

Determinism:
    Dimension lookup and payload assembly are deterministic. Output content is
    externally non-deterministic.
"""

import base64
import binascii
import logging

from pixilator.core.errors import SynthesisError
from pixilator.image.client import send_image_request
from pixilator.llm.provider_config import IMAGE_PROVIDER
from pixilator.prompting.presets import get_aspect_ratio


logger = logging.getLogger(__name__)

IMAGE_MIME_TYPE = "image/png"
GUIDANCE_SCALE = 7
NUM_INFERENCE_STEPS = 30


def dimensions_for(aspect_ratio_id) -> tuple[int, int]:
    """Return `(width, height)` for a ratio id; unknown ids map to 1:1."""
    ratio = get_aspect_ratio(aspect_ratio_id)
    return ratio.width, ratio.height


def to_data_uri(image_bytes: bytes, mime_type: str = IMAGE_MIME_TYPE) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def from_data_uri(data_uri: str) -> bytes:
    """Decode a base64 data URI back to bytes.

    Raises:
        ValueError: not a base64 data URI, or the payload is not valid base64.
    """
    if not isinstance(data_uri, str) or not data_uri.startswith("data:"):
        raise ValueError("Not a data URI")

    header, sep, data = data_uri.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Data URI is not base64 encoded")

    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as err:
        raise ValueError(f"Invalid base64 payload: {err}") from err


class ImageSynthesizer:
    """Generate one image per call through the configured inference provider."""

    def __init__(self, provider: str = IMAGE_PROVIDER, send=send_image_request):
        self.provider = provider
        self._send = send

    def build_payload(self, prompt: str, negative_prompt: str, aspect_ratio_id) -> dict:
        width, height = dimensions_for(aspect_ratio_id)
        return {
            "inputs": prompt,
            "parameters": {
                "negative_prompt": negative_prompt,
                "width": width,
                "height": height,
                "guidance_scale": GUIDANCE_SCALE,
                "num_inference_steps": NUM_INFERENCE_STEPS,
            },
            "options": {"wait_for_model": True},
        }

    def synthesize(self, prompt: str, negative_prompt: str, aspect_ratio_id, model_id: str) -> str:
        """Return the generated image as a `data:image/png;base64,...` URI.

        Raises:
            SynthesisError: on any provider, transport or configuration failure.
        """
        payload = self.build_payload(prompt, negative_prompt, aspect_ratio_id)

        try:
            image_bytes = self._send(payload, model_id, provider=self.provider)
        except Exception as err:
            logger.exception("Image synthesis failed for model=%s", model_id)
            raise SynthesisError(str(err)) from err

        if not image_bytes:
            raise SynthesisError("Image provider returned no data")

        return to_data_uri(image_bytes)
