"""Pipeline error taxonomy.

Only these errors terminate a generation request with a non-200 status.
Refinement and persistence failures are not exceptions: they degrade in place.

HTTP mapping (applied by `pixilator.api.http_api`):
    - `ValidationError` -> 400
    - `RateLimitError`  -> 429
    - `SynthesisError`  -> 500, code `GENERATION_FAILED`
    - `InternalError`   -> 500, code `INTERNAL_ERROR`
"""


class PixilatorError(Exception):
    """Base class for errors surfaced to API/CLI callers."""

    status_code = 500
    code = "INTERNAL_ERROR"
    public_message = "Internal server error"


class ValidationError(PixilatorError):
    status_code = 400
    code = "VALIDATION_ERROR"
    public_message = "Prompt is required"


class RateLimitError(PixilatorError):
    status_code = 429
    code = "RATE_LIMITED"
    public_message = "Rate limit exceeded. Please try again later."


class SynthesisError(PixilatorError):
    """Outbound image generation failed; there is no image to return."""

    code = "GENERATION_FAILED"
    public_message = "Image generation failed"


class InternalError(PixilatorError):
    """Unexpected failure inside the pipeline, wrapped for the caller."""
