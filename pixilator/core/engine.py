"""Core generation pipeline: admission, refinement, synthesis, persistence.

Architectural role:
    Provides the single request/response cycle used by the API and CLI layers to
    turn one `GenerationRequest` into an immutable `GenerationResponse`.

Control-flow model (linear, error exits only):
    1. Admission      -> `RateLimitError` when the client is over its window quota.
    2. Validation     -> `ValidationError` for an empty/whitespace prompt. No
                         outbound call happens before this point.
    3. Refine         -> `PromptRefiner.refine`, degrades to the raw prompt.
    4. NegativeResolve-> static per-style lookup.
    5. Synthesize     -> `ImageSynthesizer.synthesize`; `SynthesisError` aborts.
    6. Persist        -> `PersistenceGateway.persist`, degrades to inline image
                         and/or missing id.
    7. Assemble       -> id fallback `temp_<epoch-ms>`, elapsed time since step 1.

Error handling strategy:
    `PixilatorError` subclasses propagate unchanged. Anything else raised inside
    the pipeline is logged and wrapped into `InternalError`.

Concurrency:
    Blocking network work runs in worker threads via `asyncio.to_thread`, so
    concurrent requests never serialize on each other. The rate limiter is the
    only shared mutable state and is safe for concurrent use.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from pixilator.core.errors import InternalError, PixilatorError, RateLimitError, ValidationError
from pixilator.core.schemas import (
    PUBLIC_USER_ID,
    GenerationMetadata,
    GenerationRequest,
    GenerationResponse,
)
from pixilator.image.service import ImageSynthesizer
from pixilator.llm.service import PromptRefiner
from pixilator.prompting.prompt_builder import resolve_negative_prompt
from pixilator.safety.rate_limiter import RateLimiter
from pixilator.storage.gateway import PersistenceGateway
from pixilator.storage.supabase_client import create_supabase_stores


logger = logging.getLogger(__name__)

LOG_PROMPT_CHARS = 80


def _elapsed_ms(started: float, now: float) -> int:
    return max(0, int(round((now - started) * 1000)))


class GenerationOrchestrator:
    """Compose admission, refinement, synthesis and persistence for one request.

    Args:
        rate_limiter: Admission gate, shared across requests for the process.
        refiner: Best-effort prompt enhancer.
        synthesizer: Image generator; the only fatal step.
        persistence: Best-effort image/record writer.
        clock: Wall clock in seconds (temporary ids, `createdAt`).
        monotonic: Monotonic clock in seconds (`processingTimeMs`).
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        refiner: PromptRefiner,
        synthesizer: ImageSynthesizer,
        persistence: PersistenceGateway,
        clock=time.time,
        monotonic=time.monotonic,
        user_id: str = PUBLIC_USER_ID,
    ):
        self.rate_limiter = rate_limiter
        self.refiner = refiner
        self.synthesizer = synthesizer
        self.persistence = persistence
        self._clock = clock
        self._monotonic = monotonic
        self.user_id = user_id

    async def handle(self, request: GenerationRequest, client_key: str) -> GenerationResponse:
        """Run the full pipeline for `request` on behalf of `client_key`.

        Raises:
            RateLimitError: admission denied.
            ValidationError: prompt missing or whitespace-only.
            SynthesisError: image generation failed.
            InternalError: any other unexpected failure.
        """
        started = self._monotonic()

        if not self.rate_limiter.admit(client_key):
            raise RateLimitError(f"Client {client_key} exceeded its request window")

        if not request.prompt or not request.prompt.strip():
            raise ValidationError("Prompt is required")

        logger.info(
            "Generation request: client=%s style=%s ratio=%s model=%s prompt=%r",
            client_key,
            request.style,
            request.aspect_ratio,
            request.model_version,
            request.prompt[:LOG_PROMPT_CHARS],
        )

        try:
            return await self._run(request, started)
        except PixilatorError:
            raise
        except Exception as err:
            logger.exception("Generation pipeline failed unexpectedly")
            raise InternalError(str(err)) from err

    async def _run(self, request: GenerationRequest, started: float) -> GenerationResponse:
        refined_prompt = await asyncio.to_thread(self.refiner.refine, request.prompt)
        negative_prompt = resolve_negative_prompt(request.style)

        image_data_uri = await asyncio.to_thread(
            self.synthesizer.synthesize,
            refined_prompt,
            negative_prompt,
            request.aspect_ratio,
            request.model_version,
        )

        metadata = GenerationMetadata(
            original_prompt=request.prompt,
            refined_prompt=refined_prompt,
            negative_prompt=negative_prompt,
            style=request.style,
            aspect_ratio=request.aspect_ratio,
            model_version=request.model_version,
            processing_time_ms=_elapsed_ms(started, self._monotonic()),
            user_id=self.user_id,
        )

        result = await asyncio.to_thread(self.persistence.persist, image_data_uri, metadata)

        now = self._clock()
        generation_id = result.id or f"temp_{int(now * 1000)}"
        processing_time_ms = _elapsed_ms(started, self._monotonic())

        logger.info(
            "Generation complete: id=%s persisted=%s processing_time_ms=%d",
            generation_id,
            result.id is not None,
            processing_time_ms,
        )

        return GenerationResponse(
            id=generation_id,
            image_url=result.public_url,
            original_prompt=request.prompt,
            refined_prompt=refined_prompt,
            negative_prompt=negative_prompt,
            style=request.style,
            aspect_ratio=request.aspect_ratio,
            model_version=request.model_version,
            user_id=self.user_id,
            created_at=datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            processing_time_ms=processing_time_ms,
        )


def build_default_orchestrator(rate_limiter: RateLimiter | None = None) -> GenerationOrchestrator:
    """Wire the pipeline from environment configuration.

    Storage collaborators are `None` when Supabase is not configured, in which
    case every generation degrades to an inline image with a temporary id.
    """
    object_store, table = create_supabase_stores()
    return GenerationOrchestrator(
        rate_limiter=rate_limiter or RateLimiter(),
        refiner=PromptRefiner(),
        synthesizer=ImageSynthesizer(),
        persistence=PersistenceGateway(object_store=object_store, table=table),
    )
