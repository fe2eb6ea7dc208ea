"""Data contracts for the generation pipeline.

Architectural role:
    Defines the request accepted by `engine.GenerationOrchestrator`, the immutable
    response/record it produces, and the small value objects exchanged with the
    persistence layer.

Naming:
    Python attributes are snake_case; JSON uses the camelCase aliases
    (`aspectRatio`, `modelVersion`, `imageUrl`, ...). Serialize with
    `model_dump(by_alias=True)`.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pixilator.llm.provider_config import DEFAULT_IMAGE_MODEL
from pixilator.prompting.presets import DEFAULT_ASPECT_RATIO_ID, DEFAULT_STYLE_ID


PUBLIC_USER_ID = "public"


class GenerationRequest(BaseModel):
    """Inbound generation request. Transient; never persisted as-is.

    `prompt` defaults to an empty string so that a missing prompt reaches the
    pipeline's validation step instead of failing schema parsing. Selection
    fields fall back to their defaults only when missing or null; any other
    value is echoed back, and unknown styles resolve to the default negative
    prompt.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = ""
    style: str = DEFAULT_STYLE_ID
    aspect_ratio: str = Field(DEFAULT_ASPECT_RATIO_ID, alias="aspectRatio")
    model_version: str = Field(DEFAULT_IMAGE_MODEL, alias="modelVersion")

    @field_validator("prompt", mode="before")
    @classmethod
    def _prompt_none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("style", "aspect_ratio", "model_version", mode="before")
    @classmethod
    def _null_to_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class GenerationRecord(BaseModel):
    """One stored generation, as listed by the public library."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    image_url: str = Field(alias="imageUrl")
    original_prompt: str = Field(alias="originalPrompt")
    refined_prompt: str = Field(alias="refinedPrompt")
    negative_prompt: str = Field(alias="negativePrompt")
    style: str
    aspect_ratio: str = Field(alias="aspectRatio")
    model_version: str = Field(alias="modelVersion")
    user_id: str = Field(PUBLIC_USER_ID, alias="userId")
    created_at: str = Field(alias="createdAt")
    processing_time_ms: int | None = Field(None, alias="processingTimeMs")

    @classmethod
    def from_row(cls, row: dict) -> "GenerationRecord":
        """Build a record from a `generations` table row (snake_case columns)."""
        return cls(
            id=str(row.get("id", "")),
            image_url=row.get("image_url") or "",
            original_prompt=row.get("original_prompt") or "",
            refined_prompt=row.get("refined_prompt") or "",
            negative_prompt=row.get("negative_prompt") or "",
            style=row.get("style") or DEFAULT_STYLE_ID,
            aspect_ratio=row.get("aspect_ratio") or DEFAULT_ASPECT_RATIO_ID,
            model_version=row.get("model_version") or "",
            user_id=row.get("user_id") or PUBLIC_USER_ID,
            created_at=str(row.get("created_at") or ""),
            processing_time_ms=row.get("processing_time"),
        )


class GenerationResponse(GenerationRecord):
    """Result of one successful pipeline run. Immutable after creation.

    `id` is the store-issued id, or `temp_<epoch-ms>` when persistence failed.
    """

    processing_time_ms: int = Field(alias="processingTimeMs")


class GenerationHistoryItem(BaseModel):
    """Client-side cached copy of a response (no user identity)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    image_url: str = Field(alias="imageUrl")
    original_prompt: str = Field(alias="originalPrompt")
    refined_prompt: str = Field(alias="refinedPrompt")
    negative_prompt: str = Field(alias="negativePrompt")
    style: str
    aspect_ratio: str = Field(alias="aspectRatio")
    model_version: str = Field(alias="modelVersion")
    created_at: str = Field(alias="createdAt")
    processing_time_ms: int | None = Field(None, alias="processingTimeMs")

    @classmethod
    def from_response(cls, response: GenerationRecord) -> "GenerationHistoryItem":
        return cls.model_validate(response.model_dump(exclude={"user_id"}))


@dataclass(frozen=True)
class GenerationMetadata:
    """Everything persisted alongside an image, minus the image itself."""

    original_prompt: str
    refined_prompt: str
    negative_prompt: str
    style: str
    aspect_ratio: str
    model_version: str
    processing_time_ms: int
    user_id: str = PUBLIC_USER_ID

    def to_row(self, image_url: str) -> dict:
        return {
            "user_id": self.user_id,
            "original_prompt": self.original_prompt,
            "refined_prompt": self.refined_prompt,
            "negative_prompt": self.negative_prompt,
            "image_url": image_url,
            "style": self.style,
            "aspect_ratio": self.aspect_ratio,
            "model_version": self.model_version,
            "processing_time": self.processing_time_ms,
        }


@dataclass(frozen=True)
class PersistenceResult:
    """Outcome of `PersistenceGateway.persist`; `id` is `None` when the insert failed."""

    id: str | None
    public_url: str
