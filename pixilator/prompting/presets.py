"""Static generation catalog: style presets, aspect ratios and image models.

Design constraints:
    - Tables are immutable (frozen dataclasses in tuples).
    - Structural invariants are checked once, at import, by `validate_catalog`;
      a broken table fails startup instead of surfacing mid-pipeline.

Invariants:
    - Style ids are unique; each preset has non-empty, distinct `prompt` and
      `negative_prompt`.
    - Aspect-ratio ids are unique; `width / height` matches the `W:H` value within
      `ASPECT_RATIO_TOLERANCE`.
"""

from dataclasses import asdict, dataclass


ASPECT_RATIO_TOLERANCE = 0.1

DEFAULT_STYLE_ID = "realistic"
DEFAULT_ASPECT_RATIO_ID = "1:1"


@dataclass(frozen=True)
class StylePreset:
    id: str
    name: str
    description: str
    prompt: str
    negative_prompt: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "prompt": self.prompt,
            "negativePrompt": self.negative_prompt,
        }


@dataclass(frozen=True)
class AspectRatio:
    id: str
    name: str
    value: str
    width: int
    height: int

    def expected_ratio(self) -> float:
        """Return the ratio encoded in `value` (for example `16:9` -> 1.777...)."""
        w, h = self.value.split(":")
        return int(w) / int(h)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ImageModel:
    id: str
    name: str

    def to_dict(self) -> dict:
        return asdict(self)


STYLE_PRESETS = (
    StylePreset(
        id="realistic",
        name="Realistic",
        description="Photorealistic, high-quality images",
        prompt="photorealistic, high quality, detailed, professional photography",
        negative_prompt="cartoon, anime, painting, drawing, sketch, low quality, blurry, distorted",
    ),
    StylePreset(
        id="cinematic",
        name="Cinematic",
        description="Movie-like dramatic scenes",
        prompt="cinematic, dramatic lighting, film noir, professional cinematography",
        negative_prompt="amateur, low quality, poor lighting, unrealistic, flat lighting",
    ),
    StylePreset(
        id="artistic",
        name="Artistic",
        description="Creative and artistic interpretations",
        prompt="artistic, creative, unique style, masterful composition",
        negative_prompt="generic, boring, uncreative, amateur, low quality",
    ),
    StylePreset(
        id="vaporwave",
        name="Vaporwave",
        description="Retro-futuristic aesthetic",
        prompt="vaporwave, neon, retro, 80s, synthwave, cyberpunk",
        negative_prompt="modern, contemporary, realistic, natural colors, muted tones",
    ),
)

ASPECT_RATIOS = (
    AspectRatio(id="1:1", name="Square (1:1)", value="1:1", width=1024, height=1024),
    AspectRatio(id="16:9", name="Widescreen (16:9)", value="16:9", width=1024, height=576),
    AspectRatio(id="9:16", name="Portrait (9:16)", value="9:16", width=576, height=1024),
    AspectRatio(id="4:3", name="Standard (4:3)", value="4:3", width=1024, height=768),
    AspectRatio(id="3:4", name="Portrait (3:4)", value="3:4", width=768, height=1024),
)

IMAGE_MODELS = (
    ImageModel(id="tencent/HunyuanImage-3.0", name="HunyuanImage 3.0"),
    ImageModel(id="black-forest-labs/FLUX.1-dev", name="FLUX.1-dev"),
)


def validate_catalog(styles=STYLE_PRESETS, ratios=ASPECT_RATIOS) -> None:
    """Check catalog invariants, raising `ValueError` on the first violation."""
    style_ids = [s.id for s in styles]
    if len(set(style_ids)) != len(style_ids):
        raise ValueError(f"Duplicate style preset ids: {style_ids}")

    for style in styles:
        if not style.prompt.strip() or not style.negative_prompt.strip():
            raise ValueError(f"Style preset {style.id!r} has an empty prompt")
        if style.prompt == style.negative_prompt:
            raise ValueError(f"Style preset {style.id!r} prompt equals its negative prompt")

    ratio_ids = [r.id for r in ratios]
    if len(set(ratio_ids)) != len(ratio_ids):
        raise ValueError(f"Duplicate aspect ratio ids: {ratio_ids}")

    for ratio in ratios:
        if ratio.width <= 0 or ratio.height <= 0:
            raise ValueError(f"Aspect ratio {ratio.id!r} has non-positive dimensions")
        if abs(ratio.width / ratio.height - ratio.expected_ratio()) >= ASPECT_RATIO_TOLERANCE:
            raise ValueError(
                f"Aspect ratio {ratio.id!r}: {ratio.width}x{ratio.height} does not match {ratio.value}"
            )

    if DEFAULT_STYLE_ID not in style_ids:
        raise ValueError(f"Default style {DEFAULT_STYLE_ID!r} missing from presets")
    if DEFAULT_ASPECT_RATIO_ID not in ratio_ids:
        raise ValueError(f"Default aspect ratio {DEFAULT_ASPECT_RATIO_ID!r} missing from table")


validate_catalog()

STYLES_BY_ID = {style.id: style for style in STYLE_PRESETS}
ASPECT_RATIOS_BY_ID = {ratio.id: ratio for ratio in ASPECT_RATIOS}


def get_aspect_ratio(ratio_id) -> AspectRatio:
    """Return the aspect ratio for `ratio_id`, falling back to the square entry."""
    return ASPECT_RATIOS_BY_ID.get(ratio_id) or ASPECT_RATIOS_BY_ID[DEFAULT_ASPECT_RATIO_ID]


def catalog() -> dict:
    """Return the full catalog in its JSON shape."""
    return {
        "styles": [s.to_dict() for s in STYLE_PRESETS],
        "aspectRatios": [r.to_dict() for r in ASPECT_RATIOS],
        "models": [m.to_dict() for m in IMAGE_MODELS],
    }
