"""Prompt helpers used by the generation pipeline.

This module is intentionally narrow: it only builds strings from already
validated inputs. Model invocation and fallbacks happen in `pixilator.llm`.

Design constraints:
    - Deterministic construction for identical inputs.
    - No hidden side effects (no I/O, no global state mutation).

Prompt safety model:
    User text is interpolated as a raw string; the enhancement instruction is a
    fixed prefix and the user prompt always comes last.
"""

from pixilator.prompting.presets import DEFAULT_STYLE_ID, STYLES_BY_ID


# =========================================================
# ENHANCEMENT INSTRUCTION
# =========================================================

ENHANCEMENT_INSTRUCTION = "Enhance this image prompt to be more detailed and descriptive: "


def build_enhancement_prompt(prompt: str) -> str:
    """Embed a raw user prompt into the enhancement instruction template."""
    return f"{ENHANCEMENT_INSTRUCTION}{prompt}"


# =========================================================
# NEGATIVE PROMPTS
# =========================================================
# Static per-style lookup. Unknown or missing style ids resolve to the
# default (`realistic`) entry; this is a default, not an error.

def resolve_negative_prompt(style_id) -> str:
    """Return the negative prompt for `style_id`.

    Total and pure: never raises, same input always yields the same string.
    """
    preset = STYLES_BY_ID.get(style_id) if isinstance(style_id, str) else None
    if preset is None:
        preset = STYLES_BY_ID[DEFAULT_STYLE_ID]
    return preset.negative_prompt
