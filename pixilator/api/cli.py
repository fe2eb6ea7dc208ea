"""
Interactive CLI client for Pixilator.

Architectural role:
- Provides a terminal interface over the generation pipeline.
- Keeps the client-local generation history (`pixilator.memory.history`).
- Delegates generation to `GenerationOrchestrator.handle` in-process.

Interface responsibilities:
- Maintain the active style / aspect ratio / model selection.
- Expose local commands for selection, history and the public library.
- Render generation results and distinct failure messages.

Request lifecycle (per line):
1. Read stdin.
2. Handle local commands (`exit`/`quit`, `/style`, `/ratio`, `/model`, `/styles`,
   `/history`, `/clear history`, `/library`).
3. Send any other text as a prompt through the pipeline with the active
   selection, then append the result to local history.

Error handling strategy:
- Validation, rate-limit and generation failures print distinct messages.
- EOF and keyboard interrupts terminate the loop without traceback output.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import sys
from dataclasses import dataclass

from pixilator.core.engine import GenerationOrchestrator, build_default_orchestrator
from pixilator.core.errors import PixilatorError, RateLimitError, SynthesisError, ValidationError
from pixilator.core.schemas import GenerationRequest
from pixilator.llm.provider_config import DEFAULT_IMAGE_MODEL
from pixilator.memory.history import GenerationHistory
from pixilator.prompting.presets import (
    ASPECT_RATIOS,
    ASPECT_RATIOS_BY_ID,
    DEFAULT_ASPECT_RATIO_ID,
    DEFAULT_STYLE_ID,
    IMAGE_MODELS,
    STYLE_PRESETS,
    STYLES_BY_ID,
)
from pixilator.storage.library import GenerationLibrary
from pixilator.storage.supabase_client import create_supabase_stores


CLI_CLIENT_KEY = "cli"
URL_PREVIEW_CHARS = 96

MSG_EMPTY_PROMPT = "Please enter a prompt."
MSG_RATE_LIMITED = "Rate limit exceeded, try again later."
MSG_GENERATION_FAILED = "Generation failed."


@dataclass
class CliSession:
    """Active selection plus the collaborators a CLI session talks to."""

    orchestrator: GenerationOrchestrator
    history: GenerationHistory
    library: GenerationLibrary
    style: str = DEFAULT_STYLE_ID
    aspect_ratio: str = DEFAULT_ASPECT_RATIO_ID
    model_version: str = DEFAULT_IMAGE_MODEL


def _preview(url: str) -> str:
    if url.startswith("data:"):
        return f"{url[:URL_PREVIEW_CHARS]}... (inline image, {len(url)} chars)"
    return url


# =========================================================
# COMMANDS
# =========================================================

def show_catalog(session: CliSession) -> None:
    print("Styles:")
    for style in STYLE_PRESETS:
        marker = " (active)" if style.id == session.style else ""
        print(f" - {style.id}: {style.description}{marker}")
    print("Aspect ratios:")
    for ratio in ASPECT_RATIOS:
        marker = " (active)" if ratio.id == session.aspect_ratio else ""
        print(f" - {ratio.id}: {ratio.width}x{ratio.height}{marker}")
    print("Models:")
    for model in IMAGE_MODELS:
        marker = " (active)" if model.id == session.model_version else ""
        print(f" - {model.id}{marker}")


def show_history(session: CliSession) -> None:
    items = session.history.items()
    if not items:
        print("No generations yet. Create your first image!")
        return

    print(f"{len(items)} recent generation{'s' if len(items) != 1 else ''}:")
    for item in items:
        print(f" [{item.created_at}] {item.style} {item.aspect_ratio} - {item.original_prompt}")
        print(f"    {_preview(item.image_url)}")


def show_library(session: CliSession) -> None:
    page = session.library.fetch_page()
    if page.get("error"):
        print(f"Library unavailable: {page['error']}")
        return

    if not page["images"]:
        print("The public library is empty.")
        return

    for image in page["images"]:
        print(f" [{image['createdAt']}] {image['style']} - {image['originalPrompt']}")
        print(f"    {_preview(image['imageUrl'])}")


def _select(session: CliSession, parts: list[str], attr: str, known: dict, label: str) -> None:
    if len(parts) < 2:
        print(f"Usage: /{label} <id>. Current {label}: {getattr(session, attr)}")
        return

    value = parts[1]
    if known is not None and value not in known:
        print(f"Unknown {label} '{value}'. Use /styles to list options.")
        return

    setattr(session, attr, value)
    print(f"Switched {label} to {value}")


def generate(session: CliSession, prompt: str) -> None:
    request = GenerationRequest(
        prompt=prompt,
        style=session.style,
        aspect_ratio=session.aspect_ratio,
        model_version=session.model_version,
    )

    try:
        response = asyncio.run(session.orchestrator.handle(request, CLI_CLIENT_KEY))
    except ValidationError:
        print(MSG_EMPTY_PROMPT)
        return
    except RateLimitError:
        print(MSG_RATE_LIMITED)
        return
    except SynthesisError:
        print(MSG_GENERATION_FAILED)
        return
    except PixilatorError as err:
        print(f"{MSG_GENERATION_FAILED} ({err.code})")
        return

    session.history.add(response)

    print(f"Refined prompt:  {response.refined_prompt}")
    print(f"Negative prompt: {response.negative_prompt}")
    print(f"Image: {_preview(response.image_url)}")
    print(f"id={response.id} time={response.processing_time_ms}ms")


def dispatch(session: CliSession, line: str) -> bool:
    """Handle one input line. Returns `False` when the session should end."""
    text = line.strip()
    lowered = text.lower()

    if lowered in ("exit", "quit"):
        return False

    if lowered == "/clear history":
        session.history.clear()
        print("History cleared.")
        return True

    if lowered.startswith("/"):
        parts = text.split()
        command = parts[0].lower()

        if command == "/style":
            _select(session, parts, "style", STYLES_BY_ID, "style")
        elif command == "/ratio":
            _select(session, parts, "aspect_ratio", ASPECT_RATIOS_BY_ID, "ratio")
        elif command == "/model":
            # Unlisted model ids are forwarded to the provider unchanged.
            _select(session, parts, "model_version", None, "model")
        elif command == "/styles":
            show_catalog(session)
        elif command == "/history":
            show_history(session)
        elif command == "/library":
            show_library(session)
        else:
            print(f"Unknown command {command}")
        return True

    generate(session, text)
    return True


# =========================================================
# UTF-8 SAFE OUTPUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except Exception:
        pass


# =========================================================
# MAIN
# =========================================================

def main():
    """Run the interactive loop until `exit`, EOF or interrupt."""
    session = CliSession(
        orchestrator=build_default_orchestrator(),
        history=GenerationHistory(),
        library=GenerationLibrary(table=create_supabase_stores()[1]),
    )

    print("Pixilator started. (Type 'exit' to quit, '/styles' for options)")
    print(f"Style: {session.style}  Ratio: {session.aspect_ratio}  Model: {session.model_version}")
    print(f"History entries loaded: {len(session.history)}")
    print("-" * 60)

    while True:
        try:
            line = input("Prompt: ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if not dispatch(session, line):
            print("Shutting down.")
            break

        print("-" * 60)


if __name__ == "__main__":
    main()
