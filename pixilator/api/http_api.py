"""
HTTP API adapter for the Pixilator generation pipeline.

Architectural role:
- Expose the generation, library and catalog endpoints.
- Parse request bodies and derive the client key used for admission.
- Delegate generation work to `GenerationOrchestrator.handle`.
- Map the pipeline error taxonomy to HTTP status codes.

Endpoint responsibilities:
- `POST /generate`: run one generation and return the `GenerationResponse`.
- `GET /generate`: liveness message.
- `GET /library`: page through the public library (never hard-fails).
- `GET /styles`: static style / aspect-ratio / model catalog.

Error mapping (`POST /generate`):
- Malformed JSON or body fields -> HTTP 400 `{error}`.
- `ValidationError` (missing/blank prompt) -> HTTP 400 `{error}`.
- `RateLimitError` -> HTTP 429 `{error}`.
- `SynthesisError` / `InternalError` -> HTTP 500 `{error, code}`.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Configures root logging once at import (`LOG_LEVEL`).
- Request bodies are logged only when `DEBUG == "true"`.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaValidationError

from pixilator.core.engine import GenerationOrchestrator, build_default_orchestrator
from pixilator.core.errors import PixilatorError, RateLimitError, ValidationError
from pixilator.core.schemas import GenerationRequest
from pixilator.prompting.presets import catalog
from pixilator.storage.library import DEFAULT_PAGE_SIZE, GenerationLibrary
from pixilator.storage.supabase_client import create_supabase_stores


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_MESSAGE = "Pixilator Image Generation API"
MAX_PAGE_SIZE = 100


def client_key_from(request: Request) -> str:
    """Return the admission key: first `X-Forwarded-For` hop, else peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def _page_param(raw: str | None, default: int, minimum: int, maximum: int | None = None) -> int:
    """Parse a paging query value leniently, clamped into range. Bad input uses `default`."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default

    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _error(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    content = {"error": message}
    if code:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    orchestrator: GenerationOrchestrator | None = None,
    library: GenerationLibrary | None = None,
) -> FastAPI:
    """Build the FastAPI application around one orchestrator and library.

    Collaborators default to environment-configured instances. The orchestrator,
    and therefore its rate limiter, lives for the lifetime of the app.
    """
    if orchestrator is None:
        orchestrator = build_default_orchestrator()
    if library is None:
        library = GenerationLibrary(table=create_supabase_stores()[1])

    app = FastAPI(title="Pixilator")
    app.state.orchestrator = orchestrator
    app.state.library = library

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================================
    # Generation
    # ============================================================

    @app.get("/generate")
    def generate_info():
        return {"message": API_MESSAGE}

    @app.post("/generate")
    async def generate(request: Request):
        """
        Run one generation request.

        Request lifecycle:
        1. Parse JSON body into `GenerationRequest` (camelCase fields).
        2. Derive the client key for admission.
        3. Delegate to the orchestrator (admission, validation, pipeline).
        4. Map pipeline errors to status codes; serialize the response by alias.
        """
        try:
            body = await request.json()
        except Exception:
            return _error(400, "Invalid JSON body")

        if DEBUG:
            logger.info("Incoming generation body: %r", body)

        if not isinstance(body, dict):
            return _error(400, "Request body must be a JSON object")

        try:
            generation_request = GenerationRequest.model_validate(body)
        except SchemaValidationError as err:
            logger.info("Rejected malformed generation body: %s", err.errors())
            return _error(400, "Invalid request body")

        client_key = client_key_from(request)

        try:
            response = await orchestrator.handle(generation_request, client_key)
        except ValidationError as err:
            return _error(err.status_code, err.public_message)
        except RateLimitError as err:
            return _error(err.status_code, err.public_message)
        except PixilatorError as err:
            logger.error("Generation failed for client %s: %s (%s)", client_key, err, err.code)
            return _error(err.status_code, err.public_message, err.code)

        return response.model_dump(by_alias=True)

    # ============================================================
    # Library / catalog
    # ============================================================

    @app.get("/library")
    def get_library(
        limit: str | None = None,
        offset: str | None = None,
        style: str | None = None,
        model_version: str | None = Query(None, alias="modelVersion"),
    ):
        return library.fetch_page(
            limit=_page_param(limit, DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE),
            offset=_page_param(offset, 0, 0),
            style=style or None,
            model_version=model_version or None,
        )

    @app.get("/styles")
    def get_styles():
        return catalog()

    return app


app = create_app()


def run():
    """Console entrypoint: serve `app` with uvicorn (`HOST`/`PORT` env)."""
    uvicorn.run(
        "pixilator.api.http_api:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
