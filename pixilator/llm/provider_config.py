"""Provider/runtime configuration for the inference layers.

Architectural role:
    Centralizes provider selection, model ids and credential lookup for
    `pixilator.llm` (prompt refinement) and `pixilator.image` (synthesis).

Model call flow integration:
    - `llm.client.send_text_request` consumes `TEXT_PROVIDERS` and key resolution.
    - `image.client.send_image_request` consumes `IMAGE_PROVIDERS`.
    - `core.engine` uses `DEFAULT_IMAGE_MODEL` when a request omits the model.

Determinism:
    Deterministic for a fixed process environment and key files. Values are resolved
    at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; callers decide whether that is
    fatal (synthesis) or degradable (refinement).
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


HF_BASE_URL = os.getenv("HF_BASE_URL", "https://api-inference.huggingface.co").rstrip("/")

# Primary routing controls.
TEXT_PROVIDER = os.getenv("TEXT_PROVIDER", "huggingface")
IMAGE_PROVIDER = os.getenv("IMAGE_PROVIDER", "huggingface")

PROMPT_ENHANCEMENT_MODEL = os.getenv("PROMPT_ENHANCEMENT_MODEL", "microsoft/DialoGPT-medium")
PROMPT_ENHANCEMENT_ENABLED = _env_flag("PROMPT_ENHANCEMENT_ENABLED", True)

DEFAULT_IMAGE_MODEL = os.getenv("DEFAULT_IMAGE_MODEL", "tencent/HunyuanImage-3.0")

REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "120"))
IMAGE_REQUEST_TIMEOUT_SECONDS = float(os.getenv("IMAGE_REQUEST_TIMEOUT_SECONDS", "300"))

# Hugging Face-compatible endpoint maps. `{model}` is the URL-encoded model id.
TEXT_PROVIDERS = {

    "huggingface": {
        "url": HF_BASE_URL + "/models/{model}",
        "key_file": "config/huggingface.key"
    },

    "local": {
        "url": "http://127.0.0.1:8080/models/{model}",
        "key_file": None
    }

}

IMAGE_PROVIDERS = {

    "huggingface": {
        "url": HF_BASE_URL + "/models/{model}",
        "key_file": "config/huggingface.key"
    },

    "local": {
        "url": "http://127.0.0.1:7860/models/{model}",
        "key_file": None
    }

}


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/huggingface.key` -> `HUGGINGFACE_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip()
