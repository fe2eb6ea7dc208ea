"""Provider-specific transport client for text-generation requests.

Architectural role:
    Executes HTTP requests against the configured text-generation provider and
    returns the parsed JSON body.

Model invocation flow:
    `service.PromptRefiner.refine` -> `send_text_request(payload, model)` ->
    provider endpoint -> parsed JSON (list or object, provider dependent).

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with the
    configured timeout.

Failure handling model:
    Unlike response parsing in `service`, this module raises: unknown provider and
    missing keys raise `RuntimeError`, HTTP failures raise
    `requests.exceptions.RequestException`. Degradation is the caller's decision.
"""

from urllib.parse import quote

import requests

from pixilator.llm.provider_config import (
    REQUEST_TIMEOUT_SECONDS,
    TEXT_PROVIDER,
    TEXT_PROVIDERS,
    load_key,
)


def build_model_url(template: str, model: str) -> str:
    """Fill a provider URL template with a URL-encoded model id (slashes kept)."""
    return template.format(model=quote(model, safe="/"))


def send_text_request(
    payload: dict,
    model: str,
    provider: str = TEXT_PROVIDER,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
):
    """Send one text-generation request and return the decoded JSON body.

    Args:
        payload: Provider JSON payload (`inputs` plus generation `parameters`).
        model: Model id appended to the provider base URL.
        provider: Key into `TEXT_PROVIDERS`.
        timeout: Transport timeout in seconds.

    Returns:
        Decoded JSON response (typically `[{"generated_text": ...}]`).

    Error handling:
        - Unknown provider -> `RuntimeError`
        - Configured key file but no key available -> `RuntimeError`
        - Non-2xx status -> `requests.exceptions.HTTPError`
        - Transport failure/timeout -> `requests.exceptions.RequestException`
        - Non-JSON body -> `ValueError`
    """
    config = TEXT_PROVIDERS.get(provider)
    if not config:
        raise RuntimeError(f"Unknown text provider: {provider}")

    headers = {"Content-Type": "application/json"}

    key_file = config.get("key_file")
    if key_file:
        api_key = load_key(key_file)
        if not api_key:
            raise RuntimeError(f"{provider.upper()} KEY NOT FOUND ({key_file})")
        headers["Authorization"] = f"Bearer {api_key}"

    response = requests.post(
        build_model_url(config["url"], model),
        headers=headers,
        json=payload,
        timeout=timeout,
    )

    response.raise_for_status()
    return response.json()
