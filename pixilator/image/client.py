"""Generic image-provider HTTP client.

Processing flow:
    1. Resolve provider config from `pixilator.llm.provider_config`.
    2. Optionally load API key from configured key file.
    3. Submit JSON payload to `<provider url>/<model>` expecting binary output.
    4. Return raw image bytes or raise on non-200 status.

Error handling strategy:
    - Misconfiguration and HTTP failures raise exceptions for upstream handling.
    - Transport exceptions from `requests` propagate unchanged.

Security considerations:
    - Exceptions include a truncated upstream response body.
"""

import requests

from pixilator.llm.client import build_model_url
from pixilator.llm.provider_config import (
    IMAGE_PROVIDER,
    IMAGE_PROVIDERS,
    IMAGE_REQUEST_TIMEOUT_SECONDS,
    load_key,
)


def send_image_request(
    payload: dict,
    model: str,
    provider: str = IMAGE_PROVIDER,
    timeout: float = IMAGE_REQUEST_TIMEOUT_SECONDS,
) -> bytes:
    """Send an image-generation request to the selected provider.

    Args:
        payload: Provider JSON payload (inputs plus generation parameters).
        model: Model id appended to the provider URL.
        provider: Key into `IMAGE_PROVIDERS`.
        timeout: Transport timeout in seconds.

    Returns:
        Raw image bytes from the response body.

    Error handling:
        - Unknown provider -> `ValueError`
        - Missing/empty configured API key -> `RuntimeError`
        - Non-200 HTTP response or empty body -> `RuntimeError`
    """
    provider_config = IMAGE_PROVIDERS.get(provider)
    if not provider_config:
        raise ValueError(f"Unknown image provider: {provider}")

    key_file = provider_config.get("key_file")
    headers = {
        "Content-Type": "application/json",
        "Accept": "image/png",
    }

    if key_file is not None:
        api_key = load_key(key_file)
        if not api_key:
            raise RuntimeError(f"Image API key file missing or empty: {key_file}")
        headers["Authorization"] = f"Bearer {api_key}"

    response = requests.post(
        build_model_url(provider_config["url"], model),
        json=payload,
        headers=headers,
        timeout=timeout,
    )

    if response.status_code != 200:
        raise RuntimeError(
            f"Image request failed with status {response.status_code}: {response.text[:300]}"
        )

    if not response.content:
        raise RuntimeError("Image request returned an empty body")

    return response.content
