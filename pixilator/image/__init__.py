"""Image generation adapter package.

Scope:
    Provides the text-to-image provider client and the synthesizer used by the
    generation pipeline (`pixilator.core.engine`).

Non-goals:
    - No retries or job polling; one synchronous inference call per request.
    - No persistence; generated images leave this package as data URIs.
"""
