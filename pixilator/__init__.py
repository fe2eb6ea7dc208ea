"""Pixilator: prompt-refined text-to-image generation service.

Architectural role:
    Top-level package for the HTTP/CLI adapters (`api`), the generation pipeline
    (`core`) and the provider, storage and admission layers it composes.
"""

__version__ = "1.0.0"
