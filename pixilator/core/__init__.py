"""Core orchestration package.

Architectural role:
    Exposes the generation pipeline that sits between API/CLI entrypoints and the
    lower-level subsystems (admission, refinement, synthesis, persistence).

Composition:
    - `engine`: `GenerationOrchestrator`, the request/response cycle.
    - `schemas`: request/response/record contracts shared across layers.
    - `errors`: the error taxonomy surfaced to callers.

Package import itself is side-effect free.
"""
