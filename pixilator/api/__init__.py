"""Pixilator API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP (`http_api`) and terminal
  (`cli`) clients.
- Performs transport-level parsing and response shaping.
- Delegates the generation pipeline to `pixilator.core.engine`.
"""
