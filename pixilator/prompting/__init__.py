"""Prompt assembly package.

Holds the static style/aspect-ratio/model catalog (`presets`) and the
deterministic prompt helpers built on it (`prompt_builder`).
"""
