"""Admission package.

Contains the per-client rate limiter used by orchestration to decide whether a
generation request may proceed before any outbound call is made.
"""
