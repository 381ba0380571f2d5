"""Domain layer — barrow model, commands, parsers, and the merge engine.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
