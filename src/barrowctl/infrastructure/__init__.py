"""Infrastructure layer: barrow file storage, placement graph.

This layer depends on stdlib, pydantic models from the domain layer and
third-party libs (NetworkX). It must never import from services,
commands, or output.
"""
