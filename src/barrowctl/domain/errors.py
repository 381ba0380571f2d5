"""Domain exceptions.

Only structurally invalid input is an error at this layer; unrecognized
lines and dangling references are tolerated elsewhere.
"""

from __future__ import annotations


class InstructionError(ValueError):
    """An instruction document or command array is not well-formed."""
