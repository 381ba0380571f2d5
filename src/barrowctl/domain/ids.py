"""Slug ids for caverns and carddons.

Ids are derived from display names: lowercase, every run of
non-alphanumeric characters collapsed to one dash, no leading or
trailing dashes. Slugging is idempotent, so an id that is already
slug-shaped passes through unchanged.
"""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Derive a slug id from *name*.

    Accented letters are folded to their ASCII base first (NFKD), so
    ``"Dûn Hall"`` becomes ``"dun-hall"``. Returns ``""`` when nothing
    alphanumeric survives.
    """
    text = unicodedata.normalize("NFKD", str(name))
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_ALNUM.sub("-", text).strip("-")
