"""
Per-upstream response normalization.

One pure function per resource kind, mapping a raw upstream payload onto
the public JSON shape. A payload missing a required field raises
KeyError/TypeError, which the orchestrator reports as a malformed upstream
response.
"""

from . import catalog, events, lyrics, scrobble

__all__ = ["catalog", "events", "lyrics", "scrobble"]
