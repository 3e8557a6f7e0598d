"""Ikebana study catalog artifact engine.

This package turns a snapshot of cataloged studies ("works") into:
- progress statistics per graduation level
- a printable booklet (PDF, one page per represented study)
- a shareable annotated image per work

Form input, storage sync and any GUI are out of scope; the CLI drives the
engine from a JSON catalog file.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
