"""Command line launcher for the TMDb trailer channel."""

from __future__ import annotations

from .__main__ import main

__all__ = ["main"]
