"""Glob compilation and literal prefix extraction."""

from .engine import CompiledGlob, Wildcard, compile_glob
from .prefix import prefix, prefixes

__all__ = ["CompiledGlob", "Wildcard", "compile_glob", "prefix", "prefixes"]
