"""Glob compilation and matching for object keys.

Matching is delegated to ``wcmatch``; brace alternatives are expanded with
``bracex`` so each alternative can be split into path segments. A segment is
either a literal string or a :class:`Wildcard`, which is what the prefix
extraction in :mod:`s3glob.globbing.prefix` walks over.
"""

from dataclasses import dataclass
from typing import Union

import bracex
from wcmatch import glob

from s3glob.core.exceptions import ValidationError

# Keys are always '/'-separated, whatever platform we run on.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.FORCEUNIX

NEGATION_MARKER = "!"
PATH_SEPARATOR = "/"

# Upper bound on brace expansions, shared by compilation and matching.
EXPANSION_LIMIT = 1000


@dataclass(frozen=True)
class Wildcard:
    """A path segment containing glob magic."""

    text: str


Segment = Union[str, Wildcard]


@dataclass(frozen=True)
class CompiledGlob:
    """A glob pattern ready for matching against object keys.

    Attributes:
        pattern: Glob text, without any negation marker
        negate: True when the source pattern was marked with ``!``
        branches: One segment sequence per brace alternative, in
            expansion order
    """

    pattern: str
    negate: bool
    branches: tuple[tuple[Segment, ...], ...]

    def match(self, key: str) -> bool:
        """Check whether ``key`` matches the glob, ignoring negation."""
        return glob.globmatch(
            key, self.pattern, flags=GLOB_FLAGS, limit=EXPANSION_LIMIT
        )


def split_segments(pattern: str) -> tuple[Segment, ...]:
    """Split a brace-free pattern into literal and wildcard segments."""
    return tuple(
        Wildcard(part) if glob.is_magic(part, flags=GLOB_FLAGS) else part
        for part in pattern.split(PATH_SEPARATOR)
    )


def compile_glob(text: str, negatable: bool = True) -> CompiledGlob:
    """Compile a glob pattern, stripping a leading negation marker.

    Args:
        text: Glob pattern such as ``data/{2023,2024}/*.csv`` or ``!**/tmp/*``
        negatable: When False a leading ``!`` is kept as part of the pattern

    Returns:
        CompiledGlob for the pattern

    Raises:
        ValidationError: If braces expand to more than ``EXPANSION_LIMIT``
            alternatives
    """
    negate = negatable and text.startswith(NEGATION_MARKER)
    pattern = text[len(NEGATION_MARKER) :] if negate else text

    try:
        expansions = bracex.expand(pattern, keep_escapes=True, limit=EXPANSION_LIMIT)
    except bracex.ExpansionLimitException as e:
        raise ValidationError(
            f"Pattern expands to more than {EXPANSION_LIMIT} alternatives: {pattern}"
        ) from e

    branches = tuple(split_segments(expansion) for expansion in expansions)
    return CompiledGlob(pattern=pattern, negate=negate, branches=branches)
