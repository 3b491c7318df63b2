"""Literal prefix extraction from compiled globs."""

from itertools import takewhile

from .engine import PATH_SEPARATOR, CompiledGlob, Segment


def prefix(segments: tuple[Segment, ...]) -> str:
    """Join the leading literal segments of a branch.

    Args:
        segments: One branch of a compiled glob

    Returns:
        The literal key prefix, or an empty string if the branch starts with
        a wildcard
    """
    literals = takewhile(lambda segment: isinstance(segment, str), segments)
    return PATH_SEPARATOR.join(literals)  # type: ignore[arg-type]


def prefixes(compiled: CompiledGlob) -> list[str]:
    """Return one prefix per brace alternative, in alternation order."""
    return [prefix(branch) for branch in compiled.branches]
