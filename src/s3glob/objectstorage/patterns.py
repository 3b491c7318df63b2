"""Pattern parsing: turn caller globs into search scopes and filters.

Patterns come in three shapes:

- ``s3://bucket/key/glob*`` URLs, optionally followed by ``?Param=value``
  pairs that are carried along with the scope
- bare key globs such as ``logs/*.gz``, which take their bucket from the
  stream's ``request_params``
- mappings with ``Bucket`` and ``Key`` entries

A string starting with ``!`` is a filter: any key it matches is excluded
from every scope. A filter written as an ``s3://bucket/glob`` location only
excludes keys listed from that bucket.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union
from urllib.parse import parse_qsl

from s3glob.core import get_logger
from s3glob.core.exceptions import ValidationError
from s3glob.globbing import CompiledGlob, compile_glob, prefixes
from s3glob.globbing.engine import NEGATION_MARKER
from s3glob.objectstorage.clients import S3ClientManager

logger = get_logger(__name__)

Pattern = Union[str, Mapping[str, Any]]


def normalize_patterns(patterns: Any) -> list[Pattern]:
    """Wrap a single pattern in a list and type check the result.

    Raises:
        ValidationError: If ``patterns`` is not a pattern or a list of them
    """
    if isinstance(patterns, (str, Mapping)):
        return [patterns]

    if not isinstance(patterns, (list, tuple)):
        raise ValidationError(
            "Patterns must be a string, mapping or list, "
            f"got: {type(patterns).__name__}"
        )

    for pattern in patterns:
        if not isinstance(pattern, (str, Mapping)):
            raise ValidationError(f"Invalid pattern: {pattern!r}")

    return list(patterns)


def is_filter(pattern: Pattern) -> bool:
    return isinstance(pattern, str) and pattern.startswith(NEGATION_MARKER)


def _parse_query(query: str) -> dict[str, str] | None:
    """Parse ``k=v&...`` pairs, or return None if ``query`` is glob text."""
    if not query or any("=" not in part for part in query.split("&")):
        return None
    return dict(parse_qsl(query, keep_blank_values=True))


def parse_glob_url(text: str) -> dict[str, Any]:
    """Turn a string pattern into listing parameters.

    ``?`` is also the single-character wildcard, so a trailing query is only
    read as parameters when every ``&``-separated piece has an ``=``.

    Args:
        text: ``s3://bucket/key-glob[?Param=value...]`` or a bare key glob

    Returns:
        Dict with ``Key`` and, for URLs, ``Bucket`` plus any query parameters
    """
    if "://" not in text:
        return {"Key": text}

    bucket, key, query = S3ClientManager.parse_s3_path(text)
    params = _parse_query(query)
    if params is None:
        if query:
            key = f"{key}?{query}"
        params = {}

    return {**params, "Bucket": bucket, "Key": key}


def resolve_scope(pattern: Pattern, defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge a search pattern over the default parameters and validate it.

    Raises:
        ValidationError: If the merged Key or Bucket is empty
    """
    own = parse_glob_url(pattern) if isinstance(pattern, str) else dict(pattern)
    params = {**defaults, **own}

    if not params.get("Key"):
        raise ValidationError(f"Pattern has no key glob: {pattern!r}")
    if not isinstance(params["Key"], str):
        raise ValidationError(f"Key glob must be a string: {params['Key']!r}")
    if not params.get("Bucket"):
        raise ValidationError(f"Pattern has no bucket: {pattern!r}")

    return params


@dataclass(frozen=True)
class Filter:
    """A negated pattern, optionally tied to one bucket."""

    match: CompiledGlob
    bucket: Optional[str] = None

    def excludes(self, entry: Mapping[str, Any]) -> bool:
        if self.bucket is not None and entry.get("Bucket") != self.bucket:
            return False
        return self.match.match(entry["Key"])


def compile_filter(text: str) -> Filter:
    """Compile ``!key-glob`` or ``!s3://bucket/key-glob`` into a filter.

    Query text on a filter location has no parameters to carry, so it is
    kept as part of the key glob.

    Raises:
        ValidationError: If a filter location has an empty key glob
    """
    body = text[len(NEGATION_MARKER) :]
    if "://" not in body:
        return Filter(match=compile_glob(text))

    bucket, key, query = S3ClientManager.parse_s3_path(body)
    if query:
        key = f"{key}?{query}"
    if not key:
        raise ValidationError(f"Filter has no key glob: {text!r}")
    return Filter(match=compile_glob(NEGATION_MARKER + key), bucket=bucket)


@dataclass(frozen=True)
class SearchScope:
    """A positive pattern resolved to a bucket and compiled key glob."""

    params: dict[str, Any]
    match: CompiledGlob

    @property
    def bucket(self) -> str:
        return self.params["Bucket"]

    @property
    def prefixes(self) -> list[str]:
        return prefixes(self.match)


class PatternSet:
    """Search scopes and filters parsed from caller patterns.

    Args:
        patterns: One pattern or a list of patterns
        request_params: Defaults merged under each search pattern

    Raises:
        ValidationError: If the input is malformed, a search pattern does
            not resolve to a bucket and key, or there are no search patterns
    """

    def __init__(self, patterns: Any, request_params: Mapping[str, Any] | None = None):
        defaults = dict(request_params or {})
        normalized = normalize_patterns(patterns)

        self.filters: tuple[Filter, ...] = tuple(
            compile_filter(pattern) for pattern in normalized if is_filter(pattern)
        )

        scopes = []
        for pattern in normalized:
            if is_filter(pattern):
                continue
            params = resolve_scope(pattern, defaults)
            match = compile_glob(params["Key"], negatable=False)
            scopes.append(SearchScope(params=params, match=match))
        self.scopes: tuple[SearchScope, ...] = tuple(scopes)

        if not self.scopes:
            raise ValidationError("Must have at least 1 non-negative pattern.")

        logger.debug(
            "Patterns parsed",
            scope_count=len(self.scopes),
            filter_count=len(self.filters),
        )
