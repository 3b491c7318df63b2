"""Stream S3 objects whose keys match shell-glob patterns.

Patterns are split into literal key prefixes so that listing happens
server-side on the narrowest prefix possible; entries coming back are then
matched against the full globs, filtered by negated (``!``) patterns and
deduplicated before they are yielded.

Recommended Usage:
    >>> from s3glob import GlobStream, S3ClientConfig, S3ClientManager
    >>> client = S3ClientManager(S3ClientConfig(aws_profile="prod")).client
    >>> stream = GlobStream(
    ...     ["s3://bucket/data/{2023,2024}/*.csv", "!**/scratch/*"], client=client
    ... )
    >>> async for entry in stream:
    ...     print(entry["Key"], entry["Size"])

For scripts, :func:`glob_objects` collects the whole stream into a list.
"""

__version__ = "0.1.0"

from .core.exceptions import FormatError, S3GlobError, ValidationError
from .globbing import CompiledGlob, compile_glob, prefix, prefixes
from .objectstorage import (
    GlobStream,
    ListingClient,
    PatternSet,
    S3ClientConfig,
    S3ClientManager,
    ScanState,
    glob_objects,
)
from .schemas import GlobStreamOptions

__all__ = [
    # Streaming
    "GlobStream",
    "GlobStreamOptions",
    "ScanState",
    "glob_objects",
    # Patterns and globs
    "CompiledGlob",
    "PatternSet",
    "compile_glob",
    "prefix",
    "prefixes",
    # Clients
    "ListingClient",
    "S3ClientConfig",
    "S3ClientManager",
    # Errors
    "FormatError",
    "S3GlobError",
    "ValidationError",
]
