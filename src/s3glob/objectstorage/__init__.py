"""Glob streaming over S3-compatible object storage."""

from .clients import ListingClient, S3ClientConfig, S3ClientManager
from .patterns import Filter, PatternSet, SearchScope, parse_glob_url
from .processing import EntryProcessor
from .stream import GlobStream, ScanState, glob_objects

__all__ = [
    "EntryProcessor",
    "Filter",
    "GlobStream",
    "ListingClient",
    "PatternSet",
    "S3ClientConfig",
    "S3ClientManager",
    "ScanState",
    "SearchScope",
    "glob_objects",
    "parse_glob_url",
]
