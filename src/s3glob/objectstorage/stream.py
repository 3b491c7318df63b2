"""Demand-driven streaming of S3 objects whose keys match glob patterns.

Each search pattern is split into one or more literal key prefixes (one per
brace alternative), and each prefix gets its own :class:`ScanState` cursor.
The stream lists one page at a time for the last cursor in its list,
draining that prefix completely before moving on to the previous one, so
scopes are walked in reverse construction order and never interleaved.

Example:
    >>> client = S3ClientManager(S3ClientConfig()).client
    >>> stream = GlobStream(["s3://bucket/logs/{2023,2024}/*.gz", "!**/tmp/*"],
    ...                     client=client)
    >>> async for entry in stream:
    ...     print(entry["Key"])
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from s3glob.core import get_logger, get_tracer
from s3glob.core.exceptions import ValidationError
from s3glob.globbing import CompiledGlob
from s3glob.objectstorage.clients import ListingClient, ensure_listing_client
from s3glob.objectstorage.patterns import PatternSet
from s3glob.objectstorage.processing import EntryProcessor
from s3glob.schemas import GlobStreamOptions

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# Scope parameters forwarded to list_objects besides Prefix/Marker/MaxKeys.
LISTING_OPTIONS = ("Bucket", "RequestPayer", "ExpectedBucketOwner")

_END = object()


@dataclass
class _Failure:
    error: BaseException


@dataclass
class ScanState:
    """Pagination cursor for one literal prefix of a search scope."""

    match: CompiledGlob
    params: dict[str, Any]
    prefix: str
    marker: Optional[str] = None


class GlobStream:
    """Async stream of objects matching a set of glob patterns.

    Args:
        patterns: One pattern or a list of patterns; see
            :mod:`s3glob.objectstorage.patterns`
        client: Listing client providing ``list_objects``
        **options: ``high_water_mark``, ``format``, ``unique`` and
            ``request_params``; see :class:`s3glob.schemas.GlobStreamOptions`

    Raises:
        ValidationError: If the client, options or patterns are invalid
    """

    def __init__(self, patterns: Any, client: Optional[ListingClient] = None, **options):
        self.client = ensure_listing_client(client)

        try:
            self.options = GlobStreamOptions(client=client, **options)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid glob stream options: {e}") from e

        pattern_set = PatternSet(patterns, self.options.request_params)
        self.filters = pattern_set.filters
        self.states: list[ScanState] = [
            ScanState(match=scope.match, params=scope.params, prefix=prefix)
            for scope in pattern_set.scopes
            for prefix in scope.prefixes
        ]
        self.processor = EntryProcessor(
            self.filters, self.options.format, self.options.unique
        )

        self._buffer: asyncio.Queue = asyncio.Queue()
        self._reading = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._ended = False

        logger.info(
            "Glob stream created",
            state_count=len(self.states),
            filter_count=len(self.filters),
            format=self.options.format,
            unique=self.options.unique,
        )

    @property
    def format(self) -> str:
        return self.processor.format

    @format.setter
    def format(self, value: str) -> None:
        self.processor.format = value

    @property
    def high_water_mark(self) -> int:
        return self.options.high_water_mark

    @property
    def ended(self) -> bool:
        """True once the end of stream or a failure has been queued."""
        return self._ended

    @property
    def buffered(self) -> int:
        return self._buffer.qsize()

    async def pull(self, size: int) -> None:
        """Fetch pages until ``size`` listed entries have been consumed.

        Calls made while a listing request is already in flight return
        immediately; the in-flight fetch keeps going until its own demand is
        met. Entries are delivered through :meth:`read`.
        """
        if self._reading or self._ended:
            return

        if not self.states:
            self._end()
            return

        if size <= 0:
            return

        self._reading = True
        self._idle.clear()
        try:
            await self._fetch(size)
        except Exception as e:
            self._fail(e)
        finally:
            self._reading = False
            self._idle.set()

    async def read(self) -> Optional[dict[str, Any]]:
        """Return the next entry, or None once the stream has ended.

        Raises:
            Exception: The listing client's error, unchanged, or a
                FormatError, exactly once
        """
        while self._buffer.empty():
            if self._ended:
                return None
            if self._reading:
                await self._idle.wait()
            else:
                await self.pull(self.high_water_mark)

        item = self._buffer.get_nowait()
        if item is _END:
            return None
        if isinstance(item, _Failure):
            raise item.error
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict[str, Any]:
        entry = await self.read()
        if entry is None:
            raise StopAsyncIteration
        return entry

    def _request(self, state: ScanState, size: int) -> dict[str, Any]:
        request = {
            name: state.params[name] for name in LISTING_OPTIONS if name in state.params
        }
        request["Prefix"] = state.prefix
        request["MaxKeys"] = min(size, self.high_water_mark)
        if state.marker is not None:
            request["Marker"] = state.marker
        return request

    async def _list_objects(self, request: dict[str, Any]) -> dict[str, Any]:
        with tracer.start_as_current_span("s3glob.list_objects") as span:
            span.set_attribute("s3.bucket", request["Bucket"])
            span.set_attribute("s3.prefix", request["Prefix"])
            span.set_attribute("s3.marker", request.get("Marker") or "")

            list_objects = self.client.list_objects
            if inspect.iscoroutinefunction(list_objects):
                return await list_objects(**request)
            return await asyncio.to_thread(list_objects, **request)

    async def _fetch(self, size: int) -> None:
        while True:
            state = self.states[-1]
            request = self._request(state, size)
            logger.debug(
                "Listing objects",
                bucket=request["Bucket"],
                prefix=request["Prefix"],
                marker=state.marker,
                max_keys=request["MaxKeys"],
            )

            result = await self._list_objects(request)
            contents = result.get("Contents") or []

            for entry in contents:
                entry["Bucket"] = request["Bucket"]
                item = self.processor.process(state, entry)
                if item is not None:
                    self._buffer.put_nowait(item)

            # NextMarker is only returned when a Delimiter is set; otherwise
            # the listing resumes after the last key of the page.
            marker = None
            if result.get("IsTruncated"):
                marker = result.get("NextMarker") or (
                    contents[-1]["Key"] if contents else None
                )
                if marker is None:
                    logger.warning(
                        "Truncated page without a marker, treating prefix as done",
                        bucket=request["Bucket"],
                        prefix=state.prefix,
                    )

            if marker is not None:
                state.marker = marker
            else:
                self.states.pop()
                logger.info(
                    "Prefix exhausted",
                    bucket=request["Bucket"],
                    prefix=state.prefix,
                    remaining=len(self.states),
                )

            if not self.states:
                self._end()
                return

            size -= len(contents)
            if size <= 0:
                return

    def _end(self) -> None:
        if self._ended:
            return
        self._ended = True
        self._buffer.put_nowait(_END)
        logger.info("Glob stream ended")

    def _fail(self, error: Exception) -> None:
        self._ended = True
        self._buffer.put_nowait(_Failure(error))
        logger.error("Glob stream failed", error=str(error))


def glob_objects(patterns: Any, client: ListingClient, **options) -> list[dict[str, Any]]:
    """Collect every matching entry into a list.

    Runs its own event loop, so it must not be called from async code.
    """

    async def collect() -> list[dict[str, Any]]:
        stream = GlobStream(patterns, client=client, **options)
        return [entry async for entry in stream]

    return asyncio.run(collect())
