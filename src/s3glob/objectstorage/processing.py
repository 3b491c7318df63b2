"""Per-entry filtering, deduplication and formatting for glob streams."""

from typing import TYPE_CHECKING, Any, Optional

from s3glob.core.exceptions import FormatError
from s3glob.objectstorage.patterns import Filter

if TYPE_CHECKING:
    from .stream import ScanState

FORMATS = ("object", "query")


class EntryProcessor:
    """Decides whether, and in what shape, a listed entry is emitted.

    Args:
        filters: Negative patterns; an entry excluded by any is rejected
        format: ``object`` for raw listing entries, ``query`` for the scope
            parameters with ``Key`` replaced by the entry's key
        unique: Emit each bucket/key pair at most once
    """

    def __init__(
        self, filters: tuple[Filter, ...], format: str, unique: bool = True
    ):
        self.filters = filters
        self.format = format
        self.unique = unique
        self.processed: set[str] = set()

    def matches(self, state: "ScanState", entry: dict[str, Any]) -> bool:
        """True if no filter excludes the entry and the scope's glob does."""
        if any(f.excludes(entry) for f in self.filters):
            return False
        return state.match.match(entry["Key"])

    @staticmethod
    def identity_key(entry: dict[str, Any]) -> str:
        return f"{entry['Bucket']}/{entry['Key']}"

    def process(
        self, state: "ScanState", entry: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """Return the formatted entry, or None if it should be skipped.

        With ``unique`` set, entries are recorded as seen before matching, so
        an entry rejected once is not tested again when another scope lists it.

        Raises:
            FormatError: If ``format`` is not a known output format
        """
        if self.unique:
            identity = self.identity_key(entry)
            if identity in self.processed:
                return None
            self.processed.add(identity)

        if not self.matches(state, entry):
            return None

        if self.format == "object":
            return entry
        elif self.format == "query":
            return {**state.params, "Key": entry["Key"]}
        else:
            raise FormatError(
                f"Unknown output format: {self.format!r}. Must be one of {FORMATS}"
            )
