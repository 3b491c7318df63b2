"""S3 client configuration and the listing capability used by glob streams.

The glob stream only needs one operation from a client: ``list_objects``,
called with boto3-style keyword arguments and returning a boto3-shaped
response dict. Any boto3 S3 client satisfies :class:`ListingClient`, and so
does an aiobotocore client, whose ``list_objects`` is a coroutine function.

:class:`S3ClientManager` is the setup layer that builds a real boto3 client
from :class:`S3ClientConfig`; credentials always come from boto3's own chain
(environment, profile, instance role).
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import boto3
from pydantic import BaseModel, ConfigDict, Field

from s3glob.core import get_logger
from s3glob.core.exceptions import ValidationError

logger = get_logger(__name__)

S3_SCHEME = "s3"


@runtime_checkable
class ListingClient(Protocol):
    """Protocol for clients able to list one page of objects."""

    def list_objects(self, **params: Any) -> Any:
        """List a page of objects.

        Receives ``Bucket``, ``Prefix``, ``MaxKeys`` and optionally
        ``Marker``; returns (or resolves to) a dict with ``Contents``,
        ``IsTruncated`` and optionally ``NextMarker``.
        """
        ...


def ensure_listing_client(client: Any) -> ListingClient:
    """Check that ``client`` exposes a callable ``list_objects``.

    Raises:
        ValidationError: If the client lacks the listing operation
    """
    if client is None or not callable(getattr(client, "list_objects", None)):
        raise ValidationError(
            f"Listing client must provide a callable list_objects: {client!r}"
        )
    return client


class S3ClientConfig(BaseModel):
    """Configuration for S3 client connections.

    Example:
        # AWS profile
        config = S3ClientConfig(aws_profile="my-profile")

        # MinIO endpoint
        config = S3ClientConfig(endpoint_url="http://localhost:9000")
    """

    model_config = ConfigDict(extra="forbid")

    region_name: str = Field("us-east-1", description="AWS region name")
    endpoint_url: Optional[str] = Field(
        None, description="Custom S3 endpoint URL for S3-compatible services"
    )
    aws_profile: Optional[str] = Field(
        None, description="AWS CLI profile name to use for credentials"
    )


class S3ClientManager:
    """Manages S3 client connections and provides utility methods."""

    def __init__(self, config: S3ClientConfig):
        self.config = config
        self._client = None
        logger.info("S3 client manager initialized", region=config.region_name)

    @property
    def client(self):
        """Get or create S3 client instance."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        """Create boto3 S3 client with the configured settings."""
        kwargs: Dict[str, Any] = {
            "region_name": self.config.region_name,
        }

        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.aws_profile:
            session = boto3.Session(profile_name=self.config.aws_profile)
            client = session.client("s3", **kwargs)  # type: ignore
            logger.info(
                "S3 client created with profile", profile=self.config.aws_profile
            )
        else:
            client = boto3.client("s3", **kwargs)  # type: ignore
            logger.info("S3 client created with default credential chain")

        return client

    @staticmethod
    def parse_s3_path(s3_path: str) -> tuple[str, str, str]:
        """Parse an S3 URL into bucket, key and raw query components.

        Only the first ``/`` after the bucket is a separator; the rest of the
        path, including any further leading slashes and whitespace, is the
        key. The query is whatever follows the last ``?``. Fragments are not
        recognised, so ``#`` stays part of the key.

        Args:
            s3_path: S3 URL in format s3://bucket/key?query

        Returns:
            Tuple of (bucket_name, key, query)

        Raises:
            ValidationError: If path format is invalid
        """
        if not s3_path.startswith(f"{S3_SCHEME}://"):
            raise ValidationError(f"S3 path must start with 's3://': {s3_path}")

        bucket, _, path = s3_path[len(f"{S3_SCHEME}://") :].partition("/")
        key, query = path, ""
        if "?" in path:
            key, _, query = path.rpartition("?")

        if not bucket:
            raise ValidationError(f"Invalid S3 path, missing bucket: {s3_path}")

        logger.debug("S3 path parsed", bucket=bucket, key=key, query=query)
        return bucket, key, query
