"""S3 client management and the listing client protocol."""

from .s3_client import (
    ListingClient,
    S3ClientConfig,
    S3ClientManager,
    ensure_listing_client,
)

__all__ = [
    "ListingClient",
    "S3ClientConfig",
    "S3ClientManager",
    "ensure_listing_client",
]
