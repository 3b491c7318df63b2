"""Option schemas for s3glob streams."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .core.config import settings

OutputFormat = Literal["object", "query"]


class GlobStreamOptions(BaseModel):
    """Options accepted by :class:`s3glob.objectstorage.GlobStream`."""

    model_config = ConfigDict(extra="forbid")

    high_water_mark: int = Field(
        default_factory=lambda: settings.default_high_water_mark,
        gt=0,
        description="Maximum page size requested per listing call",
    )
    format: OutputFormat = Field(
        default_factory=lambda: settings.default_format,
        description="Output shape: raw listing entries or request-ready queries",
    )
    unique: bool = Field(
        default_factory=lambda: settings.default_unique,
        description="Emit each bucket/key pair at most once",
    )
    client: Any = Field(..., description="Listing client providing list_objects")
    request_params: dict[str, Any] = Field(
        default_factory=dict,
        description="Parameters merged under every pattern, e.g. a default Bucket",
    )
