"""Client configuration settings."""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from .types import Operation


class ClientConfig(BaseModel):
    """Client configuration settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ...,
        min_length=1,
        description="Base URL of the cache service (trailing slash is stripped)",
    )
    gzip_threshold: int = Field(
        default=0,
        ge=0,
        description="Compress request bodies of at least this many bytes (0 = never)",
    )

    # Timeouts, in seconds, covering the whole exchange of one call
    fetch_timeout: float = Field(
        default=5.0, gt=0, description="Timeout for fetch requests"
    )
    store_timeout: float = Field(
        default=5.0, gt=0, description="Timeout for store requests"
    )
    evict_timeout: float = Field(
        default=5.0, gt=0, description="Timeout for evict requests"
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.rstrip("/")
        if not stripped:
            msg = "base_url must not be empty"
            raise ValueError(msg)
        return stripped

    def timeout_for(self, operation: Operation) -> float:
        """Get the timeout configured for an operation."""
        if operation is Operation.FETCH:
            return self.fetch_timeout
        if operation is Operation.STORE:
            return self.store_timeout
        return self.evict_timeout
