"""
Operation schemas for bridged network calls.

Contains the Pydantic model describing one logical request handed to a
transport, and the enum naming the operation shapes a transport supports.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictStr, field_validator, model_validator

from netbridge.security.url_validation import validate_resource_url


class OperationKind(str, Enum):
    """Operation shapes a transport can start."""

    GET_STRING = "get_string"
    GET_FILE = "get_file"
    OPEN_READ = "open_read"
    POST_STRING = "post_string"


class AsyncOperation(BaseModel):
    """A single logical request started on a transport.

    Built once per adapter call. The transport it is started on belongs to
    this operation until released.

    Attributes:
        kind: Operation shape (text fetch, file fetch, stream open, submission)
        resource_url: Absolute http(s) URL of the resource
        payload: Text body for submissions (may be empty, never None there)
        target_path: Destination path for file fetches
        supports_progress: Whether the transport should emit progress events
        cancellable: Whether the operation honours transport cancellation

    Validation context:
        ``allowed_schemes`` may be passed through
        ``AsyncOperation.model_validate(data, context={...})`` to narrow the
        accepted URL schemes.

    Example:
        >>> op = AsyncOperation.model_validate({
        ...     "kind": "post_string",
        ...     "resource_url": "https://api.example.com/items",
        ...     "payload": '{"name": "x"}',
        ... })
    """

    kind: OperationKind
    resource_url: str = Field(
        ...,
        description="Absolute URL of the resource",
        min_length=1,
    )
    payload: Optional[StrictStr] = Field(
        default=None,
        description="Text body for submissions",
    )
    target_path: Optional[Path] = Field(
        default=None,
        description="Destination path for file fetches",
    )
    supports_progress: bool = False
    cancellable: bool = True

    model_config = {"frozen": True}

    @field_validator("resource_url", mode="before")
    @classmethod
    def check_resource_url(cls, v: Any, info) -> str:
        """Require an absolute URL with an allowed scheme."""
        allowed = (info.context or {}).get("allowed_schemes")
        is_valid, error = validate_resource_url(v, allowed_schemes=allowed)
        if not is_valid:
            raise ValueError(error)
        return str(v).strip()

    @field_validator("target_path", mode="before")
    @classmethod
    def check_target_path(cls, v: Any) -> Any:
        """Reject blank destination paths before Path coercion."""
        if v is not None and not str(v).strip():
            raise ValueError("The expected target path is not here")
        return v

    @model_validator(mode="after")
    def validate_kind_requirements(self) -> "AsyncOperation":
        """Check the inputs each operation kind requires."""
        if self.kind is OperationKind.POST_STRING and self.payload is None:
            raise ValueError("The expected post data is not here")
        if self.kind is OperationKind.GET_FILE and self.target_path is None:
            raise ValueError("The expected target path is not here")
        return self
