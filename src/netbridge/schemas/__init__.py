"""Pydantic schemas for bridged operations."""

from netbridge.schemas.operations import AsyncOperation, OperationKind

__all__ = [
    "AsyncOperation",
    "OperationKind",
]
