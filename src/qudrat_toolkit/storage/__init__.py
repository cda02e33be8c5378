"""Test storage collaborators."""

from .repository import (
    InMemoryTestRepository,
    JsonTestRepository,
    TestNotFoundError,
    TestRepository,
)

__all__ = [
    "InMemoryTestRepository",
    "JsonTestRepository",
    "TestNotFoundError",
    "TestRepository",
]
