"""Test doubles shared across test suites."""

from .in_memory_mongo import InMemoryCollection, InMemoryDatabase
from .jokes import JOKE

__all__ = ["InMemoryCollection", "InMemoryDatabase", "JOKE"]
