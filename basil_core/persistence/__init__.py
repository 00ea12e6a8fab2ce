"""Persistence — LocalStore."""

from basil_core.persistence.local_store import LocalStore

__all__ = ["LocalStore"]
