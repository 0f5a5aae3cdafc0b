"""User profile storage."""

from eswriter.profiles.store import (
    InMemoryProfileStore,
    ProfileLookupError,
    ProfileNotFoundError,
    ProfileStore,
    ProfileStoreError,
    ProfileWriteError,
    SQLiteProfileStore,
)

__all__ = [
    "InMemoryProfileStore",
    "ProfileLookupError",
    "ProfileNotFoundError",
    "ProfileStore",
    "ProfileStoreError",
    "ProfileWriteError",
    "SQLiteProfileStore",
]
