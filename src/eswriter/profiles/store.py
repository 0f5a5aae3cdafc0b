"""Profile Store — per-subject profiles in SQLite.

Profiles are looked up by the opaque subject ID that the token resolver
returns. The pipeline only reads them; ``put`` serves the profile form and
the CLI.

Usage:
    from eswriter.profiles import SQLiteProfileStore

    store = SQLiteProfileStore("data/profiles.db")
    store.put("user-123", UserProfile(bio="...", experience="...", projects="..."))
    profile = store.get("user-123")
"""

import logging
import sqlite3
from pathlib import Path
from typing import Protocol

from eswriter.models import UserProfile

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS profiles (
    subject_id TEXT PRIMARY KEY,
    bio TEXT NOT NULL DEFAULT '',
    experience TEXT NOT NULL DEFAULT '',
    projects TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""


class ProfileStoreError(Exception):
    """Base exception for profile storage failures."""


class ProfileLookupError(ProfileStoreError):
    """Profile could not be read."""


class ProfileWriteError(ProfileStoreError):
    """Profile could not be written, or the store could not be opened."""


class ProfileNotFoundError(ProfileLookupError):
    """No profile stored for the subject."""

    def __init__(self, subject_id: str) -> None:
        super().__init__(f"No profile for subject '{subject_id}'")
        self.subject_id = subject_id


class ProfileStore(Protocol):
    def get(self, subject_id: str) -> UserProfile:
        ...

    def put(self, subject_id: str, profile: UserProfile) -> None:
        ...


class SQLiteProfileStore:
    """Persistent profile storage in a local SQLite file.

    Args:
        db_path: Path to SQLite database file. Parent directories are created.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as e:
            raise ProfileWriteError(f"Failed to open profile store at {self.db_path}: {e}") from e

    def _init_db(self) -> None:
        """Initialize database schema if not exists."""
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)

    def _connect(self) -> sqlite3.Connection:
        """Create a database connection with WAL mode for concurrent readers."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def get(self, subject_id: str) -> UserProfile:
        """Fetch the profile for a subject.

        Raises:
            ProfileNotFoundError: Nothing stored for ``subject_id``
            ProfileLookupError: Database could not be read
        """
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT bio, experience, projects FROM profiles WHERE subject_id = ?",
                    (subject_id,),
                ).fetchone()
        except sqlite3.Error as e:
            raise ProfileLookupError(f"Failed to read profile: {e}") from e

        if row is None:
            raise ProfileNotFoundError(subject_id)
        return UserProfile(bio=row["bio"], experience=row["experience"], projects=row["projects"])

    def put(self, subject_id: str, profile: UserProfile) -> None:
        """Create or replace the profile for a subject.

        Raises:
            ProfileWriteError: Database could not be written
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO profiles (subject_id, bio, experience, projects) "
                    "VALUES (?, ?, ?, ?) "
                    "ON CONFLICT(subject_id) DO UPDATE SET "
                    "bio = excluded.bio, experience = excluded.experience, "
                    "projects = excluded.projects, "
                    "updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now')",
                    (subject_id, profile.bio, profile.experience, profile.projects),
                )
        except sqlite3.Error as e:
            raise ProfileWriteError(f"Failed to write profile: {e}") from e
        logger.info("Stored profile for %s", subject_id)


class InMemoryProfileStore:
    """Dict-backed store for tests and one-off CLI runs."""

    def __init__(self, profiles: dict[str, UserProfile] | None = None) -> None:
        self._profiles = dict(profiles or {})

    def get(self, subject_id: str) -> UserProfile:
        try:
            return self._profiles[subject_id]
        except KeyError:
            raise ProfileNotFoundError(subject_id) from None

    def put(self, subject_id: str, profile: UserProfile) -> None:
        self._profiles[subject_id] = profile
