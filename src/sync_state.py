"""
Cache storage for Mastodon Archive
"""

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .mastodon_client import MastodonPost

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the cache file cannot be read or written."""

    pass


@dataclass
class CacheSnapshot:
    """Archived posts (newest first) and when they were last fetched"""

    last_fetched: Optional[str] = None
    posts: List[MastodonPost] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastFetched": self.last_fetched,
            "posts": [post.to_dict() for post in self.posts],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheSnapshot":
        return cls(
            last_fetched=data.get("lastFetched"),
            posts=[MastodonPost.from_dict(post) for post in data.get("posts") or []],
        )

    @property
    def latest_post(self) -> Optional[MastodonPost]:
        return self.posts[0] if self.posts else None


class PostCache:
    """Reads and writes the archive snapshot as a pretty-printed JSON file"""

    def __init__(self, cache_file: Union[str, Path] = ".cache/mastodon.json"):
        self.cache_file = Path(cache_file)

    def exists(self) -> bool:
        return self.cache_file.exists()

    def load(self) -> CacheSnapshot:
        """Load the snapshot, or an empty one if no cache exists yet"""
        if not self.exists():
            return CacheSnapshot()

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(
                f"Failed to read cache file {self.cache_file}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise PersistenceError(
                f"Cache file {self.cache_file} does not contain a JSON object"
            )

        try:
            return CacheSnapshot.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PersistenceError(
                f"Cache file {self.cache_file} has malformed posts: {e}"
            ) from e

    def save(self, snapshot: CacheSnapshot) -> None:
        """Replace the cache file with the snapshot

        The snapshot is written to a temporary file next to the cache and
        moved into place, so an interrupted write leaves the old cache intact.
        """
        temp_path = None
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.cache_file.parent,
                prefix=f".{self.cache_file.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.cache_file)
        except OSError as e:
            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)
            raise PersistenceError(
                f"Failed to write cache file {self.cache_file}: {e}"
            ) from e

        logger.info(
            f"{len(snapshot.posts)} mastodon posts in total are now cached in {self.cache_file}"
        )

    async def read(self) -> CacheSnapshot:
        return await asyncio.to_thread(self.load)

    async def write(self, snapshot: CacheSnapshot) -> None:
        await asyncio.to_thread(self.save, snapshot)
