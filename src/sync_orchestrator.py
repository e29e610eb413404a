"""
Main sync orchestrator for Mastodon Archive
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .config import Settings
from .content_processor import ContentProcessor
from .mastodon_client import MastodonClient, MastodonPost
from .post_merger import merge_posts
from .sync_state import CacheSnapshot, PostCache

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Brings the local archive up to date with the Mastodon account"""

    def __init__(
        self,
        settings: Settings,
        client: Optional[MastodonClient] = None,
        cache: Optional[PostCache] = None,
    ):
        self.settings = settings
        self.client = client or MastodonClient(settings)
        self.cache = cache or PostCache(settings.cache_path)

    async def backfill(self) -> Optional[List[MastodonPost]]:
        """Walk back through the whole timeline, page by page

        Each request starts before the oldest status the server returned on
        the previous page, whether or not it was filtered out, and the walk
        ends when the server returns an empty page.

        Returns:
            Every reachable post newest first, or None if any page failed
        """
        posts: List[MastodonPost] = []
        max_id: Optional[str] = None
        while True:
            if max_id is not None:
                logger.info(f"Requesting posts older than status {max_id}...")
            page = await asyncio.to_thread(
                self.client.fetch_timeline_page, None, max_id
            )
            if page is None:
                logger.warning("Archive fetch interrupted, nothing will be cached")
                return None

            posts = merge_posts(posts, page.posts)
            if page.oldest_id is None:
                return posts
            max_id = page.oldest_id

    async def fetch_new_posts(
        self, latest: MastodonPost
    ) -> Optional[List[MastodonPost]]:
        """Fetch a single page of posts made after the latest cached one"""
        # TODO: keep paging with min_id when a full page comes back so busy
        # accounts do not drop posts between builds
        return await asyncio.to_thread(self.client.fetch_page, latest, None)

    async def run_sync(self) -> CacheSnapshot:
        """Run one build's sync and return the snapshot to publish

        Raises:
            PersistenceError: when the cache cannot be read or written
        """
        logger.info("Reading mastodon posts from cache...")
        cache = await self.cache.read()
        if cache.posts:
            logger.info(f"{len(cache.posts)} mastodon posts loaded from cache")

        # Only fetch new posts in production
        if not self.settings.is_production:
            logger.info("Not in production mode, serving cached mastodon posts")
            return cache

        if not cache.posts:
            logger.info("Creating a complete archive of your mastodon posts...")
            feed = await self.backfill()
            if feed is not None:
                logger.info(f"Archive containing {len(feed)} posts has been fetched...")
        else:
            logger.info("Checking for new mastodon posts...")
            feed = await self.fetch_new_posts(cache.latest_post)

        if feed is None:
            return cache

        snapshot = CacheSnapshot(
            last_fetched=ContentProcessor.normalize_timestamp(
                datetime.now(timezone.utc)
            ),
            posts=merge_posts(cache.posts, feed),
        )
        await self.cache.write(snapshot)
        return snapshot

    def get_sync_status(self) -> dict:
        """Get current archive status"""
        snapshot = self.cache.load()
        latest = snapshot.latest_post

        return {
            "cache_location": str(self.cache.cache_file),
            "cache_exists": self.cache.exists(),
            "last_fetched": snapshot.last_fetched,
            "total_posts": len(snapshot.posts),
            "latest_post_date": latest.date if latest else None,
            "is_production": self.settings.is_production,
        }
