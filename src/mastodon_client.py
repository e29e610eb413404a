"""
Mastodon client wrapper for Mastodon Archive
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from mastodon import Mastodon, MastodonError

from .config import Settings
from .content_processor import ContentProcessor, CustomEmoji, MediaItem
from .feed_filter import FeedFilter, FilterResult

logger = logging.getLogger(__name__)

# Largest page the statuses endpoint will return
PAGE_SIZE = 40

SITE_NAME = "Mastodon"


@dataclass
class MastodonPost:
    """Represents an archived Mastodon post"""

    id: str
    date: str  # UTC ISO-8601, used as the sort key
    content: str
    source_url: Optional[str]
    site: str = SITE_NAME
    media: List[MediaItem] = field(default_factory=list)
    emojis: List[CustomEmoji] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the cache file shape"""
        return {
            "id": self.id,
            "date": self.date,
            "content": self.content,
            "sourceUrl": self.source_url,
            "site": self.site,
            "media": [item.to_dict() for item in self.media],
            "emojis": [emoji.to_dict() for emoji in self.emojis],
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MastodonPost":
        # Caches written by the JavaScript plugin use source_url and lack tags
        source_url = data.get("sourceUrl", data.get("source_url"))
        return cls(
            id=str(data["id"]),
            date=ContentProcessor.normalize_timestamp(data["date"]),
            content=data.get("content") or "",
            source_url=source_url,
            site=data.get("site") or SITE_NAME,
            media=[MediaItem.from_dict(item) for item in data.get("media") or []],
            emojis=[CustomEmoji.from_dict(emoji) for emoji in data.get("emojis") or []],
            tags=list(data.get("tags") or []),
        )


@dataclass
class TimelinePage:
    """One page of the account timeline, filtered and formatted

    oldest_id is the id of the last status the server returned, before any
    filtering, and None when the server returned nothing.
    """

    posts: List[MastodonPost]
    oldest_id: Optional[str]
    filter_result: FilterResult


class MastodonClient:
    """Reads one account's public timeline, a page at a time"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: Optional[Mastodon] = None
        self.feed_filter = FeedFilter(settings.remove_syndicates)
        self.content_processor = ContentProcessor()

    def _get_client(self) -> Mastodon:
        if self.client is None:
            # Public timelines need no token, skip the instance version probe
            self.client = Mastodon(
                api_base_url=self.settings.host, version_check_mode="none"
            )
        return self.client

    def fetch_page(
        self,
        after: Optional[MastodonPost] = None,
        before: Optional[MastodonPost] = None,
    ) -> Optional[List[MastodonPost]]:
        """Fetch one page of archive-ready posts relative to a cursor

        Args:
            after: Only return posts newer than this one (since_id)
            before: Only return posts older than this one (max_id)

        Returns:
            Posts newest first, empty when there is nothing more to fetch,
            or None if the request failed
        """
        if after is not None:
            logger.info(f"Requesting posts made after {after.date}...")
        if before is not None:
            logger.info(f"Requesting posts made before {before.date}...")

        page = self.fetch_timeline_page(
            since_id=after.id if after is not None else None,
            max_id=before.id if before is not None else None,
        )
        return page.posts if page is not None else None

    def fetch_timeline_page(
        self, since_id: Optional[str] = None, max_id: Optional[str] = None
    ) -> Optional[TimelinePage]:
        """Fetch one raw page by status id and keep track of where it ended

        Returns:
            The filtered page, or None if the request failed
        """
        params: Dict[str, Any] = {
            "limit": PAGE_SIZE,
            "exclude_replies": True,
            "exclude_reblogs": True,
        }
        if since_id is not None:
            params["since_id"] = since_id
        if max_id is not None:
            params["max_id"] = max_id

        try:
            statuses = self._get_client().account_statuses(
                self.settings.user_id, **params
            )
        except MastodonError as e:
            logger.warning(f"Unable to fetch mastodon posts: {e}")
            return None

        statuses = list(statuses or [])
        result = self.feed_filter.filter(statuses)
        posts = self.format_filtered(result)
        logger.info(
            f"{len(posts)} new mastodon posts fetched "
            f"({result.total_retrieved} statuses retrieved)"
        )
        return TimelinePage(
            posts=posts,
            oldest_id=str(statuses[-1]["id"]) if statuses else None,
            filter_result=result,
        )

    def format_timeline(self, statuses: List[Any]) -> List[MastodonPost]:
        """Filter raw statuses and convert the survivors to archive posts"""
        return self.format_filtered(self.feed_filter.filter(statuses))

    def format_filtered(self, result: FilterResult) -> List[MastodonPost]:
        for status_id, reason in result.filtered_posts.items():
            logger.debug(f"Skipping post {status_id}: {reason}")

        posts = []
        for status in result.statuses:
            try:
                post = self.format_status(status)
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed status {status.get('id')}: {e}")
                continue
            if not self.feed_filter.has_described_media(post.media):
                logger.debug(f"Skipping post {post.id}: media without alt text")
                continue
            posts.append(post)
        return posts

    def format_status(self, status: Any) -> MastodonPost:
        content, tags = self.content_processor.strip_hashtags(
            status.get("content") or "", enabled=self.settings.strip_hashtags
        )
        return MastodonPost(
            id=str(status["id"]),
            date=self.content_processor.normalize_timestamp(status["created_at"]),
            content=content,
            source_url=status.get("url"),
            media=self.content_processor.normalize_media(
                status.get("media_attachments")
            ),
            emojis=self.content_processor.normalize_emojis(status.get("emojis")),
            tags=tags,
        )
