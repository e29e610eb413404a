"""
Feed filtering for Mastodon Archive
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from .content_processor import MediaItem

logger = logging.getLogger(__name__)


@dataclass
class FilterResult:
    """
    Statuses surviving the filter, with statistics on what was dropped.

    filtered_posts maps each dropped status id to the reason it was dropped.
    """

    statuses: List[Any]
    total_retrieved: int
    filtered_syndicated: int = 0  # Already published on your own site
    filtered_replies: int = 0
    filtered_reblogs: int = 0
    filtered_posts: Dict[str, str] = field(default_factory=dict)


class FeedFilter:
    """Drops statuses that should not appear in the archive"""

    def __init__(self, remove_syndicates: Sequence[str] = ()):
        self.remove_syndicates = [url for url in remove_syndicates if url]

    def is_syndicated(self, status: Any) -> bool:
        content = status.get("content") or ""
        return any(url in content for url in self.remove_syndicates)

    @staticmethod
    def is_reply(status: Any) -> bool:
        return status.get("in_reply_to_account_id") is not None

    @staticmethod
    def is_reblog(status: Any) -> bool:
        return status.get("reblog") is not None

    def filter(self, statuses: Iterable[Any]) -> FilterResult:
        """Filter a page of raw statuses, preserving order"""
        statuses = list(statuses)
        result = FilterResult(statuses=[], total_retrieved=len(statuses))

        for status in statuses:
            status_id = str(status.get("id"))
            if self.is_syndicated(status):
                result.filtered_syndicated += 1
                result.filtered_posts[status_id] = "syndicated"
            elif self.is_reply(status):
                result.filtered_replies += 1
                result.filtered_posts[status_id] = "reply"
            elif self.is_reblog(status):
                result.filtered_reblogs += 1
                result.filtered_posts[status_id] = "reblog"
            else:
                result.statuses.append(status)

        if result.filtered_syndicated > 0:
            logger.info(
                f"Filtered out {result.filtered_syndicated} posts already on your site"
            )
        if result.filtered_replies > 0:
            logger.info(f"Filtered out {result.filtered_replies} replies")
        if result.filtered_reblogs > 0:
            logger.info(f"Filtered out {result.filtered_reblogs} reblogs")

        return result

    @staticmethod
    def has_described_media(media: List[MediaItem]) -> bool:
        """Check the accessibility rule: media posts need alt text on the first item"""
        if media and media[0].alt is None:
            return False
        return True
