"""
Merging fetched posts into the archive
"""

from typing import Iterable, List

from .content_processor import ContentProcessor
from .mastodon_client import MastodonPost


def merge_posts(
    cached: Iterable[MastodonPost], fresh: Iterable[MastodonPost]
) -> List[MastodonPost]:
    """Union posts by id and order them newest first.

    The cached copy of a post wins over a freshly fetched one with the same
    id, so server-side edits are not picked up once a post is archived.
    """
    merged: List[MastodonPost] = []
    seen = set()
    for post in list(cached) + list(fresh):
        if post.id in seen:
            continue
        seen.add(post.id)
        merged.append(post)

    merged.sort(key=lambda post: ContentProcessor.parse_timestamp(post.date))
    merged.reverse()
    return merged
