"""
Content processing utilities for Mastodon Archive
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .html_tree import (
    Element,
    Node,
    Text,
    is_attached,
    parse_fragment,
    remove,
    replace_with,
)

logger = logging.getLogger(__name__)


@dataclass
class MediaItem:
    """Image attached to a post, sized for the small preview"""

    image: Optional[str]
    alt: Optional[str]
    width: Optional[int] = None
    height: Optional[int] = None
    aspect: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MediaItem":
        return cls(
            image=data.get("image"),
            alt=data.get("alt"),
            width=data.get("width"),
            height=data.get("height"),
            aspect=data.get("aspect"),
        )


@dataclass
class CustomEmoji:
    """Instance emoji referenced from post content as :shortcode:"""

    shortcode: str
    url: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomEmoji":
        return cls(shortcode=data.get("shortcode", ""), url=data.get("url"))


def _get(value: Any, key: str) -> Any:
    """Dict-style lookup that tolerates None and non-mapping values"""
    if isinstance(value, Mapping):
        return value.get(key)
    return None


class ContentProcessor:
    """Turns raw Mastodon statuses into archive-ready fields"""

    HASHTAG_CLASS = "hashtag"

    @staticmethod
    def strip_hashtags(content: str, enabled: bool = True) -> Tuple[str, List[str]]:
        """Move hashtag links out of post content

        A block holding nothing but hashtags is removed, hashtags sharing a
        block with other content are reduced to plain text.

        Args:
            content: Post body HTML
            enabled: When False the content is returned untouched

        Returns:
            Tuple of (rewritten content, hashtag labels without the leading #)
        """
        if not enabled or not content:
            return content, []

        root = parse_fragment(content)
        links = [
            element
            for element in root.iter_elements()
            if ContentProcessor._is_hashtag(element)
        ]
        if not links:
            return content, []

        tags = []
        for link in links:
            label = link.text_content()
            tag = label.strip().lstrip("#")
            if tag:
                tags.append(tag)

            # An earlier hashtag may already have removed this block
            if not is_attached(link, root):
                continue

            block = link.parent
            if block is not root and ContentProcessor._is_hashtag_line(block):
                logger.debug(f"Removing hashtag line containing #{tag}")
                remove(block)
            else:
                replace_with(link, Text(label))

        for paragraph in list(root.iter_elements()):
            if paragraph.tag == "p" and paragraph.is_empty():
                remove(paragraph)

        return root.to_html(), tags

    @staticmethod
    def _is_hashtag(node: Node) -> bool:
        return (
            isinstance(node, Element)
            and node.tag == "a"
            and ContentProcessor.HASHTAG_CLASS in node.classes
        )

    @staticmethod
    def _is_hashtag_line(block: Element) -> bool:
        """Check whether a block holds nothing but hashtags and line breaks"""
        for child in block.children:
            if isinstance(child, Text):
                if not child.is_blank():
                    return False
            elif child.tag != "br" and not ContentProcessor._is_hashtag(child):
                return False
        return True

    @staticmethod
    def normalize_media(attachments: Optional[List[Any]]) -> List[MediaItem]:
        """Extract image url, alt text and small preview size for each attachment"""
        media = []
        for attachment in attachments or []:
            small = _get(_get(attachment, "meta"), "small")
            media.append(
                MediaItem(
                    image=_get(attachment, "url"),
                    alt=_get(attachment, "description"),
                    width=_get(small, "width"),
                    height=_get(small, "height"),
                    aspect=_get(small, "aspect"),
                )
            )
        return media

    @staticmethod
    def normalize_emojis(emojis: Optional[List[Any]]) -> List[CustomEmoji]:
        return [
            CustomEmoji(
                shortcode=_get(emoji, "shortcode") or "", url=_get(emoji, "static_url")
            )
            for emoji in emojis or []
        ]

    @staticmethod
    def normalize_timestamp(created_at: Union[datetime, str]) -> str:
        """Format a creation time as UTC ISO-8601 with milliseconds

        Naive datetimes are assumed to be UTC already.

        Raises:
            ValueError: when the value is not a timestamp
        """
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if not isinstance(created_at, datetime):
            raise ValueError(f"Invalid timestamp: {created_at!r}")

        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        utc = created_at.astimezone(timezone.utc)
        return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @staticmethod
    def parse_timestamp(value: str) -> datetime:
        """Parse a timestamp written by normalize_timestamp"""
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
