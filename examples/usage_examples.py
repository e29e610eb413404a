#!/usr/bin/env python3
"""
Example script demonstrating Mastodon Archive components
"""
import sys
import asyncio
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import logging
from dotenv import load_dotenv

from src.config import ConfigurationError, get_settings
from src.content_processor import ContentProcessor
from src.site_data import SiteData, register
from src.sync_orchestrator import SyncOrchestrator

# Load environment variables
load_dotenv()

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

def example_site_build():
    """Example: Register the archive with a site and run one build"""
    logger.info("=== Site Build Example ===")

    site = SiteData()
    provider = register(site, {"isProduction": False})
    if provider is None:
        logger.error("Set MASTODON_HOST and MASTODON_USER_ID to run this example")
        return

    data = asyncio.run(site.build())
    posts = data["mastodon"]["posts"]
    logger.info(f"Template data holds {len(posts)} posts")

    for post in posts[:3]:
        logger.info(f"{post['date']} {post['sourceUrl']} tags={post['tags']}")

def example_hashtag_stripping():
    """Example: Hashtag extraction from post content"""
    logger.info("=== Hashtag Stripping Example ===")

    test_cases = [
        '<p>Hello <a href="https://example.social/tags/test" class="mention hashtag">#<span>test</span></a> world</p>',
        '<p>Shipped a new release today</p><p><a class="hashtag">#<span>python</span></a> <a class="hashtag">#<span>release</span></a></p>',
        "<p>No hashtags here</p>",
    ]

    for i, content in enumerate(test_cases, 1):
        logger.info(f"\n--- Test Case {i} ---")
        logger.info(f"Original: {content}")

        stripped, tags = ContentProcessor.strip_hashtags(content)
        logger.info(f"Stripped: {stripped}")
        logger.info(f"Tags: {tags}")

def example_archive_status():
    """Example: Inspect the cached archive"""
    logger.info("=== Archive Status Example ===")

    try:
        orchestrator = SyncOrchestrator(get_settings())
        for key, value in orchestrator.get_sync_status().items():
            logger.info(f"  {key}: {value}")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")

def main():
    """Run all examples"""
    logger.info("🚀 Mastodon Archive Examples\n")

    examples = [
        ("Hashtag Stripping", example_hashtag_stripping),
        ("Archive Status", example_archive_status),
        ("Site Build", example_site_build),
    ]

    for name, example_func in examples:
        try:
            logger.info(f"\n{'='*50}")
            example_func()
        except Exception as e:
            logger.error(f"Error in {name}: {e}")

        logger.info(f"{'='*50}\n")

    logger.info("✅ All examples completed!")

if __name__ == "__main__":
    main()
