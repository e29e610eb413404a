#!/usr/bin/env python3
"""
Mastodon Archive CLI - Command line interface for archiving Mastodon posts
"""
import asyncio
import logging
import sys
import warnings
from pathlib import Path

# Suppress urllib3 OpenSSL warning on macOS (LibreSSL is functionally equivalent)
warnings.filterwarnings("ignore", message="urllib3 v2 only supports OpenSSL 1.1.1+")

import click
from dotenv import load_dotenv

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from src.config import ConfigurationError, get_settings  # noqa: E402
from src.site_data import DATA_KEY, SiteData, register  # noqa: E402
from src.sync_orchestrator import SyncOrchestrator  # noqa: E402
from src.sync_state import PersistenceError  # noqa: E402

try:
    from src.mastodon_archive import __version__
except ImportError:
    __version__ = "unknown"

# Load environment variables
load_dotenv()


def setup_logging(log_level: str):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@click.group()
@click.version_option(version=__version__, prog_name="Mastodon Archive")
@click.option(
    "--log-level",
    default="INFO",
    help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
@click.pass_context
def cli(ctx, log_level):
    """Mastodon Archive - Keep a local archive of your Mastodon posts"""
    ctx.ensure_object(dict)
    setup_logging(log_level)


@cli.command()
@click.option(
    "--dev", is_flag=True, help="Serve the cached archive without fetching new posts"
)
@click.option(
    "--strip-hashtags",
    is_flag=True,
    help="Move hashtags out of post content into the tags list",
)
def sync(dev, strip_hashtags):
    """Fetch new posts and update the archive"""
    options = {}
    if dev:
        options["isProduction"] = False
    if strip_hashtags:
        options["stripHashtags"] = True

    try:
        # Surface configuration problems before touching the network
        get_settings(options)

        site = SiteData()
        register(site, options)
        data = asyncio.run(site.build())[DATA_KEY]

        click.echo("✅ Archive is up to date!")
        click.echo(f"   • Posts: {len(data['posts'])}")
        click.echo(f"   • Last fetched: {data['lastFetched'] or 'Never'}")
        if dev:
            click.echo("   • Mode: DEV (cached posts only)")

    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except PersistenceError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error during sync")
        click.echo(f"❌ Unexpected error: {e}")
        sys.exit(1)


@cli.command()
def status():
    """Show archive status"""
    try:
        orchestrator = SyncOrchestrator(get_settings())
        status_info = orchestrator.get_sync_status()

        click.echo("📊 Mastodon Archive Status")
        click.echo(f"   • Cache file: {status_info['cache_location']}")
        click.echo(f"   • Last fetched: {status_info['last_fetched'] or 'Never'}")
        click.echo(f"   • Archived posts: {status_info['total_posts']}")
        click.echo(f"   • Newest post: {status_info['latest_post_date'] or 'None'}")

    except (ConfigurationError, PersistenceError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Error getting status")
        click.echo(f"❌ Error getting status: {e}")
        sys.exit(1)


@cli.command()
def config():
    """Show current configuration"""
    try:
        settings = get_settings()

        click.echo("⚙️ Mastodon Archive Configuration")
        click.echo(f"   • Mastodon host: {settings.host}")
        click.echo(f"   • User id: {settings.user_id}")
        click.echo(f"   • Cache location: {settings.cache_location}")
        click.echo(f"   • Production: {settings.is_production}")
        click.echo(f"   • Strip hashtags: {settings.strip_hashtags}")
        if settings.remove_syndicates:
            click.echo(
                f"   • Removed syndicates: {', '.join(settings.remove_syndicates)}"
            )
        else:
            click.echo("   • Removed syndicates: none")
        click.echo(f"   • Log level: {settings.log_level}")

    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Error reading configuration: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
