"""
Build-data hook for static site generators
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from .config import ConfigurationError, Settings, get_settings
from .sync_orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

DATA_KEY = "mastodon"

DataProvider = Callable[[], Awaitable[Dict[str, Any]]]


class SiteData:
    """In-process stand-in for a site generator's global data registry"""

    def __init__(self):
        self.providers: Dict[str, DataProvider] = {}

    def add_global_data(self, key: str, provider: DataProvider) -> None:
        self.providers[key] = provider

    async def build(self) -> Dict[str, Any]:
        """Call every registered provider once, in registration order"""
        data = {}
        for key, provider in self.providers.items():
            data[key] = await provider()
        return data


def create_data_provider(
    settings: Settings, orchestrator: Optional[SyncOrchestrator] = None
) -> DataProvider:
    """Create the async provider that returns the archive for templates"""
    orchestrator = orchestrator or SyncOrchestrator(settings)

    async def mastodon_data() -> Dict[str, Any]:
        snapshot = await orchestrator.run_sync()
        return snapshot.to_dict()

    return mastodon_data


def register(site: Any, options: Mapping[str, Any]) -> Optional[DataProvider]:
    """Register the archive provider with a site's global data

    Missing or invalid options are reported and nothing is registered.

    Args:
        site: Anything with an add_global_data(key, provider) method
        options: host, userId and the optional archive settings

    Returns:
        The registered provider, or None when configuration is incomplete
    """
    try:
        settings = get_settings(options)
    except ConfigurationError as e:
        logger.error(f"Mastodon archive not registered. {e}")
        return None

    provider = create_data_provider(settings)
    site.add_global_data(DATA_KEY, provider)
    logger.debug(f"Registered '{DATA_KEY}' global data for {settings.host}")
    return provider
