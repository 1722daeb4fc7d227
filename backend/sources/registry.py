"""
Source adapter registry

Maps each Source to its adapter class and builds the set of adapters a
scrape run should use.

Usage:
    from sources.registry import get_enabled_sources
    from config.settings import settings

    for source in get_enabled_sources(settings):
        postings = await source.fetch_postings(client)
"""

import logging
from typing import Dict, List, Optional, Tuple, Type

from .adzuna import AdzunaSource
from .arbeitnow import ArbeitnowSource
from .base_source import BaseJobSource
from .config import SourceConfig
from .enums import Source
from .greenhouse import GreenhouseSource
from .jsearch import JSearchSource
from .lever import LeverSource
from .reed import ReedSource
from .remoteok import RemoteOKSource
from .remotive import RemotiveSource
from .themuse import TheMuseSource

logger = logging.getLogger(__name__)

SOURCE_REGISTRY: Dict[Source, Type[BaseJobSource]] = {
    Source.REMOTIVE: RemotiveSource,
    Source.REMOTEOK: RemoteOKSource,
    Source.ARBEITNOW: ArbeitnowSource,
    Source.GREENHOUSE: GreenhouseSource,
    Source.LEVER: LeverSource,
    Source.THEMUSE: TheMuseSource,
    Source.REED: ReedSource,
    Source.ADZUNA: AdzunaSource,
    Source.JSEARCH: JSearchSource,
}


def list_sources() -> List[str]:
    """All source names with an adapter."""
    return [source.value for source in SOURCE_REGISTRY]


def get_source(name: str, config: Optional[SourceConfig] = None) -> BaseJobSource:
    """
    Instantiate the adapter for a source name.

    Raises:
        ValueError: if the name has no adapter
    """
    try:
        source = Source(name.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown source '{name}'. Available: {', '.join(list_sources())}")
    return SOURCE_REGISTRY[source](config=config)


def _credentials(settings, adapter_cls: Type[BaseJobSource]) -> Tuple[Optional[str], Optional[str], List[str]]:
    """(api_key, api_secret, names of required settings keys that are missing)"""
    api_key = settings.get_api_key(adapter_cls.ENV_KEY) if adapter_cls.ENV_KEY else None
    api_secret = settings.get_api_key(adapter_cls.SECRET_ENV_KEY) if adapter_cls.SECRET_ENV_KEY else None

    missing = []
    if not adapter_cls.ENV_KEY_OPTIONAL:
        if adapter_cls.ENV_KEY and not api_key:
            missing.append(adapter_cls.ENV_KEY)
        if adapter_cls.SECRET_ENV_KEY and not api_secret:
            missing.append(adapter_cls.SECRET_ENV_KEY)
    return api_key or None, api_secret or None, missing


def get_enabled_sources(settings) -> List[BaseJobSource]:
    """
    Adapters for this run.

    ENABLED_SOURCES (comma list) narrows the set; empty means every adapter.
    Adapters with an ENV_KEY (and SECRET_ENV_KEY) are skipped when those keys
    are not configured, unless ENV_KEY_OPTIONAL is set.
    """
    wanted = settings.get_enabled_sources()
    unknown = [name for name in wanted if name not in list_sources()]
    if unknown:
        logger.warning(f"Ignoring unknown sources in ENABLED_SOURCES: {unknown}")

    sources: List[BaseJobSource] = []
    for source, adapter_cls in SOURCE_REGISTRY.items():
        if wanted and source.value not in wanted:
            continue

        api_key, api_secret, missing = _credentials(settings, adapter_cls)
        if missing:
            logger.info(f"Skipping source {source.value}: {', '.join(missing)} not set")
            continue

        config = SourceConfig.from_settings(settings, api_key=api_key, api_secret=api_secret)
        sources.append(adapter_cls(config=config))

    return sources
