"""In-process holder of the current catalog snapshot."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from mtgpirate.models.card import Catalog

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Anything that can load a catalog, such as RemoteCatalogSource."""

    async def load(self, log: Callable[[str], None] | None = None) -> Catalog | None: ...


class CatalogStore:
    """
    Latest Catalog plus the time it was loaded.

    Snapshots are immutable; replacing one only swaps the reference, so
    readers holding the old snapshot keep a consistent view.
    """

    def __init__(self) -> None:
        self._catalog: Catalog | None = None
        self._loaded_at: datetime | None = None

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    def current(self) -> Catalog | None:
        return self._catalog

    def replace(self, catalog: Catalog, loaded_at: datetime | None = None) -> None:
        """Install a new snapshot."""
        self._catalog = catalog
        self._loaded_at = loaded_at or datetime.now(UTC)
        logger.info("Catalog replaced: %d variants", len(catalog))

    def is_stale(self, max_age_hours: int, now: datetime | None = None) -> bool:
        """True when no catalog is loaded or it is older than max_age_hours."""
        if self._catalog is None or self._loaded_at is None:
            return True
        now = now or datetime.now(UTC)
        return now - self._loaded_at > timedelta(hours=max_age_hours)

    async def get_or_load(
        self,
        source: CatalogSource,
        max_age_hours: int,
        force: bool = False,
    ) -> Catalog | None:
        """
        Return the current catalog, reloading it first when stale or forced.

        A failed reload keeps the previous snapshot.
        """
        if not force and not self.is_stale(max_age_hours):
            return self._catalog

        catalog = await source.load()
        if catalog is None:
            logger.warning("Catalog refresh failed; keeping previous snapshot")
            return self._catalog

        self.replace(catalog)
        return catalog
