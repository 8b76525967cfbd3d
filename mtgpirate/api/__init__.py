from mtgpirate.api.catalog import router as catalog_router
from mtgpirate.api.health import router as health_router
from mtgpirate.api.quote import router as quote_router

__all__ = [
    "catalog_router",
    "health_router",
    "quote_router",
]
