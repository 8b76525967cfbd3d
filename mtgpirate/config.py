from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MTGPIRATE_")

    app_name: str = "MtgPirate"
    debug: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    catalog_csv_url: str = "https://www.usmtgproxy.com/wp-content/uploads/single-card-list.csv"
    catalog_html_url: str = "https://www.usmtgproxy.com/wp-content/uploads/singlecardslist.html"

    user_agent: str = "MtgPirate/1.0"
    http_timeout: float = 30.0

    # Pagination guard for the CSV endpoint
    csv_max_pages: int = 10
    # A page with fewer lines than this (header included) is treated as the last one
    csv_min_page_rows: int = 21

    scryfall_api_url: str = "https://api.scryfall.com"
    # Scryfall asks for at most 10 requests per second
    scryfall_rate_limit_delay: float = 0.1

    catalog_max_age_hours: int = 24


settings = Settings()


# =============================================================================
# CATALOG PRICING DEFAULTS
# =============================================================================

# Dollar price per variant type when the catalog omits a usable price
DEFAULT_TYPE_PRICES: dict[str, float] = {
    "Regular": 2.20,
    "Holo": 3.00,
    "Foil": 3.50,
}

# Same table in cents, used to backfill variants left at zero after parsing
DEFAULT_TYPE_PRICE_CENTS: dict[str, int] = {
    "Regular": 220,
    "Holo": 300,
    "Foil": 350,
}
