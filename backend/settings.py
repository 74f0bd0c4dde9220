import os

# Basic settings helper to read environment configuration.

GOOGLE_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"


def _as_key(val: str | None) -> str | None:
    """Treat empty values and the sample placeholder as 'no key configured'."""
    if not val or not val.strip() or val.strip() == GOOGLE_KEY_PLACEHOLDER:
        return None
    return val.strip()


class Settings:
    def __init__(self) -> None:
        # Provider credentials
        self.GOOGLE_PLACES_API_KEY: str | None = _as_key(os.getenv("GOOGLE_PLACES_API_KEY"))
        self.GOOGLE_GEOCODING_API_KEY: str | None = _as_key(os.getenv("GOOGLE_GEOCODING_API_KEY"))

        # Endpoints
        self.OVERPASS_URL: str = os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
        self.PLACES_API_BASE_URL: str = os.getenv(
            "PLACES_API_BASE_URL", "https://maps.googleapis.com/maps/api/place"
        )
        self.GOOGLE_GEOCODE_URL: str = os.getenv(
            "GOOGLE_GEOCODE_URL", "https://maps.googleapis.com/maps/api/geocode/json"
        )
        self.NOMINATIM_BASE_URL: str = os.getenv(
            "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org/reverse"
        )

        # Nominatim usage policy wants a descriptive client identifier
        self.NOMINATIM_USER_AGENT: str | None = os.getenv("NOMINATIM_USER_AGENT")
        self.NOMINATIM_REFERER: str | None = os.getenv("NOMINATIM_REFERER")
        self.NOMINATIM_MIN_INTERVAL: float = float(os.getenv("NOMINATIM_MIN_INTERVAL", "1.1"))

        self.HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "25"))

        # Search behaviour
        self.SEARCH_RADIUS_M: int = int(os.getenv("SEARCH_RADIUS_M", "5000"))
        self.OSM_MIN_RESULTS: int = int(os.getenv("OSM_MIN_RESULTS", "10"))

    @property
    def google_places_configured(self) -> bool:
        return bool(self.GOOGLE_PLACES_API_KEY)

    @property
    def google_geocoding_configured(self) -> bool:
        return bool(self.GOOGLE_GEOCODING_API_KEY)


settings = Settings()
