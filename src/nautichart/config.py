"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class MapSettings(BaseSettings):
    """Map view settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NAUTICHART_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Map view
    container: str = "map"
    center_lat: float = -22.8
    center_lng: float = -43.0
    zoom: int = 11

    # Base imagery (ESRI World Imagery, no API key)
    tile_url: str = "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}"
    tile_attribution: str = "Tiles &copy; Esri &mdash; Sources: Esri, Maxar, Earthstar, etc."
    tile_class_name: str = "map-tiles"
    tile_min_zoom: int = 2

    # Image overlays
    overlay_opacity: float = 0.6
    overlay_error_url: str = "https://cdn-icons-png.flaticon.com/512/110/110686.png"
    overlay_alt: str = "Overlay image"

    # Route drawing
    draw_cursor: str = "crosshair"
    route_color: str = "#3388ff"
    route_weight: int = 3
    route_dash_array: str = "5, 10"


# Global settings instance
settings = MapSettings()
