# core/config.py

from pydantic_settings import BaseSettings
from typing import Optional


class GeoIndexConfig(BaseSettings):
    """Configuration for the OSM geospatial index."""

    # Storage
    database_path: str = "osm_geoindex.db"

    # Index defaults
    default_index: str = "osm"
    default_shards: int = 1
    default_replicas: int = 0

    # Store calls
    request_timeout: Optional[float] = None  # Seconds, None waits forever
    write_retries: int = 0
    read_retries: int = 0

    # Logging
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    class Config:
        env_file = ".env"
        env_prefix = "OSMGEO_"


# Global config instance
config = GeoIndexConfig()
