"""Configuration for the collage service."""

from dataclasses import dataclass
from typing import Optional

from chart_collage.core.errors import ConfigurationError
from chart_collage.utils.env_loader import get_env_var, load_environment


def _env_float(name: str, default: float) -> float:
    value = get_env_var(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    value = get_env_var(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CollageConfig:
    """Configuration for the collage service.

    Args:
        cloud_name: Cloudinary cloud name
        api_key: Cloudinary API key
        api_secret: Cloudinary API secret
        folder: Folder the final collages are stored under and listed from
        tile_size: Edge length in pixels of every overlay tile
        upload_timeout: Seconds allowed for each upload call
        compose_timeout: Seconds allowed for the compose call
        delete_timeout: Seconds allowed for each delete call
        max_upload_mb: Maximum size of a POST body
        rollback_on_failure: Delete already uploaded artifacts when a batch fails

    Raises:
        ConfigurationError: If configuration parameters are invalid
    """
    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    folder: str = "chart-collages"
    tile_size: int = 400
    upload_timeout: float = 30.0
    compose_timeout: float = 60.0
    delete_timeout: float = 15.0
    max_upload_mb: float = 16.0
    rollback_on_failure: bool = False

    def __post_init__(self) -> None:
        self._validate_config()

    def _validate_config(self) -> None:
        if not isinstance(self.tile_size, int) or self.tile_size <= 0:
            raise ConfigurationError("tile_size must be a positive integer")

        for name in ("upload_timeout", "compose_timeout", "delete_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be greater than zero")

        if self.max_upload_mb <= 0:
            raise ConfigurationError("max_upload_mb must be greater than zero")

        if not isinstance(self.folder, str) or not self.folder.strip("/"):
            raise ConfigurationError("folder must be a non-empty string")
        self.folder = self.folder.strip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def max_content_length(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "CollageConfig":
        """Build a configuration from the process environment and a .env file."""
        load_environment(env_file)
        tile_size = get_env_var("COLLAGE_TILE_SIZE", "400")
        try:
            tile_size = int(tile_size)
        except ValueError:
            raise ConfigurationError(f"COLLAGE_TILE_SIZE must be an integer, got {tile_size!r}")

        return cls(
            cloud_name=get_env_var("CLOUDINARY_CLOUD_NAME"),
            api_key=get_env_var("CLOUDINARY_API_KEY"),
            api_secret=get_env_var("CLOUDINARY_API_SECRET"),
            folder=get_env_var("COLLAGE_FOLDER", "chart-collages"),
            tile_size=tile_size,
            upload_timeout=_env_float("COLLAGE_UPLOAD_TIMEOUT", 30.0),
            compose_timeout=_env_float("COLLAGE_COMPOSE_TIMEOUT", 60.0),
            delete_timeout=_env_float("COLLAGE_DELETE_TIMEOUT", 15.0),
            max_upload_mb=_env_float("COLLAGE_MAX_UPLOAD_MB", 16.0),
            rollback_on_failure=_env_bool("COLLAGE_ROLLBACK_ON_FAILURE", False),
        )
