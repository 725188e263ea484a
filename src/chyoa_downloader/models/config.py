"""Application configuration with Pydantic Settings."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.exceptions import ConfigError


DEFAULT_SESSION_FILE = Path.home() / ".config" / "chyoa-download" / "session.json"
IMAGES_DIR = "images"


class ImageMode(str, Enum):
    """Where localized images end up."""

    FILE = "file"
    EMBED = "embed"


class LayoutMode(str, Enum):
    """How the downloaded chain is written to disk."""

    SEPARATE = "separate"
    COMBINED = "combined"
    JSON = "json"

    @classmethod
    def from_flags(cls, single_file: bool, json_file: bool) -> "LayoutMode":
        """Resolve the ``--single-file`` / ``--json-file`` flags.

        Raises:
            ConfigError: If both flags are set
        """
        if single_file and json_file:
            raise ConfigError("--single-file and --json-file are mutually exclusive")
        if json_file:
            return cls.JSON
        if single_file:
            return cls.COMBINED
        return cls.SEPARATE


class ExportConfig(BaseModel):
    """Export options fixed once per run."""

    model_config = ConfigDict(frozen=True)

    output_dir: Path
    image_mode: ImageMode = ImageMode.FILE
    convert_images: bool = True
    image_format: str = Field(default="webp", description="Pillow format name, lowercase")
    image_quality: int = Field(default=80, ge=1, le=100)
    layout: LayoutMode = LayoutMode.SEPARATE

    @property
    def embed_images(self) -> bool:
        return self.image_mode is ImageMode.EMBED

    @property
    def images_dir(self) -> Path:
        return self.output_dir / IMAGES_DIR


class ChyoaConfig(BaseSettings):
    """Application configuration with environment variable support.

    Configuration can be set via:
    1. Environment variables (prefixed with CHYOA_)
    2. .env file
    3. Direct instantiation

    Example:
        export CHYOA_OUTPUT_DIR=/path/to/stories
        export CHYOA_HEADLESS=false

        config = ChyoaConfig()
        print(config.output_dir)  # /path/to/stories
    """

    model_config = SettingsConfigDict(
        env_prefix="CHYOA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Paths
    output_dir: Path = Field(
        default=Path("downloaded_stories"), description="Base directory for downloaded stories"
    )
    session_file: Path = Field(
        default=DEFAULT_SESSION_FILE, description="Where the browser session cookies are saved"
    )
    session_max_age_hours: float = Field(
        default=24, gt=0, description="Saved sessions older than this are discarded"
    )

    # Site / network settings
    base_url: str = Field(default="https://chyoa.com", description="Site base URL")
    timeout: int = Field(default=30, ge=1, le=300, description="Page load timeout in seconds")
    delay_min: float = Field(default=1.0, ge=0, description="Minimum pause before a page fetch")
    delay_max: float = Field(default=3.0, ge=0, description="Maximum pause before a page fetch")

    # Browser settings
    use_browser: bool = Field(
        default=True, description="Load pages through a real browser (Playwright)"
    )
    headless: bool = Field(default=True, description="Run the browser without a window")

    # Image settings
    convert_images: bool = Field(default=True, description="Transcode images to image_format")
    image_format: str = Field(default="webp", description="Target format for transcoding")
    image_quality: int = Field(default=80, ge=1, le=100, description="Transcoding quality")
    embed_images: bool = Field(
        default=False, description="Inline images as base64 data URIs instead of files"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    @model_validator(mode="after")
    def check_delay_range(self) -> "ChyoaConfig":
        if self.delay_max < self.delay_min:
            raise ValueError("delay_max must not be smaller than delay_min")
        return self

    def export_config(self, output_dir: Path, layout: LayoutMode) -> ExportConfig:
        """Freeze the export-related settings for one story directory."""
        return ExportConfig(
            output_dir=output_dir,
            image_mode=ImageMode.EMBED if self.embed_images else ImageMode.FILE,
            convert_images=self.convert_images,
            image_format=self.image_format.lower(),
            image_quality=self.image_quality,
            layout=layout,
        )
