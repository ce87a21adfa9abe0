from dataclasses import dataclass
from pathlib import Path
import logging

from croniter import croniter
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    source_dir: str = "source"
    output_dir: str = "output"
    subscribe_file: str = "subscribe.txt"
    alias_file: str = "alias.txt"
    logo_file: str = "logo.txt"
    template_file: str = "template.txt"
    epg_file: str = "epg.txt"
    m3u_output_file: str = "output.m3u"
    txt_output_file: str = "output.txt"

    admin_token: str = "default_admin_token"
    log_level: str = "INFO"

    update_on_startup: bool = True
    update_cron: str | None = None  # e.g. "0 */6 * * *"; unset disables scheduling
    update_misfire_grace_sec: int = 3600
    subscription_max_concurrency: int = 16
    validate_before_run: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "source_dir",
        "subscribe_file",
        "alias_file",
        "logo_file",
        "template_file",
        "epg_file",
        "m3u_output_file",
        "txt_output_file",
        "output_dir",
    )
    @classmethod
    def validate_path_fields(cls, value: str, info) -> str:
        """Ensure path settings are not blank."""
        if not value or not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value.strip()

    @field_validator("admin_token")
    @classmethod
    def validate_admin_token(cls, value: str) -> str:
        """Reject an empty admin token, which would make /update unusable."""
        if not value or not value.strip():
            raise ValueError("admin_token must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("update_cron", mode="before")
    @classmethod
    def parse_update_cron(cls, value):
        """Treat an empty cron expression as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("update_cron")
    @classmethod
    def validate_cron_expression(cls, value: str | None) -> str | None:
        """Validate cron expression is valid."""
        if value is None:
            return value
        try:
            croniter(value)
            return value
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Invalid cron expression '{value}': {exc}") from exc

    @field_validator("update_misfire_grace_sec")
    @classmethod
    def validate_misfire_grace(cls, value: int) -> int:
        """Validate scheduler misfire grace period (seconds)."""
        if value < 0:
            raise ValueError("update_misfire_grace_sec must be >= 0")
        return value

    @field_validator("subscription_max_concurrency")
    @classmethod
    def validate_concurrency(cls, value: int) -> int:
        """Ensure the download concurrency bound is positive."""
        if value <= 0:
            raise ValueError("subscription_max_concurrency must be > 0")
        return value

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Source Directory: %s", self.source_dir)
        logger.info("  Output Directory: %s", self.output_dir)
        logger.info("  Update On Startup: %s", self.update_on_startup)
        logger.info("  Update Schedule: %s", self.update_cron or "disabled")
        logger.info("  Update Misfire Grace: %ss", self.update_misfire_grace_sec)
        logger.info("  Subscription Concurrency: %s", self.subscription_max_concurrency)
        logger.info("  Validate Before Run: %s", self.validate_before_run)
        if self.admin_token == "default_admin_token":
            logger.warning("  Admin Token: using the default token, set ADMIN_TOKEN")


@dataclass(frozen=True)
class AggregationPaths:
    """Resolved input and output file locations for one run"""
    subscribe: Path
    alias: Path
    logo: Path
    template: Path
    epg: Path
    m3u_output: Path
    txt_output: Path

    @classmethod
    def from_settings(cls, config: CustomSettings) -> "AggregationPaths":
        source_dir = Path(config.source_dir)
        output_dir = Path(config.output_dir)
        return cls(
            subscribe=source_dir / config.subscribe_file,
            alias=source_dir / config.alias_file,
            logo=source_dir / config.logo_file,
            template=source_dir / config.template_file,
            epg=source_dir / config.epg_file,
            m3u_output=output_dir / config.m3u_output_file,
            txt_output=output_dir / config.txt_output_file,
        )


settings = CustomSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
