from typing import Annotated
import logging

from croniter import croniter
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from whatsontv.utils.timeparse import is_valid_timezone


logger = logging.getLogger(__name__)

CommaList = Annotated[list[str] | None, NoDecode]


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    The WHATSONTV_* fields form the environment layer of the show options.
    """

    log_level: str = "INFO"
    config_file: str = "config.json"

    tvmaze_base_url: str = "https://api.tvmaze.com"
    fetch_timeout_sec: float = 10.0  # Keep well below serverless execution limits
    fetch_max_retries: int = 3
    fetch_backoff_factor: float = 2.0

    slack_token: str = ""
    slack_channel: str = ""
    slack_username: str = "WhatsOnTV"
    slack_icon_emoji: str = ":tv:"
    slack_api_url: str = "https://slack.com/api/chat.postMessage"

    notify_cron: str = "0 9 * * *"  # Daily at 9 AM
    notify_misfire_grace_sec: int = 3600

    whatsontv_country: str | None = None
    whatsontv_timezone: str | None = None
    whatsontv_types: CommaList = None
    whatsontv_networks: CommaList = None
    whatsontv_genres: CommaList = None
    whatsontv_languages: CommaList = None
    whatsontv_min_airtime: str | None = None
    whatsontv_exclude_show_names: CommaList = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "whatsontv_types",
        "whatsontv_networks",
        "whatsontv_genres",
        "whatsontv_languages",
        "whatsontv_exclude_show_names",
        mode="before",
    )
    @classmethod
    def parse_comma_list(cls, value):
        """Parse comma-separated values or list."""
        if value is None:
            return None
        if isinstance(value, str):
            if not value.strip():
                return None
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, list):
            return value
        return None

    @field_validator("tvmaze_base_url", "slack_api_url")
    @classmethod
    def validate_urls(cls, value: str, info) -> str:
        """Validate endpoint URLs are HTTP/HTTPS."""
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must be HTTP/HTTPS: {value}")
        return value.rstrip("/")

    @field_validator("fetch_timeout_sec", "fetch_backoff_factor")
    @classmethod
    def validate_positive_floats(cls, value: float, info) -> float:
        """Ensure floating-point HTTP settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("fetch_max_retries")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("fetch_max_retries must be >= 1")
        return value

    @field_validator("notify_misfire_grace_sec")
    @classmethod
    def validate_misfire_grace(cls, value: int) -> int:
        """Validate scheduler misfire grace period (seconds)."""
        if value < 0:
            raise ValueError("notify_misfire_grace_sec must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("notify_cron")
    @classmethod
    def validate_cron_expression(cls, value: str) -> str:
        """Validate cron expression is valid."""
        try:
            croniter(value)
            return value
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Invalid cron expression '{value}': {exc}") from exc

    @field_validator("whatsontv_timezone")
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        if value and not is_valid_timezone(value):
            raise ValueError(f"Invalid timezone: {value}")
        return value or None

    @model_validator(mode="after")
    def validate_slack_configuration(self):
        """Warn early when delivery credentials are incomplete."""
        if bool(self.slack_token) != bool(self.slack_channel):
            logger.warning(
                "Only one of SLACK_TOKEN / SLACK_CHANNEL is set - Slack delivery needs both "
                "(the config file may still supply the other)"
            )
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.debug("Configuration loaded:")
        logger.debug("  Config File: %s", self.config_file)
        logger.debug("  TVMaze API: %s", self.tvmaze_base_url)
        logger.debug(
            "  Fetch: timeout=%.1fs retries=%s backoff=%.1f",
            self.fetch_timeout_sec,
            self.fetch_max_retries,
            self.fetch_backoff_factor,
        )
        logger.debug("  Slack Channel: %s", self.slack_channel or "not set")
        logger.debug("  Slack Token: %s", "set" if self.slack_token else "not set")
        logger.debug("  Notify Schedule: %s", self.notify_cron)


settings = CustomSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
