"""
Configuration Resolver

Builds the resolved ShowOptions from an ordered list of partial layers:
built-in defaults, then the JSON config file, then environment variables /
command-line arguments, then explicit per-call overrides. Later layers win
field by field; lists replace wholesale.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
import json
import logging

from pydantic import ValidationError

from whatsontv.config import CustomSettings
from whatsontv.schemas import (
    AppConfig,
    DEFAULT_COUNTRY,
    DEFAULT_MIN_AIRTIME,
    OptionsLayer,
    ShowOptions,
)
from whatsontv.utils.timeparse import today_in_timezone


logger = logging.getLogger(__name__)

# Values that switch the minimum-airtime filter off
_DISABLED_AIRTIME = {"off", "none", "any"}


class ConfigurationError(RuntimeError):
    """Raised when required configuration (e.g. delivery credentials) is missing"""
    pass


@dataclass(frozen=True, slots=True)
class SlackOptions:
    token: str
    channel_id: str
    username: str
    icon_emoji: str | None = None


def default_layer() -> OptionsLayer:
    return OptionsLayer(
        country=DEFAULT_COUNTRY,
        types=[],
        networks=[],
        genres=[],
        languages=[],
        min_airtime=DEFAULT_MIN_AIRTIME,
        exclude_show_names=[],
        source="network",
        sort_by="time",
        pad_episodes=False,
    )


def _is_provided(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, list):
        return len(value) > 0
    return True


def merge_option_layers(layers: Iterable[OptionsLayer | None]) -> ShowOptions:
    """
    Fold partial layers (lowest priority first) over the built-in defaults

    A layer field replaces the current value only when it is non-empty.
    The date is computed last, in the resolved timezone, when no layer set it.
    """
    merged = default_layer().model_dump()

    for layer in layers:
        if layer is None:
            continue
        for name, value in layer.model_dump().items():
            if _is_provided(value):
                merged[name] = value

    min_airtime = merged.get("min_airtime") or ""
    if min_airtime.strip().lower() in _DISABLED_AIRTIME:
        merged["min_airtime"] = ""

    if not _is_provided(merged.get("date")):
        merged["date"] = today_in_timezone(merged.get("timezone"))

    return ShowOptions(**merged)


def resolve_config_path(path: str | Path | None, settings: CustomSettings) -> Path:
    """Explicit path, else CONFIG_FILE (via settings), else ./config.json"""
    if path:
        return Path(path)
    return Path(settings.config_file or "config.json")


def load_config_file(path: str | Path) -> AppConfig:
    """
    Load the JSON configuration file

    A missing, unreadable or invalid file is never fatal: a warning is
    logged and an empty configuration (all defaults) is returned.
    """
    config_path = Path(path)

    if not config_path.exists():
        logger.warning("Config file %s not found, using defaults", config_path)
        return AppConfig()

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read config file %s: %s - using defaults", config_path, e)
        return AppConfig()
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in config file %s: %s - using defaults", config_path, e)
        return AppConfig()

    if not isinstance(raw, dict):
        logger.warning("Config file %s must contain a JSON object - using defaults", config_path)
        return AppConfig()

    try:
        config = AppConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("Invalid config file %s: %s - using defaults", config_path, e)
        return AppConfig()

    logger.info("Loaded config file %s", config_path)
    return config


def file_layer(config: AppConfig) -> OptionsLayer:
    return OptionsLayer(
        country=config.country,
        timezone=config.timezone,
        types=config.types,
        networks=config.networks,
        genres=config.genres,
        languages=config.languages,
        min_airtime=config.min_airtime,
        exclude_show_names=config.show_name_filter,
    )


def env_layer(settings: CustomSettings) -> OptionsLayer:
    return OptionsLayer(
        country=settings.whatsontv_country,
        timezone=settings.whatsontv_timezone,
        types=settings.whatsontv_types,
        networks=settings.whatsontv_networks,
        genres=settings.whatsontv_genres,
        languages=settings.whatsontv_languages,
        min_airtime=settings.whatsontv_min_airtime,
        exclude_show_names=settings.whatsontv_exclude_show_names,
    )


def resolve_show_options(
    settings: CustomSettings,
    *,
    app_config: AppConfig | None = None,
    cli_layer: OptionsLayer | None = None,
    override: OptionsLayer | None = None,
) -> ShowOptions:
    """
    Resolve the options for one run

    Args:
        settings: Environment-backed settings
        app_config: Parsed config file (loaded from settings.config_file when omitted)

    Keyword Args:
        cli_layer: Values taken from command-line arguments
        override: Explicit per-call overrides (highest priority)
    """
    if app_config is None:
        app_config = load_config_file(resolve_config_path(None, settings))

    options = merge_option_layers([
        file_layer(app_config),
        env_layer(settings),
        cli_layer,
        override,
    ])

    logger.info(
        "Show options: date=%s country=%s source=%s min_airtime=%s types=%s networks=%s genres=%s languages=%s exclusions=%s",
        options.date,
        options.country,
        options.source,
        options.min_airtime or "off",
        options.types or "any",
        options.networks or "any",
        options.genres or "any",
        options.languages or "any",
        len(options.exclude_show_names),
    )
    return options


def resolve_slack_options(app_config: AppConfig, settings: CustomSettings) -> SlackOptions:
    """
    Slack credentials: environment values as base, non-empty config file values override

    Raises:
        ConfigurationError: If the token or channel is missing
    """
    slack = app_config.slack
    token = settings.slack_token
    channel_id = settings.slack_channel
    username = settings.slack_username
    icon_emoji = settings.slack_icon_emoji or None

    if slack is not None:
        if slack.token and slack.token.strip():
            token = slack.token
        if slack.channel_id and slack.channel_id.strip():
            channel_id = slack.channel_id
        if slack.username and slack.username.strip():
            username = slack.username
        if slack.icon_emoji is not None:
            icon_emoji = slack.icon_emoji

    missing = [name for name, value in (("SLACK_TOKEN", token), ("SLACK_CHANNEL", channel_id)) if not value]
    if missing:
        raise ConfigurationError(f"Missing Slack configuration: {', '.join(missing)}")

    return SlackOptions(
        token=token,
        channel_id=channel_id,
        username=username,
        icon_emoji=icon_emoji,
    )


def notification_cron(app_config: AppConfig, settings: CustomSettings) -> str:
    """
    Cron expression for the scheduled Slack notification

    NOTIFY_CRON wins when set explicitly; otherwise the config file's
    notificationTime (HH:MM) becomes a daily schedule.
    """
    if "notify_cron" in settings.model_fields_set:
        return settings.notify_cron

    if app_config.notification_time:
        hours, sep, minutes = app_config.notification_time.partition(":")
        if sep and hours.isdigit() and minutes.isdigit() and int(hours) < 24 and int(minutes) < 60:
            return f"{int(minutes)} {int(hours)} * * *"
        logger.warning("Ignoring invalid notificationTime '%s'", app_config.notification_time)

    return settings.notify_cron
