from typing import Any, Literal
import math
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from whatsontv.utils.patterns import ExclusionPattern, compile_exclusion_pattern
from whatsontv.utils.timeparse import parse_iso_date, is_valid_timezone, DateFormatError


logger = logging.getLogger(__name__)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_COUNTRY = "US"
DEFAULT_MIN_AIRTIME = "18:00"

ScheduleSource = Literal["network", "web", "all"]
SortOrder = Literal["time", "name"]


def coerce_int(value: Any) -> int:
    """Coerce upstream numbers ('05', 5, None, 'abc') to a non-negative int, 0 when unusable"""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return max(int(match.group(1), 10), 0) if match else 0
    return 0


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Upstream TVMaze payloads (lenient: unknown keys ignored, bad values dropped)
# ---------------------------------------------------------------------------

class TvMazeCountry(BaseModel):
    """Country attached to a network"""
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    code: str | None = None
    timezone: str | None = None

    @field_validator("name", "code", "timezone", mode="before")
    @classmethod
    def drop_non_strings(cls, v: Any) -> str | None:
        return _optional_str(v)


class TvMazeChannel(BaseModel):
    """Broadcast network or web channel"""
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    name: str | None = None
    country: TvMazeCountry | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int:
        return coerce_int(v)

    @field_validator("name", mode="before")
    @classmethod
    def drop_non_string_name(cls, v: Any) -> str | None:
        return _optional_str(v)

    @field_validator("country", mode="before")
    @classmethod
    def drop_malformed_country(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


class TvMazeShow(BaseModel):
    """Show object nested in a schedule item"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int = 0
    name: str | None = None
    type: str | None = None
    language: str | None = None
    genres: list[str] = Field(default_factory=list)
    summary: str | None = None
    network: TvMazeChannel | None = None
    web_channel: TvMazeChannel | None = Field(default=None, alias="webChannel")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int:
        return coerce_int(v)

    @field_validator("name", "type", "language", "summary", mode="before")
    @classmethod
    def drop_non_strings(cls, v: Any) -> str | None:
        return _optional_str(v)

    @field_validator("genres", mode="before")
    @classmethod
    def keep_string_genres(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [genre for genre in v if isinstance(genre, str)]

    @field_validator("network", "web_channel", mode="before")
    @classmethod
    def drop_malformed_channel(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


class TvMazeScheduleFields(BaseModel):
    """Episode-level fields shared by both schedule item shapes"""
    model_config = ConfigDict(extra="ignore")

    airtime: str | None = None
    season: int = 0
    number: int = 0

    @field_validator("airtime", mode="before")
    @classmethod
    def drop_non_string_airtime(cls, v: Any) -> str | None:
        return _optional_str(v)

    @field_validator("season", "number", mode="before")
    @classmethod
    def coerce_episode_position(cls, v: Any) -> int:
        return coerce_int(v)


# ---------------------------------------------------------------------------
# Persisted configuration file
# ---------------------------------------------------------------------------

class SlackConfig(BaseModel):
    """Slack block of the configuration file"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token: str | None = None
    channel_id: str | None = Field(default=None, alias="channelId")
    username: str | None = None
    icon_emoji: str | None = None
    date_format: str | None = Field(default=None, alias="dateFormat")


class AppConfig(BaseModel):
    """JSON configuration file; every key is optional"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    country: str | None = None
    timezone: str | None = None
    types: list[str] | None = None
    networks: list[str] | None = None
    genres: list[str] | None = None
    languages: list[str] | None = None
    min_airtime: str | None = Field(default=None, alias="minAirtime")
    notification_time: str | None = Field(default=None, alias="notificationTime")
    show_name_filter: list[str] | None = Field(default=None, alias="showNameFilter")
    slack: SlackConfig | None = None
    operations_email: str | None = Field(default=None, alias="operationsEmail")

    @field_validator("timezone", mode="before")
    @classmethod
    def drop_unknown_timezone(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        if not is_valid_timezone(v):
            logger.warning("Ignoring unknown timezone '%s' in config file", v)
            return None
        return v


# ---------------------------------------------------------------------------
# Show options
# ---------------------------------------------------------------------------

class OptionsLayer(BaseModel):
    """One partial configuration source; None means 'not provided by this layer'"""
    model_config = ConfigDict(extra="forbid")

    date: str | None = None
    country: str | None = None
    timezone: str | None = None
    types: list[str] | None = None
    networks: list[str] | None = None
    genres: list[str] | None = None
    languages: list[str] | None = None
    min_airtime: str | None = None
    exclude_show_names: list[str] | None = None
    source: ScheduleSource | None = None
    sort_by: SortOrder | None = None
    pad_episodes: bool | None = None


class ShowOptions(BaseModel):
    """Fully resolved filter and display options for one pipeline run"""
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="Schedule date (YYYY-MM-DD)")
    country: str = Field(DEFAULT_COUNTRY, description="Country code for the network schedule")
    timezone: str | None = Field(None, description="IANA timezone used to compute 'today'")
    types: list[str] = Field(default_factory=list, description="Show types to include")
    networks: list[str] = Field(default_factory=list, description="Networks to include")
    genres: list[str] = Field(default_factory=list, description="Genres to include")
    languages: list[str] = Field(default_factory=list, description="Languages to include")
    min_airtime: str = Field(DEFAULT_MIN_AIRTIME, description="Minimum airtime (HH:MM); empty disables")
    exclude_show_names: list[str] = Field(default_factory=list, description="Regex or literal name exclusions")
    source: ScheduleSource = Field("network", description="Which schedules to fetch")
    sort_by: SortOrder = Field("time", description="Ordering of shows within a network")
    pad_episodes: bool = Field(False, description="Zero-pad episode codes (S01E01)")

    _exclusion_patterns: tuple[ExclusionPattern, ...] = PrivateAttr(default=())

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        try:
            return parse_iso_date(v).isoformat()
        except DateFormatError as e:
            raise ValueError(str(e)) from e

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if v and not is_valid_timezone(v):
            raise ValueError(f"Invalid timezone: {v}. Must be a valid IANA timezone (e.g., 'Europe/London')")
        return v or None

    def model_post_init(self, __context: Any) -> None:
        self._exclusion_patterns = tuple(
            compile_exclusion_pattern(pattern) for pattern in self.exclude_show_names if pattern
        )

    @property
    def exclusion_patterns(self) -> tuple[ExclusionPattern, ...]:
        return self._exclusion_patterns


# ---------------------------------------------------------------------------
# HTTP responses
# ---------------------------------------------------------------------------

class ShowResponse(BaseModel):
    """Single normalized show"""
    id: int
    name: str
    type: str
    language: str | None
    genres: list[str]
    network: str
    summary: str | None
    airtime: str | None
    season: int
    number: int


class NetworkShowsResponse(BaseModel):
    """Shows of one network"""
    network: str
    shows: list[ShowResponse]


class ShowsResponse(BaseModel):
    """Filtered, grouped schedule for one date"""
    date: str
    country: str
    total_shows: int
    sources_failed: list[str] = Field(default_factory=list)
    networks: list[NetworkShowsResponse]
