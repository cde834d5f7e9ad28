"""
Schedule Normalizer Service

Converts raw TVMaze schedule items into Show entities.

TVMaze returns two layouts: network schedule items carry the show under
'show', web/streaming items under '_embedded.show'. Each item is classified
exactly once before any field is read.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
import logging

from pydantic import ValidationError

from whatsontv.models import Show, UNKNOWN_NETWORK, UNKNOWN_SHOW, UNKNOWN_TYPE
from whatsontv.schemas import TvMazeChannel, TvMazeScheduleFields, TvMazeShow


logger = logging.getLogger(__name__)


class NormalizationError(ValueError):
    """Raised when a schedule item cannot be turned into a Show"""
    pass


@dataclass(frozen=True, slots=True)
class NetworkScheduleItem:
    """Schedule item with the show under 'show'"""
    item: Mapping[str, Any]
    show: Any


@dataclass(frozen=True, slots=True)
class WebScheduleItem:
    """Schedule item with the show under '_embedded.show'"""
    item: Mapping[str, Any]
    show: Any


ScheduleItem = NetworkScheduleItem | WebScheduleItem


def classify_schedule_item(raw: Any) -> ScheduleItem:
    """
    Decide which upstream layout a raw item uses

    An item is web-shaped iff it has a non-null '_embedded' mapping that
    contains a 'show' key; everything else is treated as network-shaped.

    Raises:
        NormalizationError: If the item is not a JSON object
    """
    if not isinstance(raw, Mapping):
        raise NormalizationError(f"Schedule item must be an object, got {type(raw).__name__}")

    embedded = raw.get("_embedded")
    if isinstance(embedded, Mapping) and "show" in embedded:
        return WebScheduleItem(item=raw, show=embedded["show"])

    return NetworkScheduleItem(item=raw, show=raw.get("show"))


def resolve_network_name(show: TvMazeShow) -> str:
    """Broadcast network name, else web channel name, else 'Unknown Network'"""
    for channel in (show.network, show.web_channel):
        name = _channel_name(channel)
        if name:
            return name
    return UNKNOWN_NETWORK


def _channel_name(channel: TvMazeChannel | None) -> str | None:
    if channel is None or not channel.name or not channel.name.strip():
        return None
    return channel.name


def parse_schedule_item(raw: Any) -> Show:
    """
    Parse one raw schedule item into a Show

    Raises:
        NormalizationError: If the item has no usable nested show object
    """
    classified = classify_schedule_item(raw)

    if not isinstance(classified.show, Mapping):
        raise NormalizationError("Schedule item has no nested show object")

    try:
        show = TvMazeShow.model_validate(classified.show)
        fields = TvMazeScheduleFields.model_validate(classified.item)
    except ValidationError as e:
        raise NormalizationError(f"Malformed schedule item: {e.error_count()} validation error(s)") from e

    return Show(
        id=show.id,
        name=show.name if show.name is not None else UNKNOWN_SHOW,
        type=show.type if show.type is not None else UNKNOWN_TYPE,
        language=show.language,
        genres=tuple(show.genres),
        network=resolve_network_name(show),
        summary=show.summary,
        airtime=fields.airtime or None,
        season=fields.season,
        number=fields.number,
    )


def normalize_schedule_item(raw: Any) -> Show | None:
    """Parse one item; None signals that the item should be dropped"""
    try:
        return parse_schedule_item(raw)
    except NormalizationError as e:
        item_id = raw.get("id") if isinstance(raw, Mapping) else None
        logger.debug("Dropping schedule item %s: %s", item_id, e)
        return None


def normalize_schedule(items: Iterable[Any]) -> list[Show]:
    """
    Normalize a batch of raw schedule items

    Preserves relative order and silently omits items that fail normalization.
    """
    shows = []
    dropped = 0

    for raw in items:
        show = normalize_schedule_item(raw)
        if show is None:
            dropped += 1
            continue
        shows.append(show)

    if dropped:
        logger.info("Normalized %s schedule items, dropped %s malformed", len(shows), dropped)
    else:
        logger.debug("Normalized %s schedule items", len(shows))

    return shows
