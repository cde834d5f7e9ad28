"""
Grouping and sorting of filtered shows

Groups shows by distribution channel and orders groups and members
deterministically.
"""
from collections.abc import Iterable, Sequence

from whatsontv.models import NetworkGroups, Show
from whatsontv.schemas import SortOrder
from whatsontv.utils.timeparse import parse_time_to_minutes


def collation_key(value: str) -> tuple[str, str]:
    """Case-insensitive primary order with the original string as tie-break"""
    return value.casefold(), value


def group_shows_by_network(shows: Iterable[Show]) -> NetworkGroups:
    """Every show lands under exactly one key: its network, verbatim"""
    groups: NetworkGroups = {}
    for show in shows:
        groups.setdefault(show.network, []).append(show)
    return groups


def group_shows_by_show_id(shows: Iterable[Show]) -> dict[int, list[Show]]:
    """Episodes keyed by show id, in first-seen order"""
    groups: dict[int, list[Show]] = {}
    for show in shows:
        groups.setdefault(show.id, []).append(show)
    return groups


def sort_shows_by_name(shows: Sequence[Show]) -> list[Show]:
    return sorted(shows, key=lambda show: collation_key(show.name))


def sort_shows_by_time(shows: Sequence[Show]) -> list[Show]:
    """Ascending airtime; shows without a parseable airtime go last, in original order"""
    def key(show: Show) -> tuple[int, int]:
        minutes = parse_time_to_minutes(show.airtime)
        return (1, 0) if minutes is None else (0, minutes)

    return sorted(shows, key=key)


def sort_shows(shows: Sequence[Show], sort_by: SortOrder = "time") -> list[Show]:
    if sort_by == "name":
        return sort_shows_by_name(shows)
    return sort_shows_by_time(shows)


def sorted_network_names(groups: NetworkGroups) -> list[str]:
    return sorted(groups, key=collation_key)


def sort_network_groups(groups: NetworkGroups, sort_by: SortOrder = "time") -> NetworkGroups:
    """New mapping with networks in display order and members sorted"""
    return {
        network: sort_shows(groups[network], sort_by)
        for network in sorted_network_names(groups)
    }
