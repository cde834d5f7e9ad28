"""
Show Filter Service

Applies the configured predicates (type, network, genre, language, minimum
airtime, name exclusion) to normalized shows. All predicates are combined
with AND; an empty constraint means no restriction on that dimension.
"""
from collections.abc import Callable, Iterable, Sequence
import logging

from whatsontv.models import Show
from whatsontv.schemas import ShowOptions
from whatsontv.utils.patterns import ExclusionPattern, matches_any
from whatsontv.utils.timeparse import parse_time_to_minutes


logger = logging.getLogger(__name__)

ShowPredicate = Callable[[Show], bool]


def _casefold_set(values: Iterable[str]) -> frozenset[str]:
    return frozenset(value.strip().casefold() for value in values if value and value.strip())


def type_predicate(types: Iterable[str]) -> ShowPredicate:
    allowed = _casefold_set(types)
    return lambda show: show.type.casefold() in allowed


def network_predicate(networks: Iterable[str]) -> ShowPredicate:
    allowed = _casefold_set(networks)
    return lambda show: show.network.casefold() in allowed


def genre_predicate(genres: Iterable[str]) -> ShowPredicate:
    allowed = _casefold_set(genres)
    return lambda show: any(genre.casefold() in allowed for genre in show.genres)


def language_predicate(languages: Iterable[str]) -> ShowPredicate:
    allowed = _casefold_set(languages)
    return lambda show: show.language is not None and show.language.casefold() in allowed


def min_airtime_predicate(min_airtime: str) -> ShowPredicate:
    """
    Shows must air at or after the threshold

    A show without a parseable airtime never qualifies, and neither does any
    show when the threshold itself cannot be parsed.
    """
    threshold = parse_time_to_minutes(min_airtime)

    def predicate(show: Show) -> bool:
        minutes = parse_time_to_minutes(show.airtime)
        if minutes is None or threshold is None:
            return False
        return minutes >= threshold

    return predicate


def exclusion_predicate(patterns: tuple[ExclusionPattern, ...]) -> ShowPredicate:
    return lambda show: not matches_any(patterns, show.name)


def build_predicates(options: ShowOptions) -> list[tuple[str, ShowPredicate]]:
    """Predicates for every dimension that is actually configured"""
    predicates: list[tuple[str, ShowPredicate]] = []

    if _casefold_set(options.types):
        predicates.append(("type", type_predicate(options.types)))
    if _casefold_set(options.networks):
        predicates.append(("network", network_predicate(options.networks)))
    if _casefold_set(options.genres):
        predicates.append(("genre", genre_predicate(options.genres)))
    if _casefold_set(options.languages):
        predicates.append(("language", language_predicate(options.languages)))
    if options.min_airtime and options.min_airtime.strip():
        predicates.append(("min_airtime", min_airtime_predicate(options.min_airtime)))
    if options.exclusion_patterns:
        predicates.append(("exclude_name", exclusion_predicate(options.exclusion_patterns)))

    return predicates


def filter_shows(shows: Sequence[Show], options: ShowOptions) -> list[Show]:
    """
    Return the shows that satisfy every configured predicate

    Args:
        shows: Normalized shows
        options: Resolved show options

    Returns:
        New list preserving input order
    """
    predicates = build_predicates(options)
    if not predicates:
        return list(shows)

    logger.debug("Active filters: %s", ", ".join(name for name, _ in predicates))

    filtered = [
        show for show in shows
        if all(predicate(show) for _, predicate in predicates)
    ]

    logger.info("Filtered %s shows down to %s", len(shows), len(filtered))
    return filtered
