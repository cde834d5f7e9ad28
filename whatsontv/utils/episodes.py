"""
Episode numbering helpers

Collapses same-day episodes of one show into compact ranges such as
'S01E01-04, S01E06'.
"""
from collections.abc import Iterable

from whatsontv.models import Show


def _code(value: int, pad: bool) -> str:
    return f"{value:02d}" if pad else str(value)


def format_episode_info(show: Show, pad: bool = False) -> str:
    """Format a single episode as S1E1 (or S01E01 when padded)"""
    return f"S{_code(show.season, pad)}E{_code(show.number, pad)}"


def format_episode_ranges(pairs: Iterable[tuple[int, int]], pad: bool = False) -> str:
    """
    Render (season, number) pairs as comma-separated episode ranges

    Runs are formed only within one season and only from strictly
    consecutive episode numbers.

    Args:
        pairs: Unordered (season, number) pairs for the same show; duplicates count once
        pad: Zero-pad season and episode numbers to two digits

    Returns:
        e.g. 'S1E1-3, S1E5, S2E1', or '' for empty input
    """
    ordered = sorted(set(pairs))
    if not ordered:
        return ""

    runs: list[list[tuple[int, int]]] = [[ordered[0]]]
    for season, number in ordered[1:]:
        last_season, last_number = runs[-1][-1]
        if season == last_season and number == last_number + 1:
            runs[-1].append((season, number))
        else:
            runs.append([(season, number)])

    rendered = []
    for run in runs:
        season, first = run[0]
        last = run[-1][1]
        if len(run) == 1:
            rendered.append(f"S{_code(season, pad)}E{_code(first, pad)}")
        else:
            rendered.append(f"S{_code(season, pad)}E{_code(first, pad)}-{_code(last, pad)}")

    return ", ".join(rendered)


def format_show_episodes(shows: Iterable[Show], pad: bool = False) -> str:
    return format_episode_ranges(((show.season, show.number) for show in shows), pad=pad)
