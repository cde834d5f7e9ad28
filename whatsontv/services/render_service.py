"""
Output rendering

A single render() function drives any Renderer: an object providing
render_header / render_content / render_footer for one target. Two targets
exist: plain text lines for the terminal and Slack blocks for chat delivery.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from whatsontv.models import NetworkGroups, Show
from whatsontv.schemas import ShowOptions, SortOrder
from whatsontv.services.config_service import SlackOptions
from whatsontv.services.grouping_service import (
    group_shows_by_show_id,
    sort_network_groups,
    sort_shows_by_time,
)
from whatsontv.services.slack_service import SlackMessage
from whatsontv.utils.episodes import format_episode_info, format_show_episodes
from whatsontv.utils.timeparse import NO_AIRTIME, format_display_date, format_time_with_period


T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

DATA_CREDIT = "Data provided by TVMaze API"

SLACK_MAX_BLOCKS = 50
SLACK_MAX_SECTION_CHARS = 3000

TYPE_EMOJI = {
    "scripted": "📝",
    "reality": "👁️",
    "talk show": "🎙️",
    "talk": "🎙️",
    "documentary": "🎬",
    "variety": "🎭",
    "game show": "🎮",
    "game": "🎮",
    "news": "📰",
    "sports": "⚽",
    "animation": "🧸",
}
DEFAULT_EMOJI = "📺"


@dataclass(frozen=True, slots=True)
class RenderContext:
    date: str
    total_shows: int
    network_count: int
    pad_episodes: bool
    sort_by: SortOrder


@dataclass(frozen=True, slots=True)
class ShowEntry:
    """One rendered row: a single episode, or several untimed episodes of one show"""
    show: Show
    episodes: tuple[Show, ...]

    @property
    def is_collapsed(self) -> bool:
        return len(self.episodes) > 1


class Renderer(Protocol[T_co]):
    def render_header(self, context: RenderContext) -> list[T_co]: ...

    def render_content(self, groups: NetworkGroups, context: RenderContext) -> list[T_co]: ...

    def render_footer(self, context: RenderContext) -> list[T_co]: ...


def render(renderer: Renderer[T], groups: NetworkGroups, options: ShowOptions) -> list[T]:
    """
    Render grouped shows with the given target

    Networks are ordered by name and shows within them by options.sort_by
    before the renderer sees them.
    """
    ordered = sort_network_groups(groups, options.sort_by)
    context = RenderContext(
        date=options.date,
        total_shows=sum(len(shows) for shows in ordered.values()),
        network_count=len(ordered),
        pad_episodes=options.pad_episodes,
        sort_by=options.sort_by,
    )
    return [
        *renderer.render_header(context),
        *renderer.render_content(ordered, context),
        *renderer.render_footer(context),
    ]


def collapse_episodes(shows: Sequence[Show]) -> list[ShowEntry]:
    """
    Merge same-show episodes for display

    Several episodes of one show that all lack an airtime become one entry
    (rendered as episode ranges); otherwise every episode is its own entry,
    ordered by airtime. Entries follow the first appearance of each show.
    """
    by_show = group_shows_by_show_id(shows)
    entries: list[ShowEntry] = []

    for episodes in by_show.values():
        if len(episodes) == 1:
            entries.append(ShowEntry(show=episodes[0], episodes=(episodes[0],)))
        elif not any(episode.has_airtime() for episode in episodes):
            entries.append(ShowEntry(show=episodes[0], episodes=tuple(episodes)))
        else:
            entries.extend(
                ShowEntry(show=episode, episodes=(episode,))
                for episode in sort_shows_by_time(episodes)
            )

    return entries


def _episode_text(entry: ShowEntry, pad: bool) -> str:
    if entry.is_collapsed:
        return format_show_episodes(entry.episodes, pad=pad)
    return format_episode_info(entry.show, pad=pad)


def _airtime_text(entry: ShowEntry) -> str:
    if entry.is_collapsed:
        return NO_AIRTIME
    return format_time_with_period(entry.show.airtime)


class TextRenderer:
    """Plain text lines for terminal output"""

    PAD_LENGTHS = {"time": 8, "type": 12, "show_name": 30}

    def render_header(self, context: RenderContext) -> list[str]:
        title = f"TV Shows for {format_display_date(context.date)}"
        return [title, "=" * len(title), ""]

    def render_content(self, groups: NetworkGroups, context: RenderContext) -> list[str]:
        if not groups:
            return ["No shows found"]

        lines: list[str] = []
        for network, shows in groups.items():
            if lines:
                lines.append("")
            header = f"{network}:"
            lines.append(header)
            lines.append("-" * len(header))
            for entry in collapse_episodes(shows):
                lines.append(self.format_entry(entry, context.pad_episodes))
        return lines

    def render_footer(self, context: RenderContext) -> list[str]:
        return ["", f"{context.total_shows} shows on {context.network_count} networks"]

    def format_entry(self, entry: ShowEntry, pad: bool) -> str:
        time = _airtime_text(entry).ljust(self.PAD_LENGTHS["time"])
        show_type = entry.show.type.ljust(self.PAD_LENGTHS["type"])
        name = entry.show.name.ljust(self.PAD_LENGTHS["show_name"])
        return f"{time} {show_type} {name} {_episode_text(entry, pad)}".rstrip()


class SlackRenderer:
    """Slack Block Kit blocks, one section per network"""

    def render_header(self, context: RenderContext) -> list[dict[str, Any]]:
        return [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{DEFAULT_EMOJI} TV Shows for {format_display_date(context.date)}",
                    "emoji": True,
                },
            }
        ]

    def render_content(self, groups: NetworkGroups, context: RenderContext) -> list[dict[str, Any]]:
        if not groups:
            return [_section("No shows found for today")]

        # header + footer + (divider, section) per network
        max_networks = (SLACK_MAX_BLOCKS - 3) // 2
        networks = list(groups.items())

        blocks: list[dict[str, Any]] = []
        for network, shows in networks[:max_networks]:
            blocks.append({"type": "divider"})
            blocks.append(self.format_network_section(network, shows))

        hidden = len(networks) - max_networks
        if hidden > 0:
            blocks.append(_context(f"...and {hidden} more networks"))
        return blocks

    def render_footer(self, context: RenderContext) -> list[dict[str, Any]]:
        return [_context(f"_{DATA_CREDIT}_")]

    def format_network_section(self, network: str, shows: Sequence[Show]) -> dict[str, Any]:
        lines = [f"*{network}*"]
        lines.extend(self.format_entry(entry) for entry in collapse_episodes(shows))
        return _section(_truncate("\n".join(lines), SLACK_MAX_SECTION_CHARS))

    def format_entry(self, entry: ShowEntry) -> str:
        emoji = TYPE_EMOJI.get(entry.show.type.casefold(), DEFAULT_EMOJI)
        return f"{emoji} *{entry.show.name}* {_episode_text(entry, pad=True)} ({_airtime_text(entry)})"


def build_slack_message(blocks: list[dict[str, Any]], slack_options: SlackOptions, date: str) -> SlackMessage:
    return SlackMessage(
        channel=slack_options.channel_id,
        text=f"TV Shows for {format_display_date(date)}",
        blocks=blocks,
        username=slack_options.username,
        icon_emoji=slack_options.icon_emoji,
    )


def render_debug_info(shows: Sequence[Show], options: ShowOptions) -> list[str]:
    networks = sorted({show.network for show in shows})
    return [
        "Debug Information:",
        f"Date queried: {options.date}",
        f"Available Networks: {', '.join(networks) if networks else 'none'}",
        f"Total Shows: {len(shows)}",
    ]


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _context(text: str) -> dict[str, Any]:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


__all__ = [
    "Renderer",
    "RenderContext",
    "ShowEntry",
    "TextRenderer",
    "SlackRenderer",
    "render",
    "collapse_episodes",
    "build_slack_message",
    "render_debug_info",
]
