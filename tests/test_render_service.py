from __future__ import annotations

from conftest import make_options, make_show
from whatsontv.services.config_service import SlackOptions
from whatsontv.services.render_service import (
    SLACK_MAX_BLOCKS,
    SlackRenderer,
    TextRenderer,
    build_slack_message,
    collapse_episodes,
    render,
    render_debug_info,
)


def test_text_report_layout() -> None:
    groups = {
        "NBC": [make_show(id=2, name="Late Show", network="NBC", airtime="23:30", season=10, number=4)],
        "ABC": [make_show(id=1, name="X", network="ABC", airtime="20:00", season=2, number=5)],
    }

    lines = render(TextRenderer(), groups, make_options())

    assert lines[0] == "TV Shows for Sunday, October 18, 2026"
    assert lines[1] == "=" * len(lines[0])
    assert lines[3] == "ABC:"
    assert lines[4] == "----"
    assert lines[5].startswith("8:00 PM  Scripted")
    assert lines[5].endswith("S2E5")
    assert "NBC:" in lines
    assert lines[-1] == "2 shows on 2 networks"


def test_text_report_pads_episodes_when_requested() -> None:
    groups = {"ABC": [make_show(season=2, number=5)]}

    lines = render(TextRenderer(), groups, make_options(pad_episodes=True))

    assert any(line.endswith("S02E05") for line in lines)


def test_text_report_without_shows() -> None:
    lines = render(TextRenderer(), {}, make_options())

    assert "No shows found" in lines
    assert lines[-1] == "0 shows on 0 networks"


def test_untimed_episodes_of_one_show_are_collapsed() -> None:
    shows = [
        make_show(id=5, name="Binge", airtime=None, season=1, number=n)
        for n in (3, 1, 2, 5)
    ]
    groups = {"Netflix": shows}

    entries = collapse_episodes(shows)
    lines = render(TextRenderer(), groups, make_options())

    assert len(entries) == 1
    assert entries[0].is_collapsed
    assert any(line.startswith("N/A") and line.endswith("S1E1-3, S1E5") for line in lines)


def test_timed_episodes_stay_separate() -> None:
    shows = [
        make_show(id=5, airtime="21:00", number=2),
        make_show(id=5, airtime="20:00", number=1),
        make_show(id=6, name="Other", airtime="20:30"),
    ]

    entries = collapse_episodes(shows)

    assert [(entry.show.id, entry.show.number) for entry in entries] == [(5, 1), (5, 2), (6, 1)]
    assert not any(entry.is_collapsed for entry in entries)


def test_slack_blocks_layout() -> None:
    groups = {"ABC": [make_show(name="X", airtime="20:00", type="Scripted")]}

    blocks = render(SlackRenderer(), groups, make_options())

    assert blocks[0]["type"] == "header"
    assert blocks[0]["text"]["text"] == "📺 TV Shows for Sunday, October 18, 2026"
    assert blocks[1] == {"type": "divider"}
    assert blocks[2]["text"]["text"] == "*ABC*\n📝 *X* S01E01 (8:00 PM)"
    assert blocks[-1]["type"] == "context"
    assert blocks[-1]["elements"][0]["text"] == "_Data provided by TVMaze API_"


def test_slack_unknown_type_uses_default_emoji() -> None:
    groups = {"ABC": [make_show(name="Mystery", type="unknown", airtime=None)]}

    blocks = render(SlackRenderer(), groups, make_options())

    assert blocks[2]["text"]["text"] == "*ABC*\n📺 *Mystery* S01E01 (N/A)"


def test_slack_without_shows() -> None:
    blocks = render(SlackRenderer(), {}, make_options())

    assert blocks[1]["text"]["text"] == "No shows found for today"


def test_slack_block_limit_is_respected() -> None:
    groups = {f"Network {i:02d}": [make_show(id=i, network=f"Network {i:02d}")] for i in range(40)}

    blocks = render(SlackRenderer(), groups, make_options())

    assert len(blocks) <= SLACK_MAX_BLOCKS
    assert blocks[-2]["elements"][0]["text"] == "...and 17 more networks"


def test_slack_section_text_is_truncated() -> None:
    shows = [make_show(id=i, name="N" * 200, airtime="20:00") for i in range(30)]

    blocks = render(SlackRenderer(), {"ABC": shows}, make_options())

    assert len(blocks[2]["text"]["text"]) <= 3000
    assert blocks[2]["text"]["text"].endswith("…")


def test_build_slack_message() -> None:
    options = SlackOptions(token="t", channel_id="C1", username="Bot", icon_emoji=None)

    message = build_slack_message([{"type": "divider"}], options, "2026-10-18")

    assert message.channel == "C1"
    assert message.text == "TV Shows for Sunday, October 18, 2026"
    assert message.to_payload()["username"] == "Bot"


def test_debug_info_lists_available_networks() -> None:
    shows = [make_show(network="NBC"), make_show(id=2, network="ABC")]

    lines = render_debug_info(shows, make_options())

    assert lines[1] == "Date queried: 2026-10-18"
    assert lines[2] == "Available Networks: ABC, NBC"
    assert lines[3] == "Total Shows: 2"
