from __future__ import annotations

import asyncio
from typing import Any

import pytest

from whatsontv.config import CustomSettings
from whatsontv.models import Show
from whatsontv.schemas import ShowOptions


def run(coro):
    return asyncio.run(coro)


def make_show(**overrides: Any) -> Show:
    values: dict[str, Any] = {
        "id": 1,
        "name": "Test Show",
        "type": "Scripted",
        "network": "ABC",
        "language": "English",
        "genres": ("Drama",),
        "summary": None,
        "airtime": "20:00",
        "season": 1,
        "number": 1,
    }
    values.update(overrides)
    return Show(**values)


def make_options(**overrides: Any) -> ShowOptions:
    values: dict[str, Any] = {"date": "2026-10-18", "min_airtime": ""}
    values.update(overrides)
    return ShowOptions(**values)


def network_item(show_id: int = 1, name: str = "X", network: str | None = "ABC", **item: Any) -> dict:
    show: dict[str, Any] = {"id": show_id, "name": name, "type": "Scripted", "genres": ["Drama"], "language": "English"}
    if network is not None:
        show["network"] = {"id": 1, "name": network, "country": {"name": "United States", "code": "US"}}
    payload: dict[str, Any] = {"id": show_id * 100, "airtime": "20:00", "season": 1, "number": 1, "show": show}
    payload.update(item)
    return payload


def web_item(show_id: int = 2, name: str = "Stream", channel: str = "Netflix", **item: Any) -> dict:
    show = {
        "id": show_id,
        "name": name,
        "type": "Scripted",
        "genres": ["Comedy"],
        "language": "English",
        "network": None,
        "webChannel": {"id": 1, "name": channel, "country": None},
    }
    payload: dict[str, Any] = {"id": show_id * 100, "airtime": "", "season": 1, "number": 1, "_embedded": {"show": show}}
    payload.update(item)
    return payload


@pytest.fixture
def settings() -> CustomSettings:
    return CustomSettings(
        _env_file=None,
        config_file="does-not-exist.json",
        fetch_max_retries=1,
        slack_token="",
        slack_channel="",
    )
