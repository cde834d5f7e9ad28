from __future__ import annotations

import httpx
import pytest

from conftest import make_options, network_item, run, web_item
from whatsontv.schemas import AppConfig, SlackConfig
from whatsontv.services.config_service import ConfigurationError
from whatsontv.services.pipeline_service import (
    ShowPipeline,
    collect_shows,
    run_text_report,
    send_slack_notification,
    sources_for,
)
from whatsontv.services.slack_service import DeliveryError
from whatsontv.services.tvmaze_service import TvMazeClient, UpstreamFetchError


class FakeTvMazeClient:
    def __init__(self, network=None, web=None, fail=()):
        self.network = network or []
        self.web = web or []
        self.fail = set(fail)
        self.calls: list[tuple] = []

    async def get_network_schedule(self, date, country=None):
        self.calls.append(("network", date, country))
        if "network" in self.fail:
            raise UpstreamFetchError("network schedule unavailable")
        return self.network

    async def get_web_schedule(self, date):
        self.calls.append(("web", date))
        if "web" in self.fail:
            raise UpstreamFetchError("web schedule unavailable")
        return self.web


class FakeSlackClient:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.messages = []

    async def send_message(self, message):
        self.messages.append(message)
        if self.error:
            raise self.error


SLACK_CONFIG = AppConfig(slack=SlackConfig(token="xoxb-test", channel_id="C123"))


def test_sources_for_each_option() -> None:
    assert sources_for(make_options()) == ["network"]
    assert sources_for(make_options(source="web")) == ["web"]
    assert sources_for(make_options(source="all")) == ["network", "web"]


def test_pipeline_filters_and_groups() -> None:
    client = FakeTvMazeClient(network=[
        network_item(show_id=1, name="Early", airtime="17:00"),
        network_item(show_id=2, name="Prime", airtime="20:00"),
        network_item(show_id=3, name="Late", network="NBC", airtime="22:00"),
        {"id": 4},
    ])

    result = run(ShowPipeline(client).run(make_options(country="US", min_airtime="18:00")))

    assert client.calls == [("network", "2026-10-18", "US")]
    assert len(result.shows) == 3
    assert [show.name for show in result.filtered] == ["Prime", "Late"]
    assert sorted(result.groups) == ["ABC", "NBC"]
    assert result.sources[0].items_fetched == 4
    assert result.sources[0].shows_normalized == 3


def test_failed_source_contributes_nothing() -> None:
    client = FakeTvMazeClient(web=[web_item(name="Stream")], fail={"network"})

    result = run(collect_shows(make_options(source="all"), client))

    assert [call[0] for call in client.calls] == ["network", "web"]
    assert [show.name for show in result.shows] == ["Stream"]
    assert result.failed_sources == ["network"]
    details = result.to_dict()["source_details"]
    assert details[0]["status"] == "failed"
    assert "unavailable" in details[0]["error"]


def test_text_report_renders_result() -> None:
    client = FakeTvMazeClient(network=[network_item(name="Prime")])

    result, lines = run(run_text_report(make_options(), client))

    assert len(result.filtered) == 1
    assert lines[0] == "TV Shows for Sunday, October 18, 2026"
    assert lines[-1] == "1 shows on 1 networks"


def test_slack_notification_delivers_blocks(settings) -> None:
    client = FakeTvMazeClient(network=[network_item(name="Prime")])
    slack = FakeSlackClient()

    result = run(send_slack_notification(make_options(), client, SLACK_CONFIG, settings, slack_client=slack))

    assert len(result.filtered) == 1
    message = slack.messages[0]
    assert message.channel == "C123"
    assert message.blocks[0]["type"] == "header"


def test_slack_delivery_failure_propagates(settings) -> None:
    client = FakeTvMazeClient(network=[network_item(name="Prime")])
    slack = FakeSlackClient(error=DeliveryError("Slack rejected message: invalid_auth"))

    with pytest.raises(DeliveryError, match="invalid_auth"):
        run(send_slack_notification(make_options(), client, SLACK_CONFIG, settings, slack_client=slack))


def test_missing_slack_credentials_fail_before_fetching(settings) -> None:
    client = FakeTvMazeClient(network=[network_item()])

    with pytest.raises(ConfigurationError):
        run(send_slack_notification(make_options(), client, AppConfig(), settings, slack_client=FakeSlackClient()))

    assert client.calls == []


def test_unexpected_http_error_marks_source_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("loop", request=request)

    client = TvMazeClient("https://tvmaze.test", max_retries=1, transport=httpx.MockTransport(handler))

    result = run(collect_shows(make_options(), client))

    assert result.shows == []
    assert result.failed_sources == ["network"]
