"""
Show Pipeline Service

Coordinates fetching, normalization, filtering and grouping of the daily
schedule, then hands the result to a renderer / delivery channel.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from whatsontv.config import CustomSettings
from whatsontv.models import NetworkGroups, Show
from whatsontv.schemas import AppConfig, ShowOptions
from whatsontv.services.config_service import resolve_slack_options
from whatsontv.services.filter_service import filter_shows
from whatsontv.services.grouping_service import group_shows_by_network
from whatsontv.services.normalizer_service import normalize_schedule
from whatsontv.services.render_service import (
    SlackRenderer,
    TextRenderer,
    build_slack_message,
    render,
)
from whatsontv.services.slack_service import SlackClient
from whatsontv.services.tvmaze_service import TvMazeClient, UpstreamFetchError
from whatsontv.utils.logging_helpers import (
    log_filter_summary,
    log_run_end,
    log_run_start,
    log_source_processing,
)


logger = logging.getLogger(__name__)

SourceName = Literal["network", "web"]

# One run at a time per process (scheduler and manual triggers share it)
_run_lock = asyncio.Lock()


@dataclass(slots=True)
class SourceSummary:
    name: SourceName
    status: Literal["success", "failed"]
    items_fetched: int = 0
    shows_normalized: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        payload = {
            "source": self.name,
            "status": self.status,
            "items_fetched": self.items_fetched,
            "shows_normalized": self.shows_normalized,
        }
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class PipelineResult:
    options: ShowOptions
    started_at: datetime
    shows: list[Show] = field(default_factory=list)
    filtered: list[Show] = field(default_factory=list)
    groups: NetworkGroups = field(default_factory=dict)
    sources: list[SourceSummary] = field(default_factory=list)

    @property
    def failed_sources(self) -> list[str]:
        return [summary.name for summary in self.sources if summary.status == "failed"]

    def to_dict(self) -> dict:
        return {
            "date": self.options.date,
            "started_at": self.started_at.isoformat(),
            "shows_fetched": len(self.shows),
            "shows_listed": len(self.filtered),
            "networks": len(self.groups),
            "source_details": [summary.to_dict() for summary in self.sources],
        }


def sources_for(options: ShowOptions) -> list[SourceName]:
    if options.source == "web":
        return ["web"]
    if options.source == "all":
        return ["network", "web"]
    return ["network"]


class ShowPipeline:
    """Fetch -> normalize -> filter -> group for one date"""

    def __init__(self, client: TvMazeClient) -> None:
        self.client = client

    async def run(self, options: ShowOptions) -> PipelineResult:
        result = PipelineResult(options=options, started_at=datetime.now(timezone.utc))
        names = sources_for(options)

        # Sources are fetched one after the other, never overlapping
        for index, name in enumerate(names, start=1):
            log_source_processing(logger, index, len(names), name)
            summary, shows = await self._process_source(name, options)
            result.sources.append(summary)
            result.shows.extend(shows)

        result.filtered = filter_shows(result.shows, options)
        result.groups = group_shows_by_network(result.filtered)
        log_filter_summary(logger, len(result.shows), len(result.filtered), len(result.groups))
        return result

    async def _process_source(self, name: SourceName, options: ShowOptions) -> tuple[SourceSummary, list[Show]]:
        try:
            if name == "web":
                items = await self.client.get_web_schedule(options.date)
            else:
                items = await self.client.get_network_schedule(options.date, options.country)
        except UpstreamFetchError as exc:
            logger.error("[Source %s] Failed to fetch schedule: %s", name, exc, exc_info=True)
            return SourceSummary(name=name, status="failed", error=str(exc)), []

        shows = normalize_schedule(items)
        return SourceSummary(
            name=name,
            status="success",
            items_fetched=len(items),
            shows_normalized=len(shows),
        ), shows


def build_tvmaze_client(settings: CustomSettings) -> TvMazeClient:
    return TvMazeClient(
        settings.tvmaze_base_url,
        timeout=settings.fetch_timeout_sec,
        max_retries=settings.fetch_max_retries,
        backoff_factor=settings.fetch_backoff_factor,
    )


async def collect_shows(options: ShowOptions, client: TvMazeClient) -> PipelineResult:
    log_run_start(logger, options.date)
    result = await ShowPipeline(client).run(options)
    log_run_end(logger, options.date)
    return result


async def run_text_report(options: ShowOptions, client: TvMazeClient) -> tuple[PipelineResult, list[str]]:
    """Collect shows and render them as terminal lines"""
    result = await collect_shows(options, client)
    return result, render(TextRenderer(), result.groups, options)


async def send_slack_notification(
    options: ShowOptions,
    client: TvMazeClient,
    app_config: AppConfig,
    settings: CustomSettings,
    *,
    slack_client: SlackClient | None = None,
) -> PipelineResult:
    """
    Collect shows and deliver them to Slack

    Raises:
        ConfigurationError: If Slack credentials are missing
        DeliveryError: If Slack does not accept the message
    """
    if _run_lock.locked():
        logger.warning("Slack notification already in progress, waiting for it to finish")

    async with _run_lock:
        # Credentials are checked before any fetching happens
        slack_options = resolve_slack_options(app_config, settings)
        if slack_client is None:
            slack_client = SlackClient(
                slack_options,
                api_url=settings.slack_api_url,
                timeout=settings.fetch_timeout_sec,
            )

        result = await collect_shows(options, client)
        blocks = render(SlackRenderer(), result.groups, options)
        message = build_slack_message(blocks, slack_options, options.date)
        await slack_client.send_message(message)
        logger.info("Slack notification delivered: %s shows on %s networks", len(result.filtered), len(result.groups))
        return result
