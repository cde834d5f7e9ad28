from typing import Annotated, Literal
from fastapi import APIRouter, HTTPException, Query
import logging

from whatsontv.config import settings
from whatsontv.schemas import (
    NetworkShowsResponse,
    OptionsLayer,
    ShowResponse,
    ShowsResponse,
)
from whatsontv.services import (
    build_tvmaze_client,
    collect_shows,
    load_config_file,
    notification_scheduler,
    resolve_config_path,
    resolve_show_options,
    send_slack_notification,
)
from whatsontv.services.grouping_service import sort_network_groups


logger = logging.getLogger(__name__)

main_router = APIRouter()


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    next_run = notification_scheduler.get_next_run_time()

    return {
        "service": "WhatsOnTV",
        "version": "0.1.0",
        "next_scheduled_notification": next_run.isoformat() if next_run else None,
        "endpoints": {
            "shows": "/shows - Filtered schedule grouped by network (GET)",
            "notify": "/notify - Send today's shows to Slack (POST)",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    next_run = notification_scheduler.get_next_run_time()
    return {
        "status": "ok",
        "scheduler_running": notification_scheduler.scheduler.running if notification_scheduler.scheduler else False,
        "next_notification": next_run.isoformat() if next_run else None
    }


@main_router.get("/shows", response_model=ShowsResponse)
async def get_shows(
    date: Annotated[str | None, Query(description="Schedule date, YYYY-MM-DD (default: today)")] = None,
    country: Annotated[str | None, Query(description="Country code, e.g. US")] = None,
    types: Annotated[str | None, Query(description="Comma-separated show types")] = None,
    networks: Annotated[str | None, Query(description="Comma-separated networks")] = None,
    genres: Annotated[str | None, Query(description="Comma-separated genres")] = None,
    languages: Annotated[str | None, Query(description="Comma-separated languages")] = None,
    min_airtime: Annotated[str | None, Query(description="Minimum airtime HH:MM, 'off' to disable")] = None,
    source: Annotated[Literal["network", "web", "all"] | None, Query()] = None,
    sort_by: Annotated[Literal["time", "name"] | None, Query()] = None,
) -> ShowsResponse:
    """
    Get the filtered schedule for a date

    Query parameters override the configured options for this request only.
    """
    override = OptionsLayer(
        date=date,
        country=country,
        types=_split(types),
        networks=_split(networks),
        genres=_split(genres),
        languages=_split(languages),
        min_airtime=min_airtime,
        source=source,
        sort_by=sort_by,
    )
    try:
        options = resolve_show_options(settings, override=override)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = await collect_shows(options, build_tvmaze_client(settings))
    ordered = sort_network_groups(result.groups, options.sort_by)

    return ShowsResponse(
        date=options.date,
        country=options.country,
        total_shows=len(result.filtered),
        sources_failed=result.failed_sources,
        networks=[
            NetworkShowsResponse(
                network=network,
                shows=[ShowResponse(**show.to_dict()) for show in shows],
            )
            for network, shows in ordered.items()
        ],
    )


@main_router.post("/notify")
async def trigger_notification() -> dict:
    """
    Manually trigger the Slack notification

    Also the entry point for an external scheduled trigger. Missing Slack
    credentials answer 500, a rejected delivery 502.
    """
    logger.info("Manual Slack notification triggered via API")
    app_config = load_config_file(resolve_config_path(None, settings))
    options = resolve_show_options(settings, app_config=app_config)

    result = await send_slack_notification(options, build_tvmaze_client(settings), app_config, settings)

    return {"status": "success", **result.to_dict()}
