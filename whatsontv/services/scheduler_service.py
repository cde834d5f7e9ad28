import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from whatsontv.config import settings
from whatsontv.services.config_service import (
    load_config_file,
    notification_cron,
    resolve_config_path,
    resolve_show_options,
)
from whatsontv.services.pipeline_service import build_tvmaze_client, send_slack_notification


logger = logging.getLogger(__name__)

class NotificationScheduler:
    """Scheduler for the daily Slack notification"""

    def __init__(self):
        self.scheduler: AsyncIOScheduler | None = None

    async def _notify_job(self) -> None:
        """Background job that resolves fresh options and delivers to Slack"""
        logger.info("Scheduled Slack notification triggered")
        try:
            app_config = load_config_file(resolve_config_path(None, settings))
            options = resolve_show_options(settings, app_config=app_config)
            await send_slack_notification(options, build_tvmaze_client(settings), app_config, settings)
        except Exception as e:
            logger.error(f"Exception in scheduled notification: {e}", exc_info=True)

    def start(self) -> None:
        """Start the scheduler with the notification job"""
        if self.scheduler and self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        app_config = load_config_file(resolve_config_path(None, settings))
        cron = notification_cron(app_config, settings)
        timezone = settings.whatsontv_timezone or app_config.timezone or "UTC"

        try:
            trigger = CronTrigger.from_crontab(cron, timezone=timezone)
        except (ValueError, KeyError) as exc:
            logger.error("Invalid cron expression '%s': %s", cron, exc)
            raise

        self.scheduler = AsyncIOScheduler(timezone=timezone)
        self.scheduler.add_job(
            self._notify_job,
            trigger=trigger,
            id='slack_notify',
            max_instances=1,
            coalesce=True,
            misfire_grace_time=settings.notify_misfire_grace_sec
        )

        self.scheduler.start()
        next_time = self.get_next_run_time()
        logger.info(
            "Scheduler started (%s, %s). Next notification: %s",
            cron,
            timezone,
            next_time.isoformat() if next_time else "unknown"
        )

    def shutdown(self) -> None:
        """Shutdown the scheduler"""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")
            self.scheduler = None

    def get_next_run_time(self) -> datetime | None:
        """Get next scheduled notification time"""
        if not self.scheduler:
            return None
        job = self.scheduler.get_job('slack_notify')
        return job.next_run_time if job else None


notification_scheduler = NotificationScheduler()
