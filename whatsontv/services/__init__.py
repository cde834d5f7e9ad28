"""
Services package for WhatsOnTV

This package contains all business logic and service layer components.
"""
from whatsontv.services.config_service import (
    ConfigurationError,
    load_config_file,
    resolve_config_path,
    resolve_show_options,
)
from whatsontv.services.pipeline_service import (
    build_tvmaze_client,
    collect_shows,
    run_text_report,
    send_slack_notification,
)
from whatsontv.services.scheduler_service import notification_scheduler
from whatsontv.services.slack_service import DeliveryError

__all__ = [
    'ConfigurationError',
    'DeliveryError',
    'build_tvmaze_client',
    'collect_shows',
    'load_config_file',
    'notification_scheduler',
    'resolve_config_path',
    'resolve_show_options',
    'run_text_report',
    'send_slack_notification',
]
