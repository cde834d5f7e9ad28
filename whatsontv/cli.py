"""
Command-line entry point

    whatsontv shows [options]   print today's filtered schedule
    whatsontv slack [options]   deliver it to the configured Slack channel
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback

from whatsontv.config import CustomSettings, settings as default_settings, setup_logging
from whatsontv.schemas import OptionsLayer
from whatsontv.services import (
    build_tvmaze_client,
    load_config_file,
    resolve_config_path,
    resolve_show_options,
    run_text_report,
    send_slack_notification,
)
from whatsontv.services.render_service import render_debug_info


logger = logging.getLogger(__name__)


def comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-d", "--date", help="Date to show TV listings for (YYYY-MM-DD, default: today)")
    common.add_argument("-c", "--country", help="Country code (e.g. US, GB, CA)")
    common.add_argument("-t", "--types", type=comma_list, help="Show types to include (e.g. Scripted,Reality)")
    common.add_argument("-n", "--networks", type=comma_list, help="Networks to include (e.g. HBO,Netflix)")
    common.add_argument("-g", "--genres", type=comma_list, help="Genres to include (e.g. Drama,Comedy)")
    common.add_argument("-l", "--languages", type=comma_list, help="Languages to include (e.g. English)")
    common.add_argument("--min-airtime", help="Minimum airtime (HH:MM, 24-hour); 'off' disables the filter")
    common.add_argument("-x", "--exclude", type=comma_list, dest="exclude_show_names",
                        help="Show-name exclusion patterns (regex or literal text)")
    source = common.add_mutually_exclusive_group()
    source.add_argument("--all", action="store_const", const="all", dest="source",
                        help="Include streaming / web schedules as well as networks")
    source.add_argument("--web-only", action="store_const", const="web", dest="source",
                        help="Only streaming / web schedules")
    common.add_argument("--sort", choices=["time", "name"], dest="sort_by", help="Order of shows within a network")
    common.add_argument("--pad", action="store_true", default=None, dest="pad_episodes",
                        help="Zero-pad episode codes (S01E01)")
    common.add_argument("--config", help="Path to config.json (default: CONFIG_FILE or ./config.json)")
    common.add_argument("-D", "--debug", action="store_true", help="Enable debug output")

    parser = argparse.ArgumentParser(prog="whatsontv", description="Daily TV schedule from TVMaze")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("shows", parents=[common], help="Print the schedule to the terminal")
    commands.add_parser("slack", parents=[common], help="Send the schedule to Slack")
    return parser


def cli_layer(args: argparse.Namespace) -> OptionsLayer:
    return OptionsLayer(
        date=args.date,
        country=args.country,
        types=args.types,
        networks=args.networks,
        genres=args.genres,
        languages=args.languages,
        min_airtime=args.min_airtime,
        exclude_show_names=args.exclude_show_names,
        source=args.source,
        sort_by=args.sort_by,
        pad_episodes=args.pad_episodes,
    )


async def run(args: argparse.Namespace, settings: CustomSettings) -> int:
    app_config = load_config_file(resolve_config_path(args.config, settings))
    options = resolve_show_options(settings, app_config=app_config, cli_layer=cli_layer(args))
    client = build_tvmaze_client(settings)

    if args.command == "slack":
        result = await send_slack_notification(options, client, app_config, settings)
        print(f"Sent {len(result.filtered)} shows on {len(result.groups)} networks to Slack")
    else:
        result, lines = await run_text_report(options, client)
        print("\n".join(lines))

    if args.debug:
        print("", file=sys.stderr)
        print("\n".join(render_debug_info(result.shows, options)), file=sys.stderr)

    return 0


def main(argv: list[str] | None = None, settings: CustomSettings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or default_settings
    setup_logging("DEBUG" if args.debug else settings.log_level)

    try:
        return asyncio.run(run(args, settings))
    except Exception as exc:
        logger.error("WhatsOnTV failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        if args.debug:
            traceback.print_exc(file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
