"""
Random Album CLI - Entry point

`run` owns the mpv player and refills its queue with random albums. The other
commands are one-shot: `play` and `enqueue` talk to the mpv socket of a
running session, the rest read or change the collection and settings.
"""

import argparse
import sys
from pathlib import Path

from random_album.core.config import ensure_directories, load_config
from random_album.core.database import init_database
from random_album.core.output import setup_loguru
from random_album.domain.selection import SubFilter


def _add_toggle(parser: argparse.ArgumentParser, name: str, dest: str, help_text: str) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(f"--{name}", dest=dest, action="store_true", default=None, help=help_text)
    group.add_argument(f"--no-{name}", dest=dest, action="store_false", help=f"Turn off: {help_text.lower()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="random-album",
        description="Random Album - plays random albums from your collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    # Playback
    subparsers.add_parser("run", help="Start the player and keep playing random albums")
    subparsers.add_parser("play", help="Replace the running queue with a random album")
    subparsers.add_parser("enqueue", help="Append a random album to the running queue")

    # Settings
    settings_parser = subparsers.add_parser("settings", help="Show or change album filters")
    enabled_group = settings_parser.add_mutually_exclusive_group()
    enabled_group.add_argument("--enable", dest="enabled", action="store_true", default=None,
                               help="Reload a random album when the queue runs out")
    enabled_group.add_argument("--disable", dest="enabled", action="store_false",
                               help="Stop after the queue runs out")
    settings_parser.add_argument("--path-filter", help="Only albums whose file paths contain this text ('' clears)")
    settings_parser.add_argument("--genre", dest="genres", type=int, action="append",
                                 help="Allow a genre id (repeatable, see 'genres')")
    settings_parser.add_argument("--clear-genres", action="store_true", help="Allow all genres again")
    _add_toggle(settings_parser, "never-played", "never_played", "Include never played tracks")
    _add_toggle(settings_parser, "not-played-last-year", "not_played_last_year",
                "Include tracks not played in the past year")
    _add_toggle(settings_parser, "zero-play-count", "zero_play_count",
                "Include tracks with zero play count")

    config_parser = subparsers.add_parser("config", help="Show or change sequencer timings in config.toml")
    config_parser.add_argument("--debounce-ms", type=int, help="Delay before re-checking the queue after a boundary")
    config_parser.add_argument("--stop-check-window-ms", type=int,
                               help="Remaining playback at which stop-after-current is sampled")

    subparsers.add_parser("genres", help="List genre ids")

    history_parser = subparsers.add_parser("history", help="Show recently played albums")
    history_parser.add_argument("--clear", action="store_true", help="Forget recently played albums")

    # Library
    scan_parser = subparsers.add_parser("scan", help="Scan library paths into the collection")
    scan_parser.add_argument("--keep-missing", action="store_true",
                             help="Do not remove tracks whose files are gone")

    return parser


def sub_filter_changes(args: argparse.Namespace) -> dict[SubFilter, bool]:
    """Collect the sub-filter toggles that were given on the command line."""
    changes = {}
    for sub_filter in SubFilter:
        value = getattr(args, sub_filter.value, None)
        if value is not None:
            changes[sub_filter] = value
    return changes


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the random-album command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    ensure_directories()
    setup_loguru(
        log_file=Path(config.logging.log_file) if config.logging.log_file else None,
        level=args.log_level or config.logging.level,
        console_output=config.logging.console_output,
    )
    init_database()

    # Import handlers lazily so --help stays fast
    if args.subcommand == "run":
        from random_album.commands.playback import handle_run_command
        sys.exit(handle_run_command(config))

    elif args.subcommand == "play":
        from random_album.commands.playback import handle_play_command
        sys.exit(handle_play_command(config))

    elif args.subcommand == "enqueue":
        from random_album.commands.playback import handle_enqueue_command
        sys.exit(handle_enqueue_command(config))

    elif args.subcommand == "settings":
        from random_album.commands.settings import handle_settings_command
        sys.exit(
            handle_settings_command(
                enabled=args.enabled,
                path_filter=args.path_filter,
                genre_ids=args.genres,
                clear_genres=args.clear_genres,
                sub_filter_changes=sub_filter_changes(args),
            )
        )

    elif args.subcommand == "config":
        from random_album.commands.settings import handle_config_command
        sys.exit(
            handle_config_command(
                config,
                config_path=args.config,
                debounce_ms=args.debounce_ms,
                stop_check_window_ms=args.stop_check_window_ms,
            )
        )

    elif args.subcommand == "genres":
        from random_album.commands.settings import handle_genres_command
        sys.exit(handle_genres_command())

    elif args.subcommand == "history":
        from random_album.commands.settings import handle_history_command
        sys.exit(handle_history_command(clear=args.clear))

    elif args.subcommand == "scan":
        from random_album.commands.library import handle_scan_command
        sys.exit(handle_scan_command(config, prune=not args.keep_missing))


if __name__ == "__main__":
    main()
