"""CLI/bootstrap helpers for the slice viewer application."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from slice_viewer.action_messages import build_actionable_error, build_permission_denied_error
from slice_viewer.config import get_config_path, load_config, save_config
from slice_viewer.models import CONFIG_APP_NAME, SLICE_MODE_NAMES, SliceMode, ViewerConfig
from slice_viewer.providers import SlicePermissionError
from slice_viewer.refresh import collect_authorities
from slice_viewer.resolver import ContentResolver
from slice_viewer.uri import parse_slice_uri
from slice_viewer.widgets.slice_view import render_slice_plain

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(threadName)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _list_authorities(resolver: ContentResolver) -> int:
    """Print every declared authority with its package. Returns exit code."""
    packages = resolver.registry.list_installed_packages()
    if not collect_authorities(packages):
        print(
            build_actionable_error(
                "list slice authorities",
                why="no installed package declares a slice_viewer.providers entry point",
                next_step="install a package that provides slices",
            ),
            file=sys.stderr,
        )
        return 1
    for package in packages:
        for provider in package.providers or ():
            print(f"{provider.authority}\t{package.name} {package.version}".rstrip())
    return 0


def _dump_slice(resolver: ContentResolver, uri_text: str, mode: SliceMode) -> int:
    """Resolve one URI and print it as plain text. Returns exit code."""
    try:
        uri = parse_slice_uri(uri_text)
    except ValueError as exc:
        print(
            build_actionable_error(
                "parse the slice URI",
                why=str(exc),
                next_step="pass a URI like content://slice_viewer.system/clock",
            ),
            file=sys.stderr,
        )
        return 1

    try:
        with resolver.acquire_unstable_client(uri):
            pass
    except SlicePermissionError as exc:
        logger.warning("Permission denied to access uri %s", uri)
        print(
            build_permission_denied_error(str(uri), exc.permission, exc.reason),
            file=sys.stderr,
        )
        return 1

    slice_ = resolver.bind_slice(uri)
    if slice_ is None:
        print(
            build_actionable_error(
                f"display {uri}",
                why="no provider returned content for it",
                next_step="check the authority with --list-authorities",
            ),
            file=sys.stderr,
        )
        return 1
    print(render_slice_plain(slice_, mode))
    return 0


def _write_default_config() -> int:
    config_path = get_config_path()
    if config_path.exists():
        print(f"Config already exists: {config_path}", file=sys.stderr)
        return 1
    if not save_config(ViewerConfig()):
        print(
            build_actionable_error(
                "write the default config",
                why=f"{config_path.parent} is not writable",
                next_step="check directory permissions",
            ),
            file=sys.stderr,
        )
        return 1
    print(config_path)
    return 0


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], ViewerConfig] = load_config,
    resolver_factory: Callable[[ViewerConfig], ContentResolver] | None = None,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = argparse.ArgumentParser(description="View live slices from installed providers")
    parser.add_argument(
        "-a",
        "--authority",
        type=str,
        default="",
        help="Initial slice authority (for example: slice_viewer.system)",
    )
    parser.add_argument(
        "-p",
        "--path",
        type=str,
        default="",
        help="Initial slice path (for example: clock)",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=SLICE_MODE_NAMES,
        default=None,
        help="Display mode: large, small, shortcut (default: config value)",
    )
    parser.add_argument(
        "--list-authorities",
        action="store_true",
        help="List authorities declared by installed packages and exit",
    )
    parser.add_argument(
        "--dump",
        metavar="URI",
        default=None,
        help="Print one slice as plain text and exit (content://authority/path)",
    )
    parser.add_argument(
        "--write-default-config",
        action="store_true",
        help="Write a default config.json and print its path",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/slice-viewer/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    args = parser.parse_args(argv)

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("slice-viewer starting, cwd=%s", Path.cwd())

    if args.write_default_config:
        return _write_default_config()

    config = load_config_fn()
    mode = SliceMode.parse(args.mode) if args.mode else config.slice_mode
    if resolver_factory is None:
        resolver = ContentResolver(granted_permissions=config.granted_permissions)
    else:
        resolver = resolver_factory(config)

    if args.list_authorities:
        return _list_authorities(resolver)
    if args.dump is not None:
        return _dump_slice(resolver, args.dump, mode)

    if not validate_interactive_tty_fn():
        print(
            "Error: slice-viewer requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run slice-viewer directly in a terminal session", file=sys.stderr)
        print("  - Use --list-authorities or --dump URI for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from slice_viewer.app import SliceViewerApp as _SliceViewerApp

        app_factory = _SliceViewerApp

    app = app_factory(
        config,
        resolver=resolver,
        initial_authority=args.authority,
        initial_path=args.path,
        initial_mode=mode,
    )
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_dump_slice",
    "_list_authorities",
    "_validate_interactive_tty",
    "_write_default_config",
    "main",
]
