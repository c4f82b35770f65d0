from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from PyQt6.QtWidgets import QApplication

from dbar.logging_utils import LOGGER_NAME, configure_logging
from dbar.slider_config import (
    DEFAULT_BG_COLOR,
    DEFAULT_END,
    DEFAULT_FG_COLOR,
    DEFAULT_HEIGHT,
    DEFAULT_INITIAL_PERCENT,
    DEFAULT_REFRESH_MS,
    DEFAULT_START,
    DEFAULT_TITLE,
    DEFAULT_WIDTH,
    ConfigError,
    SliderConfig,
    default_settings_path,
    load_settings,
    parse_bool,
)
from dbar.slider_window import SliderWindow
from dbar.version import __version__, is_dev_build

_LOGGER = logging.getLogger(LOGGER_NAME)

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_USAGE = 2
EXIT_WINDOW_ERROR = 3

WindowFactory = Callable[[SliderConfig], SliderWindow]


def resolve_settings_path(argv: Optional[Sequence[str]]) -> Path:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--settings")
    known, _ = pre_parser.parse_known_args(argv)
    if known.settings:
        return Path(known.settings).expanduser()
    return default_settings_path()


def build_parser(defaults: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbar",
        description="Use left click to select a value in the given (inclusive) range [<start>, <end>]. "
        "Return also confirms; ESC cancels.",
    )
    parser.add_argument("start", nargs="?", type=float, default=DEFAULT_START, help="Lower bound (default: %(default)s)")
    parser.add_argument("end", nargs="?", type=float, default=DEFAULT_END, help="Upper bound (default: %(default)s)")
    parser.add_argument("-f", "--floating", action="store_true", help="Do not round the result to the nearest integer")
    parser.add_argument(
        "-x",
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help="Width of the window in pixels (default: %(default)s)",
    )
    parser.add_argument(
        "-y",
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help="Height of the window in pixels (default: %(default)s)",
    )
    parser.add_argument(
        "--bg-col",
        dest="bg_color",
        default=DEFAULT_BG_COLOR,
        help="The background colour in #rrggbb hex format (default: %(default)s)",
    )
    parser.add_argument(
        "--fg-col",
        dest="fg_color",
        default=DEFAULT_FG_COLOR,
        help="The foreground (bar) colour in #rrggbb hex format (default: %(default)s)",
    )
    parser.add_argument(
        "--no-mouse-capture",
        dest="capture_mouse",
        action="store_false",
        help="Follow the visible cursor instead of capturing relative mouse movement",
    )
    parser.add_argument(
        "-i",
        "--initial-percent",
        dest="initial_percent",
        type=float,
        default=DEFAULT_INITIAL_PERCENT,
        help="Initial fill as a fraction between 0.0 and 1.0 (default: %(default)s)",
    )
    parser.add_argument("-t", "--title", default=DEFAULT_TITLE, help="Window title (default: %(default)s)")
    parser.add_argument(
        "-v",
        "--show-value",
        dest="show_value",
        action="store_true",
        help="Show the current value in the window title",
    )
    parser.add_argument(
        "-c",
        "--command",
        default=None,
        help="Shell command to run whenever the value changes; %%v is replaced by the value",
    )
    parser.add_argument(
        "-C",
        "--command-on-click",
        dest="command_on_click",
        default=None,
        help="Shell command to run on left click instead of exiting; %%v is replaced by the value",
    )
    parser.add_argument(
        "-r",
        "--refresh-rate",
        dest="refresh_ms",
        type=int,
        default=DEFAULT_REFRESH_MS,
        help="Milliseconds between frames (default: %(default)s)",
    )
    parser.add_argument(
        "--continuous",
        action="store_true",
        help="Print the selected value to stdout continuously",
    )
    parser.add_argument("--settings", help="JSON file with default option values")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-retention",
        dest="log_retention",
        type=int,
        default=3,
        help="Number of log files to keep (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    if defaults:
        parser.set_defaults(**dict(defaults))
    return parser


def config_from_args(args: argparse.Namespace) -> SliderConfig:
    """Build a validated config; values may come from a settings file and need coercion."""
    try:
        config = SliderConfig(
            start=float(args.start),
            end=float(args.end),
            width=int(args.width),
            height=int(args.height),
            floating=parse_bool("floating", args.floating),
            initial_percent=float(args.initial_percent),
            capture_mouse=parse_bool("capture_mouse", args.capture_mouse),
            command=args.command or None,
            command_on_click=args.command_on_click or None,
            refresh_ms=int(args.refresh_ms),
            bg_color=str(args.bg_color),
            fg_color=str(args.fg_color),
            title=str(args.title),
            show_value=parse_bool("show_value", args.show_value),
            continuous=parse_bool("continuous", args.continuous),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid option value: {exc}") from exc
    return config.validate()


def run_slider(config: SliderConfig, *, window_factory: WindowFactory = SliderWindow) -> int:
    try:
        app = QApplication.instance()
        if app is None:
            app = QApplication(sys.argv[:1])
        window = window_factory(config)
    except RuntimeError as exc:
        _LOGGER.error("Failed to initialise slider window: %s", exc)
        print(f"dbar: failed to open window: {exc}", file=sys.stderr)
        return EXIT_WINDOW_ERROR

    window.present()
    app.exec()
    result = window.controller.result
    if result is None or not result.confirmed:
        _LOGGER.info("Slider closed without a selection")
        return EXIT_CANCELLED
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    settings_path = resolve_settings_path(argv)
    settings = load_settings(settings_path)
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))

    configure_logging(
        _LOGGER,
        debug_enabled=bool(args.debug) or is_dev_build(),
        retention=int(args.log_retention),
    )
    _LOGGER.info("Starting dbar %s (pid=%s)", __version__, os.getpid())
    _LOGGER.debug(
        "Settings loaded from %s: %s",
        settings_path,
        ", ".join(sorted(settings)) if settings else "none",
    )
    _LOGGER.debug("Slider config: %s", config)

    exit_code = run_slider(config)
    _LOGGER.info("dbar exiting with code %s", exit_code)
    return exit_code
