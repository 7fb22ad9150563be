"""Command-line interface for html2blocks.

Reads an HTML fragment from a file or standard input and writes the block
markup to a file or standard output. Settings come from a configuration
file (see :mod:`html2blocks.cli.config`); command line flags override it.

Examples
--------
Convert a file::

    $ html2blocks post.html -o post.blocks.html

Convert from a pipe, uploading images to a site's media library::

    $ export HTML2BLOCKS_MEDIA_PASSWORD="abcd efgh ijkl mnop"
    $ cat post.html | html2blocks --upload-media \\
        --media-endpoint https://example.com --media-username editor

Exit codes
----------
0 success, 1 unexpected error, 2 missing dependency, 3 invalid options or
configuration, 4 unreadable input or unwritable output.
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from html2blocks import __version__
from html2blocks.cli.config import (
    build_converter,
    get_config_search_paths,
    load_config_with_priority,
    merge_configs,
)
from html2blocks.constants import HTML_PARSERS
from html2blocks.exceptions import ConfigError, DependencyError, Html2BlocksError, ValidationError
from html2blocks.logging_utils import configure_logging

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

__all__ = ["main", "create_parser", "get_exit_code_for_exception"]


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to a CLI exit code."""
    if isinstance(exception, (DependencyError, ImportError)):
        return EXIT_DEPENDENCY_ERROR
    if isinstance(exception, (ValidationError, ConfigError)):
        return EXIT_VALIDATION_ERROR
    if isinstance(exception, OSError):
        return EXIT_FILE_ERROR
    return EXIT_ERROR


def _config_epilog() -> str:
    """Describe where configuration is looked up, for the help text."""
    lines = ["configuration is searched in this order (parent directories are checked too):"]
    lines.extend(f"  {path}" for path in get_config_search_paths())
    return "\n".join(lines)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="html2blocks",
        description="Convert HTML fragments into block editor markup.",
        epilog=_config_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", default="-", help="Input HTML file, or '-' for stdin (default)")
    parser.add_argument("-o", "--out", help="Output file (default: stdout)")
    parser.add_argument("--config", help="Configuration file (.toml, .yaml, .json or pyproject.toml)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    conversion = parser.add_argument_group("conversion options")
    conversion.add_argument(
        "--upload-media",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Upload images to the media library and reference the stored copy",
    )
    conversion.add_argument(
        "--force-https",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rewrite http:// image URLs to https://",
    )
    conversion.add_argument(
        "--auto-paragraph",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wrap blank-line separated text in paragraphs before converting",
    )
    conversion.add_argument("--html-parser", choices=HTML_PARSERS, default=None, help="BeautifulSoup parser to use")

    media = parser.add_argument_group("media library")
    media.add_argument("--media-endpoint", help="Site URL whose REST API stores uploaded images")
    media.add_argument(
        "--media-username", help="User name for the media library (password from HTML2BLOCKS_MEDIA_PASSWORD)"
    )

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    logging_group.add_argument("--verbose", "-v", action="store_true", help="Enable verbose (debug) logging")
    logging_group.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")
    logging_group.add_argument("--log-file", help="Also write log output to this file")

    return parser


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    # --trace takes highest precedence, then --verbose, then --log-level
    if parsed_args.trace:
        log_level = logging.DEBUG
    elif parsed_args.verbose and parsed_args.log_level == "WARNING":
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, parsed_args.log_level.upper())

    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def _cli_overrides(parsed_args: argparse.Namespace) -> dict[str, Any]:
    """Collect the flags that were given as a config-shaped dict."""
    options = {
        name: getattr(parsed_args, name)
        for name in ("upload_media", "force_https", "auto_paragraph", "html_parser")
        if getattr(parsed_args, name) is not None
    }
    media = {}
    if parsed_args.media_endpoint:
        media["endpoint"] = parsed_args.media_endpoint
    if parsed_args.media_username:
        media["username"] = parsed_args.media_username

    overrides: dict[str, Any] = {}
    if options:
        overrides["options"] = options
    if media:
        overrides["media"] = media
    return overrides


def _read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _write_output(content: str, destination: str | None) -> None:
    if destination:
        Path(destination).write_text(content, encoding="utf-8")
        logger.info("Wrote %s", destination)
    else:
        sys.stdout.write(content)


def main(args: list[str] | None = None) -> int:
    """Execute the CLI entry point and return an exit code."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    _setup_logging_level(parsed_args)

    try:
        config = merge_configs(load_config_with_priority(parsed_args.config), _cli_overrides(parsed_args))
        converter = build_converter(config)
    except Html2BlocksError as e:
        print(f"Error: {e}", file=sys.stderr)
        return get_exit_code_for_exception(e)

    try:
        content = _read_input(parsed_args.input)
    except OSError as e:
        print(f"Error: cannot read {parsed_args.input}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        result = converter.convert_blocks(content)
    except Html2BlocksError as e:
        print(f"Error: {e}", file=sys.stderr)
        return get_exit_code_for_exception(e)
    except Exception as e:
        logger.debug("Conversion failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        _write_output(result, parsed_args.out)
    except OSError as e:
        print(f"Error: cannot write {parsed_args.out}: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
