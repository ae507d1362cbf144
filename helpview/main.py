"""
Main CLI entry point for helpview
"""

import argparse
import logging
import os
import sys
from functools import partial
from typing import Callable, Mapping, Optional

from rich.console import Console
from rich.markup import escape

from helpview import __version__
from helpview.command_help import show_command_help
from helpview.config import ConfigManager, get_config_manager
from helpview.errors import ConfigError, HelpViewError
from helpview.output import OutputSink, detach_stdout, open_output
from helpview.shared.logging_config import configure_logging, verbosity_to_level
from helpview.tags import lookup_tag
from helpview.topics import TOPICS, preview_topic, topic_names

logger = logging.getLogger(__name__)

# Direct output console; None means stdout with styles forced on
console: Optional[Console] = None
err_console = Console(stderr=True)

DEFAULT_USER = "pancake"


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def user_pair(value: str) -> tuple[str, str]:
    """argparse type for name:email pairs"""
    name, sep, email = value.partition(":")
    if not sep or not name:
        raise argparse.ArgumentTypeError(
            f"expected name:email, got {value!r}"
        )
    return name, email


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands"""
    parser = argparse.ArgumentParser(
        prog="helpview",
        description="helpview - preview Vim help tags, man pages and topics",
    )
    parser.add_argument(
        "--version", action="version", version=f"helpview {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose output (repeat for debug logging)",
    )
    parser.add_argument(
        "-u",
        "--user",
        nargs="?",
        const=DEFAULT_USER,
        default=None,
        help=f"User name (default when given without a value: {DEFAULT_USER})",
    )
    parser.add_argument(
        "--users",
        type=user_pair,
        action="append",
        metavar="NAME:EMAIL",
        help="User e-mail map entry (repeatable)",
    )
    parser.add_argument(
        "-f",
        "--formatter",
        default=None,
        help="Pipe output through this command (e.g. 'bat -l help -p')",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    vim_help = subparsers.add_parser(
        "vim:help",
        help="preview a vim help entry",
        description="show vim:help",
    )
    vim_help.add_argument(
        "-r",
        "--vimruntime",
        default=None,
        help="path of runtime (default: from config)",
    )
    vim_help.add_argument(
        "-l",
        "--max-lines",
        type=positive_int,
        default=None,
        help="most lines to display (default: from config)",
    )
    vim_help.add_argument(
        "-k", "--key", required=True, help="Key of help item"
    )

    cli_help = subparsers.add_parser(
        "cli:help",
        help="show manpage/help for a CLI command",
        description="preview help for a command",
    )
    cli_help.add_argument("-k", "--key", required=True, help="Key of item")

    toplevel = subparsers.add_parser(
        "vim:toplevel",
        help="preview a top-level topic",
        description="show the preview text of a top-level topic",
    )
    group = toplevel.add_mutually_exclusive_group(required=True)
    group.add_argument("-k", "--key", help="Key of item")
    group.add_argument(
        "--list", action="store_true", help="List the available topics"
    )

    subparsers.add_parser("config", help="show config", description="show config")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    return build_parser().parse_args(argv)


def cmd_vim_help(
    args: argparse.Namespace, manager: ConfigManager, sink: OutputSink
) -> None:
    """Render the best matching help tag"""
    config = manager.get_config()
    runtime = args.vimruntime or manager.get_vimruntime()
    max_lines = args.max_lines or config.max_lines
    logger.info("Looking up %r in %s", args.key, runtime)
    lookup_tag(runtime, args.key, max_lines, sink)


def cmd_cli_help(
    args: argparse.Namespace, manager: ConfigManager, sink: OutputSink
) -> None:
    """Render man page or --help output for a command"""
    logger.info("Show: key=%s", args.key)
    show_command_help(args.key, sink)


def cmd_vim_toplevel(
    args: argparse.Namespace,
    manager: ConfigManager,
    sink: OutputSink,
    topics: Mapping[str, str],
) -> None:
    """Render a static topic preview"""
    if args.list:
        sink.body(topic_names(topics))
        return
    preview_topic(args.key, sink, topics=topics)


def cmd_config(
    args: argparse.Namespace, manager: ConfigManager, sink: OutputSink
) -> None:
    """Print parsed options and effective configuration"""
    config = manager.get_config()
    out = sink.console

    out.print("\n[bold cyan]## Options[/bold cyan]\n")
    out.print(f"  • Verbose: {args.verbose}")
    out.print(f"  • User: {escape(str(args.user))}")
    out.print("  • Users:")
    for name, email in effective_users(args, manager).items():
        out.print(f"      {escape(name)}: {escape(email)}")

    out.print("\n[bold cyan]## Configuration[/bold cyan]\n")
    out.print(f"[bold blue]Config file:[/bold blue] {escape(str(manager.CONFIG_FILE))}\n")
    out.print("[bold blue]Settings:[/bold blue]")
    out.print(f"  • Vim runtime: {escape(manager.get_vimruntime())}")
    out.print(f"  • Max lines: {config.max_lines}")
    out.print(f"  • Formatter: {escape(str(args.formatter or manager.get_formatter()))}")
    out.print(f"  • Log level: {config.log_level}")
    out.print(f"  • Log file: {escape(str(manager.get_log_file()))}\n")


def effective_users(
    args: argparse.Namespace, manager: ConfigManager
) -> dict[str, str]:
    """--users entries replace the configured map when given"""
    if args.users:
        return dict(args.users)
    return dict(manager.get_config().users)


Handler = Callable[[argparse.Namespace, ConfigManager, OutputSink], None]

# Subcommand registry
COMMANDS: dict[str, Handler] = {
    "vim:help": cmd_vim_help,
    "cli:help": cmd_cli_help,
    "vim:toplevel": partial(cmd_vim_toplevel, topics=TOPICS),
    "config": cmd_config,
}


def setup_logging(verbose: int, manager: ConfigManager) -> None:
    """Configure logging from config, -v flags and HELPVIEW_DEBUG"""
    configured = logging.getLevelName(manager.get_config().log_level.upper())
    if not isinstance(configured, int):
        configured = logging.WARNING
    level = verbosity_to_level(verbose, default=configured)

    # Enable DEBUG logging via environment variable
    if os.getenv("HELPVIEW_DEBUG"):
        level = logging.DEBUG

    # A log file takes the records off stderr
    log_file = manager.get_log_file()
    try:
        configure_logging(
            level=level, log_file=log_file, include_console=not log_file
        )
    except OSError as e:
        raise ConfigError(log_file, e.strerror or str(e)) from e


def run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command line; returns the process exit status"""
    handler = COMMANDS[args.command]
    color = not os.getenv("NO_COLOR")
    formatter = None

    try:
        manager = get_config_manager()
        setup_logging(args.verbose, manager)
        formatter = args.formatter or manager.get_formatter()

        with open_output(formatter, console=console, color=color) as sink:
            handler(args, manager, sink)
            status = sink.wait()
    except BrokenPipeError:
        # Downstream reader went away (e.g. fzf moved on); not an error
        logger.debug("Output pipe closed early")
        if not formatter and console is None:
            detach_stdout()
        return 0
    except HelpViewError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    if status:
        logger.info("Formatter exited with status %s", status)
    return status


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point"""
    args = parse_args(argv)
    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
