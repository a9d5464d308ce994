"""
pm CLI - Shellpack Package Manager.

Pacman-style interface for managing shellpack plugins.

Usage:
    pm -S <archive|url>...       Install plugin(s)
    pm -R <plugin>...            Remove plugin(s)
    pm -Q                        List installed plugins
    pm -Qi <plugin>              Show plugin info
    pm -Ql <plugin>              List plugin scripts
    pm -Qs                       List scripts of enabled plugins
    pm -Qo                       List orphaned plugin directories
    pm -Qb                       List built-in scripts
    pm -E <plugin>...            Enable plugin(s)
    pm -D <plugin>...            Disable plugin(s)
    pm -X <script>               Run a script after its imports
"""

import argparse
import logging
import sys
from pathlib import Path

from shellpack.config import default_home, load_settings, write_default_config
from shellpack.config.settings import CONFIG_FILENAME
from shellpack.errors import ShellpackError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with pacman-style flags."""
    parser = argparse.ArgumentParser(
        prog="pm",
        description="Shellpack Package Manager - Pacman-style plugin manager",
        add_help=False,
    )

    # Operation flags (mutually exclusive)
    ops = parser.add_mutually_exclusive_group()
    ops.add_argument("-S", "--sync", action="store_true", help="Install plugin")
    ops.add_argument("-R", "--remove", action="store_true", help="Remove plugin")
    ops.add_argument("-Q", "--query", action="store_true", help="Query installed")
    ops.add_argument("-E", "--enable", action="store_true", help="Enable plugin")
    ops.add_argument("-D", "--disable", action="store_true", help="Disable plugin")
    ops.add_argument("-X", "--exec", action="store_true", help="Run script")
    ops.add_argument("-h", "--help", action="store_true", help="Show help")

    # Query sub-flags
    parser.add_argument("-i", "--info", action="store_true", help="Show info (-Qi)")
    parser.add_argument("-l", "--list", action="store_true", help="List scripts (-Ql)")
    parser.add_argument("-s", "--scripts", action="store_true", help="Enabled scripts (-Qs)")
    parser.add_argument("-o", "--orphans", action="store_true", help="Orphans (-Qo)")
    parser.add_argument("-b", "--builtin", action="store_true", help="Built-in scripts (-Qb)")

    # Exec options
    parser.add_argument("--plugin", help="Resolve scripts from this plugin (-X)")
    parser.add_argument(
        "-p", "--print", action="store_true", help="Print execution order only (-X)"
    )

    # Common options
    parser.add_argument("--home", type=Path, help="Shellpack home directory")
    parser.add_argument(
        "--init", action="store_true", help="Write a default config file and exit"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # Positional arguments
    parser.add_argument("targets", nargs="*", help="Archives, plugin ids or scripts")

    return parser


def print_help():
    """Print help message."""
    help_text = """
pm - Shellpack Package Manager

Usage:
    pm -S <archive|url>...       Install plugin(s)
    pm -R <plugin>...            Remove plugin(s)
    pm -Q                        List installed plugins
    pm -Qi <plugin>              Show plugin info
    pm -Ql <plugin>              List plugin scripts
    pm -Qs                       List scripts of enabled plugins
    pm -Qo                       List orphaned plugin directories
    pm -Qb                       List built-in scripts
    pm -E <plugin>...            Enable plugin(s)
    pm -D <plugin>...            Disable plugin(s)
    pm -X <script>               Run a script after its imports

Options:
    --plugin <id>                Take -X scripts from an installed plugin
    -p, --print                  Print the -X execution order without running
    --home <dir>                 Shellpack home (default: $SHELLPACK_HOME or ~/.shellpack)
    --init                       Write a commented default config.toml into the home dir
    -v, --verbose                Verbose output
    -h, --help                   Show this help
"""
    print(help_text.strip())


def configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for pm CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        # --init: write default config
        if args.init:
            config_file = (args.home or default_home()) / CONFIG_FILENAME
            write_default_config(config_file)
            print(f"Wrote {config_file}")
            return 0

        # Show help
        if args.help or not any(
            (args.sync, args.remove, args.query, args.enable, args.disable, args.exec)
        ):
            print_help()
            return 0

        settings = load_settings(args.home)
        configure_logging(settings.log_level, args.verbose)

        # Route to appropriate command
        if args.sync:
            # -S: Install
            from pm.commands.install import install_command

            return install_command(args, settings)

        elif args.remove:
            # -R: Remove
            from pm.commands.remove import remove_command

            return remove_command(args, settings)

        elif args.query:
            # -Q: Query
            from pm.commands.query import query_command

            return query_command(args, settings)

        elif args.enable or args.disable:
            # -E / -D: Toggle
            from pm.commands.toggle import toggle_command

            return toggle_command(args, settings)

        elif args.exec:
            # -X: Run
            from pm.commands.run import run_command

            return run_command(args, settings)

    except ShellpackError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
