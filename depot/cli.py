"""
Depot - Command-Line Interface

Usage: depot [-nsv] <action> <key>

Actions:
    stow        Read a value from stdin and associate it with the given key
    fetch       Print the value associated with the given key to stdout
    drop        Remove the given key from the depot
    help        Print this help message and exit
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from . import config
from .depot import Depot
from .errors import DepotError

ACTIONS = ("stow", "fetch", "drop", "help")

EPILOG = """\
environment variables:
  DEPOT_PATH  Specifies a non-standard path to the depot's database
              (Defaults to $XDG_CONFIG_HOME/depot/depot.db)
  DEPOT_PASS  Specifies the password to be used to encrypt/decrypt values
              (Be careful with this! It is certainly less secure!)
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depot",
        description="A key-value store for the command line.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("action", choices=ACTIONS, help="what to do")
    parser.add_argument("key", nargs="?", help="the key to act on")
    parser.add_argument("-n", dest="newline", action="store_false",
                        help="no newline character will be printed after fetching a value")
    parser.add_argument("-s", dest="secret", action="store_true",
                        help="the provided value is secret and will be encrypted")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log what the depot is doing to stderr")
    parser.add_argument("-h", "-?", "--help", action="help",
                        help="print this help message and exit")
    return parser


def get_password(secret: bool) -> Optional[bytes]:
    """Return the password from DEPOT_PASS or the terminal, or None if not secret."""
    if not secret:
        return None

    password = config.password_from_env()
    if password is not None:
        return password

    return getpass.getpass("PASSWORD: ").encode("utf-8")


def get_value(secret: bool) -> str:
    """Read the value to stow from stdin, without echo when it is secret."""
    if secret and sys.stdin.isatty():
        return getpass.getpass(prompt="")
    return sys.stdin.readline()


def cmd_stow(depot: Depot, args) -> None:
    value = get_value(args.secret)
    password = get_password(args.secret)
    depot.stow(args.key, value.strip(), password)


def cmd_fetch(depot: Depot, args) -> None:
    value = depot.peek(args.key)
    if value is None:
        value = depot.fetch(args.key, get_password(True))

    print(value, end="\n" if args.newline else "")


def cmd_drop(depot: Depot, args) -> None:
    depot.drop(args.key)


COMMANDS = {
    "stow": cmd_stow,
    "fetch": cmd_fetch,
    "drop": cmd_drop,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action == "help":
        parser.print_help()
        return 0
    if not args.key:
        parser.error("no key specified")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        path = config.choose_path()
        with Depot(path) as depot:
            COMMANDS[args.action](depot, args)
    except (DepotError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("Error: cancelled", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
