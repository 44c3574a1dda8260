"""
Depot - Configuration

Everything configurable comes from the environment:

    DEPOT_PATH   Non-standard location of the database
                 (defaults to $XDG_CONFIG_HOME/depot/depot.db,
                 or ~/.depot/depot.db without XDG_CONFIG_HOME)
    DEPOT_PASS   Password used to encrypt/decrypt values instead of prompting
"""

import os
from typing import Mapping, Optional

ENV_PATH = "DEPOT_PATH"
ENV_PASS = "DEPOT_PASS"

DB_FILENAME = "depot.db"


def choose_path(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Return the database location for the current environment.

    An explicit DEPOT_PATH is returned untouched. Otherwise the default
    directory is created if it does not exist.
    """
    if environ is None:
        environ = os.environ

    path = environ.get(ENV_PATH)
    if path:
        return path

    basedir = environ.get("XDG_CONFIG_HOME")
    if basedir:
        directory = os.path.join(basedir, "depot")
    else:
        home = environ.get("HOME") or os.path.expanduser("~")
        directory = os.path.join(home, ".depot")

    os.makedirs(directory, exist_ok=True)
    return os.path.join(directory, DB_FILENAME)


def password_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[bytes]:
    """Return DEPOT_PASS as bytes, or None when it is unset or empty."""
    if environ is None:
        environ = os.environ

    password = environ.get(ENV_PASS)
    return password.encode("utf-8") if password else None
