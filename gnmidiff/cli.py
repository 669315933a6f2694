"""
gnmidiff command line
=====================

    gnmidiff setrequest A.textproto B.textproto [--full]
    gnmidiff set-to-notifs setrequest.textproto notifs.textproto [--full]

The diff is written to stderr.  Any error prints a one-line message and
exits with status 1.

Options are resolved in order of precedence: command line flags, then
environment variables (GNMIDIFF_FULL, GNMIDIFF_VERBOSE), then the YAML file
given with --config_file:

    full: true
    verbose: false
"""

import argparse
import logging
import os
import sys
from typing import Any, Mapping, Optional, Sequence

import yaml

from . import __version__
from .diff import diff_set_request_to_notifications, diff_set_requests
from .errors import ConfigError, GnmiDiffError, format_error
from .formatting import Format
from .gnmiparse import notifications_from_file, set_request_from_file

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("full", "verbose")
ENV_PREFIX = "GNMIDIFF_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


# ═══════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

def load_config(path: Optional[str]) -> dict[str, Any]:
    """Read the YAML config file; a missing path means an empty config."""
    if not path:
        return {}
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot parse config file {path!r}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path!r} must hold a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"unknown keys in config file {path!r}: {', '.join(map(str, unknown))}")
    for key, val in data.items():
        if not isinstance(val, bool):
            raise ConfigError(f"config key {key!r} must be a boolean, got {val!r}")
    return data


def _env_bool(env: Mapping[str, str], name: str) -> Optional[bool]:
    raw = env.get(name)
    if raw is None:
        return None
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"environment variable {name}={raw!r} is not a boolean")


def resolve_options(args: argparse.Namespace,
                    env: Optional[Mapping[str, str]] = None) -> dict[str, bool]:
    """Merge flags, environment and config file into {"full": .., "verbose": ..}."""
    if env is None:
        env = os.environ
    file_cfg = load_config(getattr(args, "config_file", None))
    opts: dict[str, bool] = {}
    for key in CONFIG_KEYS:
        flag = getattr(args, key, None)
        if flag is not None:
            opts[key] = flag
            continue
        from_env = _env_bool(env, ENV_PREFIX + key.upper())
        if from_env is not None:
            opts[key] = from_env
            continue
        opts[key] = file_cfg.get(key, False)
    return opts


# ═══════════════════════════════════════════════════════════════════
#  COMMANDS
# ═══════════════════════════════════════════════════════════════════

def cmd_setrequest(args: argparse.Namespace, fmt: Format) -> str:
    a = set_request_from_file(args.a)
    b = set_request_from_file(args.b)
    return diff_set_requests(a, b).format(fmt)


def cmd_set_to_notifs(args: argparse.Namespace, fmt: Format) -> str:
    setreq = set_request_from_file(args.setrequest)
    notifs = notifications_from_file(args.notifs)
    logger.debug("loaded %d notifications from %s", len(notifs), args.notifs)
    return diff_set_request_to_notifications(setreq, notifs).format(fmt)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnmidiff",
        description="gnmidiff is a utility for comparing between SetRequests and Notifications",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config_file", default=None, help="Path to config file.")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="Log debug output to stderr.")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("setrequest", help="Diffs the intent between two gNMI SetRequests.")
    p.add_argument("a", help="SetRequest textproto file (A)")
    p.add_argument("b", help="SetRequest textproto file (B)")
    p.add_argument("--full", action="store_true", default=None,
                   help="Whether diff shows common values.")
    p.set_defaults(func=cmd_setrequest)

    p = sub.add_parser(
        "set-to-notifs",
        help="Diffs the SetRequest intent and Notifications (either from Get or Subscribe) from the device.",
    )
    p.add_argument("setrequest", help="SetRequest textproto file")
    p.add_argument("notifs", help="SubscribeResponse/GetResponse textproto file")
    p.add_argument("--full", action="store_true", default=None,
                   help="Whether diff shows common values.")
    p.set_defaults(func=cmd_set_to_notifs)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        opts = resolve_options(args)
        logging.basicConfig(
            level=logging.DEBUG if opts["verbose"] else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        logger.debug("options: %s", opts)
        out = args.func(args, Format(full=opts["full"]))
    except (GnmiDiffError, OSError) as e:
        print(format_error(e), file=sys.stderr)
        return 1
    sys.stderr.write(out)
    return 0
