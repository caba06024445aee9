from __future__ import annotations

import argparse
import importlib
import logging
import sys
import time

from idlecore.definition import EconomyDefinition
from idlecore.formatting import (
    format_offline_report,
    format_prestige_preview,
    format_prestige_result,
    format_status_report,
)
from idlecore.persistence import load_file, save_file
from idlecore.runtime import EconomyRuntime


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idlecore",
        description="idlecore: dice economy inspection CLI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable logging")
    sub = parser.add_subparsers(dest="command")

    status = sub.add_parser("status", help="Show economy state")
    status.add_argument("economy_module", help="Python module with define_economy()")
    status.add_argument("--save", default=None, help="Save file to load")

    offline = sub.add_parser("offline", help="Apply offline earnings to a save")
    offline.add_argument("economy_module", help="Python module with define_economy()")
    offline.add_argument("--save", required=True, help="Save file to update")
    offline.add_argument(
        "--elapsed", type=float, required=True, help="Seconds spent away"
    )

    resume = sub.add_parser("resume", help="Return to a save: offline earnings and daily checks")
    resume.add_argument("economy_module", help="Python module with define_economy()")
    resume.add_argument("--save", required=True, help="Save file to update")

    prestige = sub.add_parser("prestige", help="Preview or perform a prestige")
    prestige.add_argument("economy_module", help="Python module with define_economy()")
    prestige.add_argument("--save", default=None, help="Save file to load/update")
    prestige.add_argument(
        "--perform", action="store_true", help="Perform the prestige if possible"
    )

    return parser


def load_economy(module_path: str) -> EconomyDefinition:
    """Import module and call define_economy()."""
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_economy"):
        print(f"Error: module {module_path!r} has no define_economy() function")
        sys.exit(1)
    return mod.define_economy()


def _open_runtime(module_path: str, save: str | None) -> EconomyRuntime:
    runtime = EconomyRuntime(load_economy(module_path))
    if save:
        runtime.restore(load_file(save))
    return runtime


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    runtime = _open_runtime(args.economy_module, args.save)

    if args.command == "status":
        print(format_status_report(runtime))

    elif args.command == "offline":
        result = runtime.apply_offline_earnings(args.elapsed)
        print(format_offline_report(result))
        save_file(runtime.snapshot(now=time.time()), args.save)

    elif args.command == "resume":
        result = runtime.resume(time.time())
        print(format_offline_report(result))
        if runtime.daily_login.can_claim():
            print(f"Daily reward ready (streak day {runtime.daily_login.streak_day})")
        save_file(runtime.snapshot(now=time.time()), args.save)

    elif args.command == "prestige":
        if args.perform:
            result = runtime.perform_prestige()
            print(format_prestige_result(result))
            if result.success and args.save:
                save_file(runtime.snapshot(now=time.time()), args.save)
        else:
            print(format_prestige_preview(runtime))
