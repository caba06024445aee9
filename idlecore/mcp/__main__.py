"""Run the playtest MCP server over stdio.

    python -m idlecore.mcp examples.dice_example [--save game.json] [-v]

stdout carries the MCP protocol, so logging and anything the economy
module prints go to stderr.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m idlecore.mcp",
        description="Serve an idlecore economy to MCP clients over stdio",
    )
    parser.add_argument("economy_module", help="Python module with define_economy()")
    parser.add_argument(
        "--save", default=None, help="Save file to resume from and write to"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log to stderr at DEBUG level"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    from idlecore.cli import load_economy

    with contextlib.redirect_stdout(sys.stderr):
        definition = load_economy(args.economy_module)

    from idlecore.mcp.server import create_server

    server = create_server(definition, save_path=args.save)
    logging.getLogger(__name__).info(
        "Serving %r over stdio", definition.config.name
    )
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
