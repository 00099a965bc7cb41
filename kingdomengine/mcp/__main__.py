"""CLI entry point: python -m kingdomengine.mcp <game_module>"""

from __future__ import annotations

import logging
import sys


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m kingdomengine.mcp <game_module>", file=sys.stderr)
        print("Example: python -m kingdomengine.mcp examples.medieval_kingdom", file=sys.stderr)
        sys.exit(1)

    module_path = sys.argv[1]

    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    # Redirect stdout to stderr during module loading in case define_game() prints
    real_stdout = sys.stdout
    sys.stdout = sys.stderr
    try:
        from kingdomengine.cli import load_game

        config = load_game(module_path)
    finally:
        sys.stdout = real_stdout

    from kingdomengine.mcp.server import create_server

    server = create_server(config)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
