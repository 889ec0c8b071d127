from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

import uvicorn

from ..config import get_settings
from ..engine.errors import ChessError
from ..engine.perft import divide, perft
from ..engine.position import Position
from ..engine.types import Variant


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="chessrules", description="Chess rules engine tools")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    p = sub.add_parser("perft", help="Count leaf nodes of the legal move tree")
    p.add_argument("--variant", default=settings.default_variant, help="Variant name (default: %(default)s)")
    p.add_argument("--fen", type=str, default=None, help="FEN string (default: variant start position)")
    p.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    p.add_argument("--divide", action="store_true", help="Print per-move counts")
    return parser


def _run_perft(args: argparse.Namespace) -> int:
    try:
        variant = Variant.from_name(args.variant)
        pos = Position.from_fen(args.fen, variant) if args.fen else Position.initial(variant)
    except (ChessError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if args.depth < 0:
        print("error: depth must be >= 0", file=sys.stderr)
        return 2

    start = time.perf_counter()
    if args.divide and args.depth >= 1:
        counts = divide(pos, args.depth)
        for uci in sorted(counts):
            print(f"{uci}: {counts[uci]}")
        nodes = sum(counts.values())
    else:
        nodes = perft(pos, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "serve":
        logger.info("serving on %s:%d", args.host, args.port)
        uvicorn.run(
            "chessrules.protocol.http.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=get_settings().log_level.lower(),
        )
        return 0
    return _run_perft(args)


if __name__ == "__main__":
    sys.exit(main())
