from __future__ import annotations

import argparse
from typing import Optional

import uvicorn

from .app import create_app
from .session import SessionStore


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="bfvm-webui", description="Serve the bfvm debugger API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--max-sessions",
        type=int,
        default=64,
        help="Debug sessions kept before the least recently used is dropped",
    )
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug"])
    args = parser.parse_args(argv)
    if args.max_sessions < 1:
        parser.error("--max-sessions must be at least 1")

    uvicorn.run(
        create_app(SessionStore(capacity=args.max_sessions)),
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
