from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

import uvicorn

from chessrules.protocol.http.app import LOG_LEVEL_ENV


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Serve the chess rules HTTP API")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level for the app and uvicorn (default: info)",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args(argv)

    # Takes precedence over create_app's basicConfig
    logging.basicConfig(level=args.log_level.upper())
    # Reload runs the app in a child process that only sees the environment
    os.environ[LOG_LEVEL_ENV] = args.log_level

    uvicorn.run(
        "chessrules.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
