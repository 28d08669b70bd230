"""Main entry point for the board game server."""

import argparse
import logging
import os
import uvicorn

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Board Game Engine Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level for the engine and server (default: info)",
    )
    parser.add_argument(
        "--ai-delay",
        type=float,
        default=None,
        help="Seconds the AI waits before answering (sets AI_THINK_DELAY)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # api.py reads its configuration from the environment at import time
    if args.ai_delay is not None:
        os.environ["AI_THINK_DELAY"] = str(args.ai_delay)

    uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level)
