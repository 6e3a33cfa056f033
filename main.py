"""Main entry point for the board game relay server."""

import argparse
import logging
import os
import uvicorn

from boardgames.config import Settings

if __name__ == "__main__":
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Board Game Relay Server")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.log_level})",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Reload workers re-read settings from the environment
    os.environ["LOG_LEVEL"] = args.log_level

    uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level.lower())
