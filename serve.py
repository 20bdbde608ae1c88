#!/usr/bin/env python3
"""
Vantage Engine - API Server

Run this script to start the recommendation API and UI.

Usage:
    python serve.py [--port PORT] [--host HOST] [--reload]

Example:
    python serve.py --port 8080
"""

import argparse

import uvicorn

from vantage_engine.config import Settings
from vantage_engine.logging_setup import configure_logging


def main():
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Vantage Engine - Recommendation API Server"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)"
    )
    parser.add_argument(
        "--host", "-H",
        type=str,
        default="localhost",
        help="Host to bind to (default: localhost)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Log level (default: {settings.log_level})"
    )

    args = parser.parse_args()

    configure_logging(args.log_level)
    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
