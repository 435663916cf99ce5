#!/usr/bin/env python3
"""FastAPI server entry point for DeepThought Relay."""

import argparse
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from config.config import AppConfig
from models.errors import ConfigError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DeepThought Relay API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--env-file", type=Path, default=Path(".env"), help="Dotenv file with API keys")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv(dotenv_path=args.env_file)

    # Check keys before uvicorn spawns workers; the app factory checks again.
    try:
        config = AppConfig.from_env(env_file=args.env_file)
    except ConfigError as e:
        print(f"Refusing to start: {e.message}", file=sys.stderr)
        return 1

    print(f"Serving {config.describe()} on http://{args.host}:{args.port}")
    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
