"""
Run the presence light controller.

Usage:
    python -m presence_light                 # settings from env / .env
    python -m presence_light --port 9000
"""

from __future__ import annotations

import argparse

import uvicorn

from .core.config import settings


def main() -> None:
    p = argparse.ArgumentParser(description="Occupancy-based light controller")
    p.add_argument("--host", default=settings.api_host, help=f"API bind address (default: {settings.api_host})")
    p.add_argument("--port", type=int, default=settings.api_port, help=f"API port (default: {settings.api_port})")
    args = p.parse_args()

    # logging is configured in the app lifespan
    uvicorn.run("presence_light.main:app", host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
