"""Uvicorn runner for the storefront API.

Binds to all interfaces on ``PORT`` (default 3000) unless overridden.

Usage:
    python src/server.py
    python src/server.py --port 8080 --reload
"""

import argparse

import uvicorn

from shared.config import Settings


def main():
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Maison storefront API server")
    parser.add_argument("--host", default=settings.host, help=f"Interface to bind (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Port to listen on (default: {settings.port})")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    uvicorn.run(
        "app:app",
        host=args.host,
        port=args.port,
        workers=None if args.reload else args.workers,
        reload=args.reload,
        proxy_headers=True,
        log_config=None,
    )


if __name__ == "__main__":
    main()
