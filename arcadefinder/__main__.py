"""
Run the server.

Usage:
  python -m arcadefinder [--host HOST] [--port PORT] [--reload]
"""
import argparse

import uvicorn

from .config import settings


def main():
    parser = argparse.ArgumentParser(prog="arcadefinder")
    parser.add_argument("--host", default=settings.host, help="Interface to bind (env HOST)")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on (env PORT)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    args = parser.parse_args()
    uvicorn.run(
        "arcadefinder.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
