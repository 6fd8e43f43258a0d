from __future__ import annotations

import argparse
import logging

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Run the pairdraw relay server.")
    ap.add_argument("--host", default=settings.host, help="Bind address")
    ap.add_argument("--port", type=int, default=settings.port, help="Bind port")
    ap.add_argument("--log-level", default=settings.log_level, help="Root log level, e.g. DEBUG")
    args = ap.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("starting pairdraw on %s:%d", args.host, args.port)
    uvicorn.run("pairdraw.server.app:app", host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
