#!/usr/bin/env python3
"""
Tulip Kids Foundation dev launcher.

  ./run.py                        development server on $PORT (default 3001)
  ./run.py --env production --no-reload
  flask --app run:app seed-demo   CLI commands (app exported on import)
"""

from __future__ import annotations

import argparse
import os

from dotenv import load_dotenv

load_dotenv(override=False)

from tulipkids import create_app  # noqa: E402

_TRUTHY = {"1", "true", "yes", "on", "y"}


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the Tulip Kids Flask app.")
    p.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "3001")))
    p.add_argument("--env", choices=["development", "testing", "production"], help="Runtime environment")
    p.add_argument("--no-reload", action="store_true", help="Disable the Werkzeug reloader.")
    return p.parse_args()


app = create_app()


def main() -> None:
    a = parse_args()
    env = a.env or os.getenv("APP_ENV") or os.getenv("ENV") or "development"
    target = create_app(env) if a.env else app
    debug = env != "production" and (os.getenv("FLASK_DEBUG", "1").strip().lower() in _TRUTHY)
    target.logger.info("Server running on http://%s:%s (env=%s)", a.host, a.port, env)
    target.run(host=a.host, port=a.port, debug=debug, use_reloader=debug and not a.no_reload)


if __name__ == "__main__":
    main()
