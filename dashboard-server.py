#!/usr/bin/env python3
"""
Discord staff dashboard server.

Serves the staff API (and the static UI when a public/ directory exists)
and keeps one Discord bot session logged in alongside it.

Usage:
    python dashboard-server.py
"""

import sys

import uvicorn

from src.adapters.web.server import create_app
from src.config import AppConfig


def main():
    config = AppConfig.from_env()

    problems = config.production_problems()
    if problems:
        for problem in problems:
            print(problem, file=sys.stderr)
        sys.exit(1)

    app = create_app(config)
    print(f"Web server running on port {config.port}", file=sys.stderr)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="info",
        # Behind a load balancer in production; honour X-Forwarded-* for secure cookies
        proxy_headers=config.is_production,
        forwarded_allow_ips="*" if config.is_production else None,
    )


if __name__ == "__main__":
    main()
