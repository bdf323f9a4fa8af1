"""Main CLI entry-point."""
from __future__ import annotations

import asyncio
import sys

from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings


def main(argv: list[str]) -> int:
    bootstrap_logging(
        service="netcheck",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="netcheck.jsonl",
    )
    # Lazy import so logging is configured before any module-level logger use
    from presentation.cli import HealthCommand

    try:
        if not argv:
            return asyncio.run(HealthCommand().run_interactive())
        return asyncio.run(HealthCommand().run(argv))
    finally:
        shutdown_logging()


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli())
