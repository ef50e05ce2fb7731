# reseller_monitor/poller.py
"""
Punto de entrada de línea de comandos para el scheduler externo (cron, systemd timer).

    python -m reseller_monitor.poller [--router-id UUID] [--timeout SEG]

Imprime el reporte en JSON. Sale con código 1 solo si el ciclo no pudo arrancar.
"""
import argparse
import asyncio
import json
import logging
import sys
import uuid

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from .core.config import LOG_LEVEL, POLL_MAX_WORKERS, ROUTER_POLL_TIMEOUT
from .db.engine import async_session_maker, create_db_and_tables, engine
from .services.poll_job import PollRunReport, run_poll_cycle

logger = logging.getLogger("Poller")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll routers and reconcile PPPoE sessions.")
    parser.add_argument("--router-id", type=uuid.UUID, default=None, help="Poll only this router")
    parser.add_argument("--timeout", type=float, default=ROUTER_POLL_TIMEOUT, help="Per-router timeout in seconds")
    parser.add_argument("--workers", type=int, default=POLL_MAX_WORKERS, help="Routers polled in parallel")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> PollRunReport:
    try:
        try:
            await create_db_and_tables()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database not available: {e}")
            return PollRunReport(success=False, error=f"Database not available: {e}")
        return await run_poll_cycle(
            async_session_maker,
            router_id=args.router_id,
            timeout=args.timeout,
            max_workers=args.workers,
        )
    finally:
        await engine.dispose()


def run(argv=None) -> int:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - [Poller] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    report = asyncio.run(main(parse_args(argv)))
    print(json.dumps(report.to_dict(), indent=2, default=str))
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(run())
