"""Protean Engine runner for the distribution domain.

Processes events and commands asynchronously when the domain runs with the
``production`` overlay (outbox → Redis Streams → handlers). Also runs the
periodic maintenance commands: activating due scheduled orders and
requeueing failed notifications whose backoff has elapsed.

Usage:
    python src/server.py                  # Engine + maintenance loop
    python src/server.py --no-maintenance # Engine only
"""

import argparse
import asyncio

import structlog
from protean.server.engine import Engine

logger = structlog.get_logger(__name__)


def _get_domain():
    from distribution.domain import distribution

    distribution.init()
    return distribution


async def maintenance(domain, interval):
    """Periodically activate scheduled orders and retry due notifications."""
    from distribution.notification.scheduler import ProcessDueNotifications
    from distribution.order.scheduling import ActivateScheduledOrders

    while True:
        with domain.domain_context():
            try:
                domain.process(ActivateScheduledOrders(), asynchronous=False)
                domain.process(ProcessDueNotifications(), asynchronous=False)
            except Exception as exc:
                logger.error("Maintenance run failed", error=str(exc))
        await asyncio.sleep(interval)


async def run(with_maintenance, interval):
    domain = _get_domain()
    tasks = [Engine(domain).run()]
    if with_maintenance:
        tasks.append(maintenance(domain, interval))

    await asyncio.gather(*tasks)


def main():
    parser = argparse.ArgumentParser(description="Distribution Engine runner")
    parser.add_argument("--no-maintenance", action="store_true", help="Do not run the maintenance loop")
    parser.add_argument("--interval", type=int, default=60, help="Seconds between maintenance runs")
    args = parser.parse_args()

    asyncio.run(run(not args.no_maintenance, args.interval))


if __name__ == "__main__":
    main()
