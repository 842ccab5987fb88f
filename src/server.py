"""Protean Engine runner for the Quality and Notifications domains.

Starts Engine workers that process events asynchronously (production
overlay): the Quality engine feeds its projections, the Notifications
engine consumes Quality, order, payment and chat event streams and runs
the dispatcher.

Usage:
    python src/server.py                          # Run both domain engines
    python src/server.py --domain quality         # Run only the quality engine
    python src/server.py --domain notifications   # Run only the notifications engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

from shared.logging import configure_logging

DOMAIN_NAMES = ["quality", "notifications"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "quality":
        from quality.domain import quality

        quality.init()
        return quality
    elif name == "notifications":
        from notifications.domain import notifications

        notifications.init()
        return notifications
    else:
        raise ValueError(f"Unknown domain: {name}")


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Quality & Notifications engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    configure_logging(process="engine")
    asyncio.run(run([args.domain] if args.domain else DOMAIN_NAMES))


if __name__ == "__main__":
    main()
