"""Protean Engine runner for the storefront domain.

Processes domain events asynchronously (order notifications) when the
domain runs with ``event_processing = "async"``, i.e. PROTEAN_ENV=production.

Usage:
    python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


async def run(test_mode=False):
    from storefront.domain import storefront

    storefront.init()
    logger.info("engine_starting", domain=storefront.name, test_mode=test_mode)

    engine = Engine(storefront, test_mode=test_mode)
    await asyncio.gather(engine.run())


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
