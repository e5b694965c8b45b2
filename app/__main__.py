"""CLI entry point for Investor Research."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from app.errors import PipelineError
from app.pipeline import build_pipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_research(identifier: str, skip_existing: Optional[bool] = None) -> dict:
    """Run the pipeline for one identifier and return the response body."""
    pipeline = build_pipeline()
    outcome = await pipeline.run(identifier, skip_existing=skip_existing)
    logger.info(f"Finished {outcome.identifier.value}: {outcome.status.value}")
    return outcome.to_response()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Investor Research - classify and enrich a domain or LinkedIn profile"
    )
    parser.add_argument(
        "identifier",
        help="Domain, URL, or LinkedIn URL/path (e.g. sequoiacap.com, in/jane-doe)",
    )
    skip_group = parser.add_mutually_exclusive_group()
    skip_group.add_argument(
        "--skip-existing",
        dest="skip_existing",
        action="store_true",
        default=None,
        help="Skip identifiers already in the store",
    )
    skip_group.add_argument(
        "--no-skip-existing",
        dest="skip_existing",
        action="store_false",
        help="Re-research identifiers already in the store",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        result = asyncio.run(run_research(args.identifier, args.skip_existing))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except PipelineError as e:
        logger.error(f"Research failed ({e.status_code}): {e.message}")
        print(json.dumps(e.to_response(), indent=2, default=str))
        sys.exit(1)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
