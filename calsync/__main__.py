"""Command line entry point

Usage:
    python -m calsync              # every calendar
    python -m calsync booking      # one calendar
"""

import argparse
import asyncio
import sys

from calsync.lib.config import JOB_KEYS, build_job_configs, load_settings
from calsync.lib.credentials import has_service_account, print_setup_instructions
from calsync.lib.logger import setup_logger
from calsync.services.orchestrator import run_all_jobs, run_job

logger = setup_logger("calsync")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sync data sources into Google Calendars")
    parser.add_argument(
        "job",
        nargs="?",
        choices=[*JOB_KEYS, "all"],
        default="all",
        help="job to run (default: all)",
    )
    args = parser.parse_args(argv)

    settings = load_settings()

    if not has_service_account(settings.service_account_file):
        logger.warning(f"Service account key not found: {settings.service_account_file}")
        print_setup_instructions(settings.service_account_file)
        return 0

    try:
        if args.job == "all":
            asyncio.run(run_all_jobs(settings))
        else:
            config = build_job_configs(settings)[args.job]
            asyncio.run(run_job(config, settings))
    except Exception as e:
        logger.error(f"Sync failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
