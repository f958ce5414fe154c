"""Provision the "action movies" OpenSearch Serverless collection and write one document.

    python -m aoss_setup.main [--poll-interval SECONDS] [--max-attempts N] [--log-level LEVEL]

Exits 0 when the run completes (already-existing policies/collection included),
1 on any fatal error.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

import aiohttp

from aoss_setup.services.config import AwsConfig, PipelineConfig
from aoss_setup.services.dependencies import get_opensearch_setup_service
from aoss_setup.services.setup import action_movies
from aoss_setup.services.setup.control_plane import ControlPlaneError, open_control_plane_client
from aoss_setup.services.setup.opensearch_setup_service import SetupPlan, SetupReport
from aoss_setup.services.opensearch_service import OpenSearchServiceError


logger = logging.getLogger(__name__)


def _ensure_logging(level: int = logging.INFO) -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aoss-setup",
        description="Create policies, a collection, an index and a document on OpenSearch Serverless.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between collection status checks (default: AOSS_POLL_INTERVAL_SECONDS or 30).",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Status checks before giving up; 0 waits forever (default: AOSS_MAX_POLL_ATTEMPTS or 60).",
    )
    parser.add_argument(
        "--principal",
        default=action_movies.AUTHOR_PRINCIPAL,
        help="IAM principal granted data access to the collection.",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def _pipeline_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_env()
    poll_interval = config.poll_interval_seconds if args.poll_interval is None else args.poll_interval
    if poll_interval < 0:
        raise ValueError("--poll-interval must not be negative")

    max_attempts = config.max_poll_attempts
    if args.max_attempts is not None:
        max_attempts = args.max_attempts if args.max_attempts > 0 else None

    return PipelineConfig(poll_interval_seconds=poll_interval, max_poll_attempts=max_attempts)


async def run(*, aws: AwsConfig, config: PipelineConfig, plan: SetupPlan) -> SetupReport:
    async with open_control_plane_client(aws) as client, aiohttp.ClientSession() as session:
        svc = get_opensearch_setup_service(client=client, aws=aws, session=session, config=config)
        return await svc.setup_opensearch_environment(plan)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _ensure_logging(getattr(logging, args.log_level))

    try:
        aws = AwsConfig.from_env()
        config = _pipeline_config(args)
        plan = SetupPlan.action_movies(principal=args.principal)
        report = asyncio.run(run(aws=aws, config=config, plan=plan))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    except (ValueError, ControlPlaneError, OpenSearchServiceError) as exc:
        logger.error("Setup failed: %s", exc)
        return 1
    except Exception:
        logger.exception("Setup failed with an unexpected error")
        return 1

    logger.info("Setup complete (endpoint=%s)", report.endpoint)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
