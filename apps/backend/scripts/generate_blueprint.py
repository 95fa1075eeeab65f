#!/usr/bin/env python3
"""Drive blueprint generation against a running API, the way the web client does.

The script fetches the project, streams ``/generate``, reassembles the
blueprint locally and writes the outcome back with ``PATCH /projects/{id}``.

Exit status is 0 when a blueprint exists at the end, 1 when the attempt
failed (the project is left in ``error``), 2 on usage or lookup errors.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from uuid import UUID

import httpx

from core.exceptions import GenerationConflictError, ProjectNotFoundError
from services.generation import GenerationController, GenerationOutcome
from services.generation.remote import HttpProjectStore, HttpStreamPipeline


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.getenv("BLUEPRINT_API_URL", "http://localhost:8000")


def _controller(client: httpx.AsyncClient, project_id: UUID | None) -> GenerationController:
    return GenerationController(
        store=HttpProjectStore(client),
        pipeline=HttpStreamPipeline(client, project_id=project_id),
    )


def _report(outcome: GenerationOutcome) -> int:
    record = outcome.record
    if outcome.error_code is not None:
        print(f"Generation failed ({outcome.error_code}): {outcome.message}")
        print(f"Project {record.id} is now '{record.status}'; run 'retry' to try again.")
        return 1
    if not outcome.attempted:
        print(f"Project {record.id} is '{record.status}'; nothing to generate.")
        if record.artifact is None:
            return 1 if record.status == "error" else 0
    print(json.dumps(record.artifact, indent=2))
    return 0


async def run(
    args: argparse.Namespace, transport: httpx.AsyncBaseTransport | None = None
) -> int:
    timeout = httpx.Timeout(10.0, read=args.read_timeout)
    async with httpx.AsyncClient(
        base_url=args.base_url, timeout=timeout, transport=transport
    ) as client:
        try:
            if args.command == "create":
                project_id = await HttpProjectStore(client).create(
                    args.idea, title=args.title
                )
                print(f"Created project {project_id}")
                outcome = await _controller(client, project_id).ensure_blueprint(
                    project_id
                )
            elif args.command == "generate":
                outcome = await _controller(client, args.project_id).ensure_blueprint(
                    args.project_id
                )
            else:
                outcome = await _controller(client, args.project_id).retry(
                    args.project_id
                )
        except (ProjectNotFoundError, GenerationConflictError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2
    return _report(outcome)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate architecture blueprints through the API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a project and generate its blueprint
  python generate_blueprint.py create "A marketplace for used climbing gear"

  # Generate for an existing pending project
  python generate_blueprint.py generate 3f2b...

  # Retry a project whose last attempt failed
  python generate_blueprint.py retry 3f2b...
        """,
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help="API base URL (default: $BLUEPRINT_API_URL or http://localhost:8000)",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=120.0,
        help="Seconds to wait for each chunk of the stream",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a project and generate")
    create.add_argument("idea", help="Free-text project idea")
    create.add_argument("--title", default=None, help="Optional project title")

    generate = subparsers.add_parser("generate", help="Generate if pending")
    generate.add_argument("project_id", type=UUID)

    retry = subparsers.add_parser("retry", help="Retry a failed generation")
    retry.add_argument("project_id", type=UUID)
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
