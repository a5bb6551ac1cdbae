"""
Management commands.

Run from `api/` with DATABASE_URL set:

    python -m manage create-user --email ops@example.com --password ... --role system_admin
    python -m manage seed-templates [--created-by USER_ID]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from auth import security
from auth import service as auth_service
from core import db
from core.logging_setup import configure_logging
from document_templates import service as templates_service

logger = logging.getLogger("manage")


async def _create_user(args: argparse.Namespace) -> int:
    try:
        user = await auth_service.create_user(email=args.email, password=args.password, role=args.role)
    except ValueError as exc:
        logger.error("create_user_failed email=%s error=%s", args.email, exc)
        return 1
    logger.info("user_created id=%s email=%s role=%s", user.id, user.email, user.role)
    return 0


async def _seed_templates(args: argparse.Namespace) -> int:
    rows = await templates_service.seed_defaults(created_by=args.created_by)
    logger.info("seed_finished inserted=%s", len(rows))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage")
    sub = parser.add_subparsers(dest="command", required=True)

    create_user = sub.add_parser("create-user", help="Create an admin account.")
    create_user.add_argument("--email", required=True)
    create_user.add_argument("--password", required=True)
    create_user.add_argument("--role", choices=security.ROLES, default=security.ROLE_ADMIN)
    create_user.set_defaults(handler=_create_user)

    seed = sub.add_parser("seed-templates", help="Create 1.0.0 versions for template families without any.")
    seed.add_argument("--created-by", type=int, default=None)
    seed.set_defaults(handler=_seed_templates)

    return parser


async def _run(args: argparse.Namespace) -> int:
    await db.init_pool()
    try:
        return await args.handler(args)
    finally:
        await db.close_pool()


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
