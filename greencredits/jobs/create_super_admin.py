"""
One-off setup: create the super admin account that manages zone officers.

    python -m greencredits.jobs.create_super_admin --email cmo@gonda.gov.in --password ...
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from greencredits.core.errors import AlreadyExists
from greencredits.repositories.admin_repository import AdminRepository
from greencredits.repositories.report_repository import ReportRepository
from greencredits.repositories.user_repository import UserRepository
from greencredits.repositories.worker_repository import WorkerRepository
from greencredits.services.staff_service import StaffService

logger = logging.getLogger(__name__)


async def main(args: argparse.Namespace) -> None:
    from greencredits.db import mongo

    staff = StaffService(
        AdminRepository(mongo.admins_collection),
        WorkerRepository(mongo.workers_collection),
        ReportRepository(mongo.reports_collection),
        UserRepository(mongo.users_collection),
    )
    await mongo.ensure_indexes()
    try:
        admin = await staff.create_super_admin(args.name, args.email, args.password, args.phone)
    except AlreadyExists:
        logger.warning("an admin with email %s already exists", args.email)
        return
    logger.info("super admin ready: %s", admin["email"])


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--name", default="Chief Municipal Officer")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--phone")
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(parser.parse_args()))
