#!/usr/bin/env python3
"""Bootstrap a GROFAST login and employee profile from the shell.

Creates the ``auth_users`` row and the matching ``employees`` row in one
transaction; the first admin has to come from here.

Usage:
    python scripts/create_user.py --email admin@grofast.app --name "Asha Rao" --admin
    python scripts/create_user.py --email dev@grofast.app --name "Dev" --password s3cret! \\
        --department Engineering --designation "Backend Developer"

Reads DATABASE_URL and JWT_SECRET from the environment or .env.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from grofast.common.constants import EmployeeRole
from grofast.common.exceptions import AppException
from grofast.database import async_session_factory, engine
from grofast.employees.schemas import EmployeeCreate
from grofast.employees.service import EmployeeService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("create_user")


async def create(data: EmployeeCreate) -> int:
    try:
        async with async_session_factory() as session:
            employee = await EmployeeService.create_employee(session, data, actor_id=None)
            await session.commit()
            logger.info("Created %s (%s) with id %s", employee.email, employee.role.value, employee.id)
            return 0
    except AppException as exc:
        logger.error("%s: %s", exc.title, exc.detail)
        return 1
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Create a GROFAST login and employee profile"
    )
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    parser.add_argument("--department", help="Department")
    parser.add_argument("--designation", help="Designation")
    parser.add_argument("--phone", help="Phone number")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    try:
        data = EmployeeCreate(
            name=args.name,
            email=args.email,
            password=password,
            role=EmployeeRole.admin if args.admin else EmployeeRole.member,
            department=args.department,
            designation=args.designation,
            phone=args.phone,
        )
    except ValidationError as exc:
        for error in exc.errors():
            logger.error("%s: %s", ".".join(str(p) for p in error["loc"]), error["msg"])
        sys.exit(2)

    sys.exit(asyncio.run(create(data)))


if __name__ == "__main__":
    main()
