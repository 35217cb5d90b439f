#!/usr/bin/env python3
"""Create tables and seed permission definitions and system roles."""

from __future__ import annotations

import argparse
import logging

from crm_access.core.database import SessionLocal, init_db
from crm_access.services.seed import seed_permissions_and_roles


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--skip-create", action="store_true", help="do not create missing tables")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.skip_create:
        init_db()

    session = SessionLocal()
    try:
        summary = seed_permissions_and_roles(session)
    finally:
        session.close()

    for key, value in summary.items():
        print(f"  {key}: {value}")
    print("Permissions seeded.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
