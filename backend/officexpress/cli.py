"""Management CLI.

Usage:
    python -m officexpress.cli migrate-permissions [--dry-run]   # legacy boolean blobs -> granular
    python -m officexpress.cli list-employees                    # employees and their grant counts
"""

import argparse
import json

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from officexpress.auth.legacy import convert_legacy_permissions, is_already_migrated
from officexpress.auth.permissions import FlagAccess, resolve_effective_permissions
from officexpress.config import settings
from officexpress.models.user import User, UserRole


def _employees(session: Session) -> list[User]:
    result = session.execute(select(User).where(User.role == UserRole.EMPLOYEE))
    return list(result.scalars().all())


def migrate_permissions(session: Session, dry_run: bool = False) -> dict[str, int]:
    """Convert every employee's legacy permission blob in place.

    Returns the migrated/skipped/total counts. Nothing is written when
    `dry_run` is set.
    """
    employees = _employees(session)
    print(f"Found {len(employees)} employee accounts to migrate")

    migrated = skipped = 0
    for user in employees:
        if is_already_migrated(user.permissions):
            print(f"  Skipping {user.id} ({user.name}) - already migrated")
            skipped += 1
            continue

        new_permissions = convert_legacy_permissions(user.permissions)
        print(f"  Migrating {user.id} ({user.name})")
        print(f"    Old: {json.dumps(user.permissions)}")
        print(f"    New: {json.dumps(new_permissions)}")
        if not dry_run:
            user.permissions = new_permissions
        migrated += 1

    if not dry_run:
        session.commit()

    print(f"\nMigrated: {migrated}  Skipped: {skipped}  Total: {len(employees)}")
    return {"migrated": migrated, "skipped": skipped, "total": len(employees)}


def list_employees(session: Session) -> None:
    employees = _employees(session)
    for user in employees:
        effective = resolve_effective_permissions(user)
        granted = sum(
            1 for access in effective.values()
            if (access.granted if isinstance(access, FlagAccess) else access.any)
        )
        status = "active" if user.is_active else "inactive"
        print(f"  {user.id}  {user.phone:<16} {user.name:<30} {status:<9} {granted} section(s)")
    print(f"\n{len(employees)} employee(s)")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="python -m officexpress.cli")
    sub = parser.add_subparsers(dest="command", required=True)
    migrate = sub.add_parser("migrate-permissions", help="convert legacy permission blobs")
    migrate.add_argument("--dry-run", action="store_true", help="print changes without saving")
    sub.add_parser("list-employees", help="list employee accounts")
    args = parser.parse_args(argv)

    engine = create_engine(settings.database_url_sync)
    with Session(engine) as session:
        if args.command == "migrate-permissions":
            migrate_permissions(session, dry_run=args.dry_run)
        else:
            list_employees(session)


if __name__ == "__main__":
    main()
