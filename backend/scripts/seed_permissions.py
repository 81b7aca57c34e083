#!/usr/bin/env python
"""Idempotent seed script for the permission matrix and the first super admin.

Only missing (resource, level) cells are written; cells already edited by an
administrator are left as they are.

Usage:
    python backend/scripts/seed_permissions.py             # seed normally
    python backend/scripts/seed_permissions.py --show      # print the matrix after seeding
    python backend/scripts/seed_permissions.py --dry-run   # report what would be created, write nothing
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, inspect

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from wkshop import create_app, get_db  # type: ignore
from wkshop.constants.permissions import build_default_settings, LEVEL_SUPER_ADMIN, ACTION_FLAGS
from wkshop.decorators.auth import permission_service
from wkshop.models.account import AdminAccount


def missing_settings(service):
    existing = {
        (entry['resource'], level)
        for entry in service.get_all_permissions()
        for level in entry['permissions']
    }
    return [s for s in build_default_settings() if (s['resource'], s['level']) not in existing]


def ensure_initial_admin(session, dry_run: bool) -> bool:
    admin_id = os.getenv('SEED_ADMIN_ID', 'admin')
    if session.execute(select(AdminAccount).where(AdminAccount.id==admin_id)).scalar_one_or_none():
        return False
    if dry_run:
        return True
    account = AdminAccount(
        id=admin_id,
        name=os.getenv('SEED_ADMIN_NAME', 'Super Admin'),
        email=os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com'),
        password_hash='',
        level=LEVEL_SUPER_ADMIN,
    )
    account.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(account)
    session.commit()
    print(f"[INFO] Created initial super admin '{admin_id}' with temporary password.")
    return True


def print_matrix(service):
    grouped = service.get_all_permissions()
    if not grouped:
        print('[INFO] No permission settings present.')
        return
    res_w = max(len(e['resource']) for e in grouped)
    print(f"{'Resource'.ljust(res_w)} | Level            | R W D")
    print('-' * (res_w + 30))
    for entry in grouped:
        for level, flags in entry['permissions'].items():
            marks = ' '.join('x' if flags[f] else '.' for f in ACTION_FLAGS.values())
            print(f"{entry['resource'].ljust(res_w)} | {level.ljust(16)} | {marks}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed permission matrix & initial super admin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_permissions.py\n  dry run: seed_permissions.py --dry-run\n  show matrix: seed_permissions.py --show\n""")
    )
    p.add_argument('--show', action='store_true', help='Print the permission matrix after seeding')
    p.add_argument('--dry-run', action='store_true', help='Report what would be created without writing')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        if not inspect(session.get_bind()).has_table('permission_settings'):
            # Bootstrap fallback; in real environments run `alembic upgrade head`
            from wkshop.models.permission import Base
            import wkshop.models.purchase_order  # noqa: F401
            import wkshop.models.audit  # noqa: F401
            Base.metadata.create_all(session.get_bind())
        service = permission_service()
        todo = missing_settings(service)
        admin_created = ensure_initial_admin(session, args.dry_run)
        if args.dry_run:
            print(f"[DRY-RUN] Settings would create: {len(todo)}, super admin would create: {admin_created}")
        else:
            service.save_permissions(todo)
            print(f"[DONE] Settings created: {len(todo)}")
        if args.show:
            print('\nPermission Matrix:')
            print_matrix(service)

if __name__ == '__main__':
    main()
