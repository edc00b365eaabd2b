#!/usr/bin/env python3
"""Seed the database with tenants and their dashboard grants.

Reads a JSON file of the form::

    [{"name": "Tenant ABC", "short_code": "ABC", "dashboards": ["gJr564dVz"]}]

Tenants that already exist (by name or short code) are skipped. The API keys
of newly created tenants are printed once and are not recoverable afterwards.

Usage:
    python scripts/seed_tenants.py tenants.json
"""

import asyncio
import json
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from dashgate.common.config import get_settings
from dashgate.common.database import DatabaseManager
from dashgate.common.exceptions import ConflictError
from dashgate.credentials.hasher import ApiKeyHasher
from dashgate.tenants.service import TenantService


async def seed_tenants(seed_path: Path) -> None:
    seeds = json.loads(seed_path.read_text(encoding="utf-8"))

    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    svc = TenantService(ApiKeyHasher.from_settings(settings), key_prefix=settings.api_key_prefix)

    created = 0
    for seed in seeds:
        try:
            async with db.get_session() as session:
                tenant, raw_keys = await svc.create_tenant(
                    session, seed["name"], seed["short_code"]
                )
                for dashboard_uid in seed.get("dashboards", []):
                    await svc.grant_permission(session, tenant.id, dashboard_uid)
        except ConflictError as e:
            print(f"  [skip] {seed['name']}: {e.message}")
            continue

        created += 1
        print(f"  [created] {tenant.name} (ID {tenant.id})")
        for i, raw_key in enumerate(raw_keys):
            print(f"      key {i}: {raw_key}")

    await db.close()
    print(f"\nDone. {created} tenants seeded.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    asyncio.run(seed_tenants(Path(sys.argv[1])))
