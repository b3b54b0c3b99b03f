#!/usr/bin/env python3
"""
Upsert the demo catalogue into Supabase.

Seeds cities, districts, ISPs, tariffs and the demo users (admin123 / isp123).
Safe to re-run: rows are upserted by id.

Usage:
    python scripts/seed_supabase.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import load_settings
from repositories import seed
from repositories.client import create_supabase_client, response_rows
from repositories.reference_repository import _city_to_row, _district_to_row, _isp_to_row
from repositories.tariff_repository import _tariff_to_row
from repositories.user_repository import _user_to_row


def upsert(client, table: str, rows: list) -> int:
    response = client.table(table).upsert(rows).execute()
    return len(response_rows(response, f"seed {table}"))


def seed_supabase():
    settings = load_settings()
    client = create_supabase_client(settings.supabase_url, settings.supabase_key)

    print("=" * 60)
    print("SEEDING SUPABASE")
    print("=" * 60)

    # Parents before children (foreign keys)
    steps = [
        ("cities", [_city_to_row(c) for c in seed.seed_cities()]),
        ("districts", [_district_to_row(d) for d in seed.seed_districts()]),
        ("isps", [_isp_to_row(i) for i in seed.seed_isps()]),
        ("tariffs", [_tariff_to_row(t) for t in seed.seed_tariffs()]),
        ("users", [_user_to_row(u) for u in seed.seed_users()]),
    ]
    for table, rows in steps:
        count = upsert(client, table, rows)
        print(f"   {table:<10} {count} rows")

    print()
    print("[SUCCESS] Seed complete")


if __name__ == "__main__":
    seed_supabase()
