"""
Seed Features and Role Permissions Script
Writes the feature catalogue to dashboard_features and the default role
permissions for each organization to dashboard_role_permissions.
Existing organization adjustments are left alone unless --reset is given.

Usage:
    python app/scripts/seed_permissions_roles.py [--organization ORG_ID] [--reset]
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.config.permissions_config import PERMISSION_MATRIX
from app.database.supabase_client import get_admin_supabase
from supabase import Client
from typing import List, Optional
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_features(supabase: Client) -> int:
    """Upsert the feature catalogue from config"""
    logger.info("Seeding features...")
    features = PERMISSION_MATRIX["features"]
    supabase.table("dashboard_features")\
        .upsert(features, on_conflict="feature_key")\
        .execute()
    logger.info(f"Features seeded: {len(features)}")
    return len(features)


def organization_ids(supabase: Client, organization_id: Optional[str] = None) -> List[str]:
    if organization_id:
        return [organization_id]
    result = supabase.table("organizations").select("id").execute()
    return [row["id"] for row in result.data or []]


def seed_role_permissions(supabase: Client, organization_id: str, reset: bool = False) -> int:
    """Write default role rows for one organization; returns how many rows were written"""
    existing = set()
    if not reset:
        result = supabase.table("dashboard_role_permissions")\
            .select("role, feature_key")\
            .eq("organization_id", organization_id)\
            .execute()
        existing = {(row["role"], row["feature_key"]) for row in result.data or []}

    rows = [
        {"organization_id": organization_id, **row}
        for row in PERMISSION_MATRIX["role_permissions"]
        if (row["role"], row["feature_key"]) not in existing
    ]

    if rows:
        supabase.table("dashboard_role_permissions")\
            .upsert(rows, on_conflict="organization_id,role,feature_key")\
            .execute()
    logger.info(f"Organization {organization_id}: {len(rows)} role permission rows written")
    return len(rows)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Seed dashboard features and role permissions")
    parser.add_argument("--organization", help="Only seed this organization id")
    parser.add_argument("--reset", action="store_true", help="Overwrite existing organization adjustments")
    args = parser.parse_args(argv)

    try:
        supabase = get_admin_supabase()

        logger.info("Starting features and role permissions seeding...")
        feature_count = seed_features(supabase)

        row_count = 0
        orgs = organization_ids(supabase, args.organization)
        for org_id in orgs:
            row_count += seed_role_permissions(supabase, org_id, reset=args.reset)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {feature_count} features, {len(orgs)} organizations, {row_count} role rows")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
