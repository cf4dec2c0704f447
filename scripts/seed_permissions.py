#!/usr/bin/env python
"""Script to seed the permission catalog.

This script upserts every catalog permission into the ``permissions`` table,
keyed on ``code``. Existing rows keep their ids, so company grants that
reference them stay valid. Safe to run repeatedly.

Usage:
    python scripts/seed_permissions.py

Requirements:
    - SUPABASE_URL and SUPABASE_SECRET_KEY environment variables must be set
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.supabase import get_supabase_client
from src.services.permission_constants import catalog_rows

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Upsert the catalog and report the stored count.

    Returns:
        int: Process exit code.
    """
    rows = catalog_rows()
    client = get_supabase_client()

    try:
        client.table("permissions").upsert(rows, on_conflict="code").execute()
    except Exception as e:
        logger.error("Failed to seed permissions: %s", e)
        return 1

    stored = client.table("permissions").select("code").execute().data or []
    logger.info("Seeded %d catalog permissions (%d rows stored)", len(rows), len(stored))
    return 0


if __name__ == "__main__":
    sys.exit(main())
