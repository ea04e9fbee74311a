"""
Seed Database Script
Replaces all users, products and coupons with the demo data set.

    python -m app.scripts.seed_database
"""

import logging
import sys

from app.database.supabase_client import get_admin_supabase
from app.modules.seed.service import seed_database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    try:
        result = seed_database(get_admin_supabase())
        logger.info(result["message"])
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
