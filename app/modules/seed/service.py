"""
Demo data seeding.

Wipes every auth user (profiles and their coupons go by cascade) and every
product (remaining coupons go by cascade), then recreates a manager, two
sales agents, three products and three coupons. Needs the service role key.
Table DDL and RLS policies are managed in the Supabase project itself.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List

from supabase import Client

from app.database.supabase_client import list_all_auth_users
from app.modules.coupons import rules

logger = logging.getLogger(__name__)

NIL_UUID = "00000000-0000-0000-0000-000000000000"

SEED_USERS = [
    {
        "email": "manager@example.com",
        "password": "123456",
        "full_name": "Sales Manager",
        "role": "manager",
        "coupon_limit_per_month": 999,
    },
    {
        "email": "sales_agent_1@example.com",
        "password": "password",
        "full_name": "Sales Agent 1",
        "role": "sales",
        "coupon_limit_per_month": 10,
    },
    {
        "email": "sales_agent_2@example.com",
        "password": "password",
        "full_name": "Sales Agent 2",
        "role": "sales",
        "coupon_limit_per_month": 15,
    },
]

SEED_PRODUCTS = [
    {"name": "Huawei Fiber Modem", "description": "High speed modem with great coverage", "price": 150, "is_active": True},
    {"name": "ZTE Fiber Modem", "description": "Affordable quality modem", "price": 120, "is_active": True},
    {"name": "Portable 5G Modem", "description": "Fast internet anywhere", "price": 250, "is_active": False},
]

# (product index, agent index, discount, status, expires in days, note)
SEED_COUPONS = [
    (0, 1, 15, "active", 3, "For a special customer"),
    (1, 2, 20, "used", -1, "Closed sale"),
    (0, 1, 10, "expired", -5, "Expired"),
]


class SeedError(Exception):
    pass


def delete_existing_data(admin: Client):
    logger.info("Starting data cleanup...")
    auth_users = list_all_auth_users(admin)
    for user in auth_users:
        admin.auth.admin.delete_user(user.id)
    logger.info(f"Deleted {len(auth_users)} auth user(s); profiles removed via CASCADE")

    admin.table("products").delete().neq("id", NIL_UUID).execute()
    logger.info("All products and related coupons deleted")


def seed_users(admin: Client) -> List[Dict[str, Any]]:
    created = []
    for user_data in SEED_USERS:
        try:
            auth_response = admin.auth.admin.create_user({
                "email": user_data["email"],
                "password": user_data["password"],
                "email_confirm": True,
            })
        except Exception as e:
            raise SeedError(f"Error creating user {user_data['email']}: {e}")
        if not auth_response or not auth_response.user:
            continue
        auth_user = auth_response.user

        profile = {
            "id": auth_user.id,
            "full_name": user_data["full_name"],
            "role": user_data["role"],
            "coupon_limit_per_month": user_data["coupon_limit_per_month"],
        }
        try:
            admin.table("users").insert(profile).execute()
        except Exception as e:
            admin.auth.admin.delete_user(auth_user.id)
            raise SeedError(f"Error creating profile for {user_data['email']}: {e}")
        logger.info(f"Created {user_data['role']} {user_data['email']}")
        created.append(profile)
    return created


def seed_products(admin: Client) -> List[Dict[str, Any]]:
    try:
        result = admin.table("products").insert(SEED_PRODUCTS).execute()
    except Exception as e:
        raise SeedError(f"Error creating products: {e}")
    logger.info(f"{len(result.data)} products seeded")
    return result.data


def seed_coupons(admin: Client, users: List[Dict[str, Any]], products: List[Dict[str, Any]]) -> int:
    if len(users) < len(SEED_USERS) or len(products) < len(SEED_PRODUCTS):
        logger.warning("Skipping coupons: users or products missing")
        return 0
    now = rules.utc_now()
    for product_index, agent_index, discount, status, days, note in SEED_COUPONS:
        product = products[product_index]
        coupon = {
            "code": rules.generate_coupon_code(product["name"], discount),
            "discount_percent": discount,
            "status": status,
            "product_id": product["id"],
            "user_id": users[agent_index]["id"],
            "note": note,
            "expires_at": (now + timedelta(days=days)).isoformat(),
        }
        try:
            admin.table("coupons").insert(coupon).execute()
        except Exception as e:
            raise SeedError(f"Error creating coupon: {e}")
    logger.info(f"{len(SEED_COUPONS)} coupons seeded")
    return len(SEED_COUPONS)


def seed_database(admin: Client) -> Dict[str, Any]:
    logger.info("Starting database seed...")
    delete_existing_data(admin)
    users = seed_users(admin)
    products = seed_products(admin)
    coupons = seed_coupons(admin, users, products)
    logger.info("Database seed completed successfully")
    return {
        "success": True,
        "message": "Database seeded with users, products and coupons.",
        "users": len(users),
        "products": len(products),
        "coupons": coupons,
    }
