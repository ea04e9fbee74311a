# Supabase tables: users (profiles), auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id ON DELETE CASCADE)
- full_name: varchar(255) (nullable)
- role: varchar(50) (default 'sales', check role in ('sales', 'manager'))
- coupon_limit_per_month: int (default 10)

Email and password live in auth.users and are managed through the Auth
admin API. Deleting the auth user removes the profile, which in turn removes
the user's coupons.
"""
