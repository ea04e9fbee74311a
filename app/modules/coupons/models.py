# Supabase table: coupons

"""
Expected Supabase table structure:

coupons:
- id: uuid (primary key, default gen_random_uuid())
- code: varchar(255) (unique, not null) - e.g. HUAWEI-OFF15-4821
- discount_percent: int (not null, 1..100)
- status: varchar(50) (default 'active', check status in ('active', 'expired', 'used'))
- product_id: uuid (references products.id ON DELETE CASCADE)
- user_id: uuid (references users.id ON DELETE CASCADE) - creator
- note: text
- expires_at: timestamptz
- created_at: timestamptz (default now())

The status column is only changed by explicit actions (mark used, disable,
expire-overdue, or the optional expiry sweep). See rules.effective_status
for the status shown to users.
"""
