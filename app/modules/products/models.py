# Supabase table: products

"""
Expected Supabase table structure:

products:
- id: uuid (primary key, default gen_random_uuid())
- name: varchar(255) (not null)
- description: text (nullable)
- price: numeric(10, 2) (not null)
- is_active: boolean (default true)
- created_at: timestamptz (default now())

Deleting a product deletes its coupons (coupons.product_id ON DELETE CASCADE).
Only active products can receive new coupons.
"""
