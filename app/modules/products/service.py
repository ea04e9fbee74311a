from supabase import Client
from app.modules.products.schemas import ProductCreate, ProductUpdate, ProductResponse
from typing import List, Optional, Dict, Any, Iterable
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_product(self, product_data: ProductCreate) -> ProductResponse:
        try:
            result = self.supabase.table("products").insert(product_data.model_dump()).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create product")
            logger.info(f"Created product {result.data[0]['id']}")
            return ProductResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding product: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_product_row(self, product_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("products")\
            .select("*")\
            .eq("id", product_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data

    def get_product_by_id(self, product_id: str) -> ProductResponse:
        try:
            row = self.get_product_row(product_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not row:
            raise HTTPException(status_code=404, detail="Product not found")
        return ProductResponse(**row)

    def get_products_by_ids(self, product_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Product rows keyed by id, for joining onto coupon lists"""
        ids = list({pid for pid in product_ids if pid})
        if not ids:
            return {}
        result = self.supabase.table("products")\
            .select("*")\
            .in_("id", ids)\
            .execute()
        return {p["id"]: p for p in (result.data or [])}

    def list_products(self, active_only: bool = False, limit: int = 100, offset: int = 0) -> List[ProductResponse]:
        try:
            query = self.supabase.table("products").select("*")
            if active_only:
                query = query.eq("is_active", True)
            result = query\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ProductResponse(**p) for p in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing products: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_product(self, product_id: str, product_data: ProductUpdate) -> ProductResponse:
        update_data = product_data.model_dump(exclude_none=True)
        if not update_data:
            return self.get_product_by_id(product_id)
        try:
            result = self.supabase.table("products")\
                .update(update_data)\
                .eq("id", product_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Product not found")
            return ProductResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating product {product_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_product(self, product_id: str) -> bool:
        """Delete product; its coupons are removed by CASCADE"""
        try:
            result = self.supabase.table("products")\
                .delete()\
                .eq("id", product_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting product {product_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Product not found")
        return True
