from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.products.schemas import ProductCreate, ProductUpdate, ProductResponse
from app.modules.products.service import ProductService
from app.core.dependencies import require_permission, is_manager
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/products", tags=["products"])


def get_product_service(supabase: Client = Depends(get_supabase)) -> ProductService:
    return ProductService(supabase)


@router.get("", response_model=List[ProductResponse])
async def list_products(
    active_only: bool = False,
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    """List products. Sales agents only see active products."""
    if not is_manager(user_data):
        active_only = True
    return service.list_products(active_only=active_only, limit=limit, offset=offset)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    product_data: ProductCreate,
    user_data: Dict = Depends(require_permission("products:create")),
    service: ProductService = Depends(get_product_service)
):
    return service.create_product(product_data)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    user_data: Dict = Depends(require_permission("products:read")),
    service: ProductService = Depends(get_product_service)
):
    return service.get_product_by_id(product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    user_data: Dict = Depends(require_permission("products:update")),
    service: ProductService = Depends(get_product_service)
):
    return service.update_product(product_id, product_data)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: str,
    user_data: Dict = Depends(require_permission("products:delete")),
    service: ProductService = Depends(get_product_service)
):
    """Delete product and, by cascade, its coupons"""
    service.delete_product(product_id)
    return None
