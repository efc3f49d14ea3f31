"""
Catalog API - categories, products, repricing and backup endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from ..engine.models import Product
from ..services.category_service import is_category_in_use
from ..services.context import PricingContext
from .state import get_context

categories_router = APIRouter(prefix="/api/categories", tags=["categories"])
products_router = APIRouter(prefix="/api/products", tags=["products"])
backup_router = APIRouter(prefix="/api/backup", tags=["backup"])


class CategoryPayload(BaseModel):
    name: str = Field(min_length=1)
    prefix: str = Field(min_length=1, max_length=3)


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    sku: str = ""
    category: str = ""
    cost_price: float = Field(default=0, ge=0, allow_inf_nan=False)
    retail_price: float = Field(default=0, ge=0, allow_inf_nan=False)
    wholesale_price: float = Field(default=0, ge=0, allow_inf_nan=False)
    wholesale_min_qty: int = 10
    stock: int = 0
    unit: str = "Pcs"


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    cost_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    retail_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    wholesale_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    wholesale_min_qty: Optional[int] = None
    stock: Optional[int] = None
    unit: Optional[str] = None


# Categories

@categories_router.get("")
async def list_categories(ctx: PricingContext = Depends(get_context)):
    return [c.__dict__ for c in ctx.categories.list_categories()]


@categories_router.post("")
async def create_category(payload: CategoryPayload, ctx: PricingContext = Depends(get_context)):
    try:
        return ctx.categories.create_category(payload.name, payload.prefix).__dict__
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@categories_router.put("/{category_id}")
async def update_category(category_id: str, payload: CategoryPayload, ctx: PricingContext = Depends(get_context)):
    if not ctx.categories.get_category(category_id):
        raise HTTPException(status_code=404, detail=f"Category '{category_id}' not found")
    try:
        return ctx.categories.update_category(category_id, payload.name, payload.prefix).__dict__
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@categories_router.delete("/{category_id}")
async def delete_category(category_id: str, ctx: PricingContext = Depends(get_context)):
    category = ctx.categories.get_category(category_id)
    if not category:
        raise HTTPException(status_code=404, detail=f"Category '{category_id}' not found")
    if is_category_in_use(category.name, ctx.products.list_products()):
        raise HTTPException(status_code=409, detail=f"Category '{category.name}' is used by products")
    try:
        ctx.categories.delete_category(category_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "message": f"Category '{category.name}' deleted"}


# Products

@products_router.get("")
async def list_products(search: Optional[str] = None, ctx: PricingContext = Depends(get_context)):
    products = ctx.products.list_products()
    if search:
        needle = search.lower()
        products = [p for p in products if needle in p.name.lower() or needle in p.sku.lower()]
    return [p.to_record() for p in products]


@products_router.post("")
async def create_product(payload: ProductCreate, ctx: PricingContext = Depends(get_context)):
    product = ctx.products.create_product(Product(id="", **payload.model_dump()))
    return product.to_record()


@products_router.get("/sku/{category_name}")
async def next_sku(category_name: str, ctx: PricingContext = Depends(get_context)):
    return {"category": category_name, "sku": ctx.products.generate_sku(category_name)}


@products_router.get("/reprice/preview")
async def reprice_preview(ctx: PricingContext = Depends(get_context)):
    df = ctx.products.reprice_preview()
    # NaN is not valid JSON
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


@products_router.post("/reprice")
async def bulk_reprice(ctx: PricingContext = Depends(get_context)):
    report = ctx.products.bulk_reprice()
    return jsonable_encoder(report)


@products_router.put("/{product_id}")
async def update_product(product_id: str, updates: ProductUpdate, ctx: PricingContext = Depends(get_context)):
    update_dict = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}
    try:
        return ctx.products.update_product(product_id, update_dict).to_record()
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@products_router.delete("/{product_id}")
async def delete_product(product_id: str, ctx: PricingContext = Depends(get_context)):
    try:
        ctx.products.delete_product(product_id)
        return {"success": True, "message": f"Product '{product_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


# Backup

@backup_router.get("")
async def export_backup(ctx: PricingContext = Depends(get_context)):
    return ctx.backup.export_backup()


@backup_router.post("")
async def import_backup(data: dict[str, Any], ctx: PricingContext = Depends(get_context)):
    result = ctx.backup.import_backup(data)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return jsonable_encoder(result)
