from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config.settings import configure_logging
from ..services.context import PricingContext
from .catalog_api import backup_router, categories_router, products_router
from .markup_api import router as markup_router
from .state import get_context

configure_logging()

app = FastAPI(
    title="Warung Pricing API",
    description="Markup rules and selling price suggestions for the warung POS",
    version="1.1.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(markup_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(backup_router)


class CalcRequest(BaseModel):
    cost_price: float = Field(ge=0, allow_inf_nan=False)
    category_id: Optional[str] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Warung Pricing API Active"}


@app.post("/calculate")
async def calculate_prices(req: CalcRequest, ctx: PricingContext = Depends(get_context)):
    """Suggest selling prices; no applicable rule is a normal, empty result."""
    markup = ctx.resolver.resolve_markup(req.cost_price, req.category_id)
    prices = ctx.resolver.prices_for(markup, req.cost_price) if markup is not None else None
    return {
        "found": markup is not None,
        "markup": jsonable_encoder(markup),
        "prices": jsonable_encoder(prices),
    }


@app.get("/system/status")
async def get_status(ctx: PricingContext = Depends(get_context)):
    return {
        "data_dir": str(ctx.settings.data_dir),
        "rules_count": len(ctx.markup_rules.list_rules()),
        "categories_count": len(ctx.categories.list_categories()),
        "products_count": len(ctx.products.list_products()),
        "reject_overlapping_bands": ctx.settings.reject_overlapping_bands,
    }
