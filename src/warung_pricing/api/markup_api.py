"""
Markup Rules API - FastAPI router for markup rule management.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..engine.models import MarkupRule
from ..services.context import PricingContext
from .state import get_context

router = APIRouter(prefix="/api/markup-rules", tags=["markup-rules"])

NULLABLE_FIELDS = {'max_price', 'category_id'}


# Pydantic models for API
class MarkupRuleCreate(BaseModel):
    """Request model for creating a markup rule."""
    model_config = ConfigDict(allow_inf_nan=False)

    min_price: float = 0
    max_price: Optional[float] = None
    markup_type: Literal["percent", "fixed"] = "percent"
    retail_markup_percent: float = 0
    wholesale_markup_percent: float = 0
    retail_markup_fixed: float = 0
    wholesale_markup_fixed: float = 0
    category_id: Optional[str] = None


class MarkupRuleUpdate(BaseModel):
    """Request model for updating a markup rule."""
    model_config = ConfigDict(allow_inf_nan=False)

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    markup_type: Optional[Literal["percent", "fixed"]] = None
    retail_markup_percent: Optional[float] = None
    wholesale_markup_percent: Optional[float] = None
    retail_markup_fixed: Optional[float] = None
    wholesale_markup_fixed: Optional[float] = None
    category_id: Optional[str] = None


class MarkupRuleResponse(BaseModel):
    """Response model for a markup rule."""
    id: str
    min_price: float
    max_price: Optional[float]
    markup_type: str
    retail_markup_percent: float
    wholesale_markup_percent: float
    retail_markup_fixed: float
    wholesale_markup_fixed: float
    category_id: Optional[str]
    created_at: str
    updated_at: str


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


class ExplainRequest(BaseModel):
    """Request model for tracing a lookup."""
    cost_price: float = Field(ge=0, allow_inf_nan=False)
    category_id: Optional[str] = None


def _response(rule: MarkupRule) -> MarkupRuleResponse:
    return MarkupRuleResponse(**rule.__dict__)


# Endpoints

@router.get("", response_model=list[MarkupRuleResponse])
async def list_rules(ctx: PricingContext = Depends(get_context)):
    """List all markup rules, ascending by min_price."""
    return [_response(rule) for rule in ctx.markup_rules.list_rules()]


@router.get("/stats")
async def get_stats(ctx: PricingContext = Depends(get_context)):
    """Get rule statistics."""
    return ctx.markup_rules.get_stats()


@router.get("/{rule_id}", response_model=MarkupRuleResponse)
async def get_rule(rule_id: str, ctx: PricingContext = Depends(get_context)):
    """Get a single rule by ID."""
    rule = ctx.markup_rules.get_rule(rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail=f"Markup rule '{rule_id}' not found")
    return _response(rule)


@router.post("", response_model=MarkupRuleResponse)
async def create_rule(rule_data: MarkupRuleCreate, ctx: PricingContext = Depends(get_context)):
    """Create a new markup rule."""
    rule = MarkupRule(id="", **rule_data.model_dump())

    validation = ctx.markup_rules.validate_rule(rule)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        return _response(ctx.markup_rules.create_rule(rule))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{rule_id}", response_model=MarkupRuleResponse)
async def update_rule(rule_id: str, updates: MarkupRuleUpdate, ctx: PricingContext = Depends(get_context)):
    """Update an existing markup rule."""
    # exclude_unset keeps explicit nulls, which only the nullable fields accept
    update_dict = {
        key: value
        for key, value in updates.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }

    current = ctx.markup_rules.get_rule(rule_id)
    if not current:
        raise HTTPException(status_code=404, detail=f"Markup rule '{rule_id}' not found")

    candidate = MarkupRule(**{**current.__dict__, **update_dict})
    validation = ctx.markup_rules.validate_rule(candidate)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        return _response(ctx.markup_rules.update_rule(rule_id, update_dict))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{rule_id}")
async def delete_rule(rule_id: str, ctx: PricingContext = Depends(get_context)):
    """Delete a markup rule."""
    try:
        ctx.markup_rules.delete_rule(rule_id)
        return {"success": True, "message": f"Markup rule '{rule_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/validate", response_model=ValidationResponse)
async def validate_rule(rule_data: MarkupRuleCreate, ctx: PricingContext = Depends(get_context)):
    """Validate a rule without saving."""
    rule = MarkupRule(id="", **rule_data.model_dump())
    result = ctx.markup_rules.validate_rule(rule)
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.post("/explain")
async def explain(request: ExplainRequest, ctx: PricingContext = Depends(get_context)):
    """Trace which rule applies to a cost price."""
    result, trace = ctx.resolver.explain(request.cost_price, request.category_id)
    return {
        "found": result is not None,
        "rule_id": result.rule_id if result else None,
        "trace": [step.__dict__ for step in trace],
    }
