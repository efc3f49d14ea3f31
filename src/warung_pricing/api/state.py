"""
Shared service context for the API routers.
"""
from ..services.context import PricingContext

context = PricingContext.build()


def get_context() -> PricingContext:
    """FastAPI dependency; overridden in tests with a temporary data directory."""
    return context
