"""
Markup Resolver - Finds the markup rule for a cost price and suggests selling prices.

Used by product entry (single and bulk), bulk repricing and the calculator
screen to turn a cost price into retail and wholesale prices.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from .models import MARKUP_FIXED, MarkupRule, MarkupResult, SellingPrices, TraceStep

logger = logging.getLogger(__name__)

RulesSource = Callable[[], list[MarkupRule]]


def round_to_thousand(amount: float, unit: int = 1000) -> int:
    """Round to the nearest multiple of unit, ties away from zero (5500 → 6000)."""
    steps = (Decimal(str(amount)) / unit).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return int(steps) * unit


class MarkupResolver:
    """
    Resolves markup rules for cost prices.

    Rules are read from the source on every call, already sorted ascending
    by min_price. Lookup order:
    1. Rules scoped to the requested category, first band match wins
    2. Catch-all rules (no category), first band match wins
    3. Not found (None) - callers fall back to manual price entry
    """

    def __init__(self, rules_source: RulesSource, rounding_unit: int = 1000):
        self.rules_source = rules_source
        self.rounding_unit = rounding_unit

    def find_rule(self, cost_price: float, category_id: Optional[str] = None) -> Optional[MarkupRule]:
        """Return the rule that applies to the cost price, or None."""
        rule, _ = self._scan(cost_price, category_id, self.rules_source())
        return rule

    def resolve_markup(self, cost_price: float, category_id: Optional[str] = None) -> Optional[MarkupResult]:
        """
        Find the markup values for a cost price.

        Args:
            cost_price: Unit cost of the product
            category_id: Category to prefer, or None for catch-all rules only

        Returns:
            MarkupResult of the first matching rule, or None when no rule applies
        """
        rule = self.find_rule(cost_price, category_id)
        if rule is None:
            logger.debug("No markup rule for cost %s (category %s)", cost_price, category_id)
            return None
        return MarkupResult.from_rule(rule)

    def compute_selling_prices(self, cost_price: float, category_id: Optional[str] = None) -> Optional[SellingPrices]:
        """
        Compute retail and wholesale prices for a cost price.

        The markup formula is applied to the raw cost, then both prices are
        rounded to the nearest thousand. Returns None when no rule applies.
        """
        result = self.resolve_markup(cost_price, category_id)
        if result is None:
            return None
        return self.prices_for(result, cost_price)

    def prices_for(self, result: MarkupResult, cost_price: float) -> SellingPrices:
        """Apply an already resolved markup to a cost price and round both prices."""
        raw_retail, raw_wholesale = result.markup.apply(cost_price)
        return SellingPrices(
            retail_price=round_to_thousand(raw_retail, self.rounding_unit),
            wholesale_price=round_to_thousand(raw_wholesale, self.rounding_unit),
        )

    def explain(self, cost_price: float, category_id: Optional[str] = None) -> tuple[Optional[MarkupResult], list[TraceStep]]:
        """
        Resolve with a trace of the lookup steps.

        Returns (markup_result, trace_steps).
        """
        rule, trace = self._scan(cost_price, category_id, self.rules_source())
        if rule is None:
            return None, trace

        result = MarkupResult.from_rule(rule)
        if result.type == MARKUP_FIXED:
            formula = f"+{result.retail_fixed:,.0f} retail, +{result.wholesale_fixed:,.0f} wholesale"
        else:
            formula = f"+{result.retail_percent:g}% retail, +{result.wholesale_percent:g}% wholesale"
        trace.append(TraceStep("Markup", f"{result.type} markup", formula))
        return result, trace

    def _scan(
        self,
        cost_price: float,
        category_id: Optional[str],
        rules: list[MarkupRule]
    ) -> tuple[Optional[MarkupRule], list[TraceStep]]:
        trace = [TraceStep("Cost Lookup", "Resolving markup for cost price", f"{cost_price:,.0f}")]

        if category_id:
            for rule in rules:
                if rule.category_id != category_id:
                    continue
                if rule.contains(cost_price):
                    trace.append(TraceStep("Category Match", f"Rule for category {category_id}", rule.id))
                    return rule, trace
            trace.append(TraceStep("Category Match", f"No band for category {category_id}"))

        for rule in rules:
            if rule.category_id is not None:
                continue
            if rule.contains(cost_price):
                trace.append(TraceStep("General Match", "Rule for all categories", rule.id))
                return rule, trace

        trace.append(TraceStep("Not Found", "No markup rule covers this cost price"))
        return None, trace
