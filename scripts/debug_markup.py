import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from warung_pricing.services.context import PricingContext


def debug(cost_price: float, category_name: str = ""):
    ctx = PricingContext.build()

    print("Loaded Rules:")
    for rule in ctx.markup_rules.list_rules():
        print(f"  {rule.id}  {rule.min_price:g} - {rule.max_price}  {rule.markup_type}  category={rule.category_id}")

    category_id = ctx.products.category_id_for(category_name)
    print(f"\n--- Resolving cost {cost_price:g} (category {category_name or '-'} → {category_id}) ---")

    result, trace = ctx.resolver.explain(cost_price, category_id)
    for step in trace:
        print(f"→ {step.step}: {step.description}" + (f" = {step.value}" if step.value else ""))

    print("\nSelling Prices:")
    print(ctx.resolver.compute_selling_prices(cost_price, category_id))


if __name__ == "__main__":
    cost = float(sys.argv[1]) if len(sys.argv) > 1 else 2500
    category = sys.argv[2] if len(sys.argv) > 2 else ""
    debug(cost, category)
