#!/usr/bin/env python
"""
Seed a starter set of catch-all markup rules.

Usage:
    python scripts/seed_markup_rules.py
"""
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from warung_pricing.engine.models import MarkupRule
from warung_pricing.services.context import PricingContext

STARTER_RULES = [
    MarkupRule(id="", min_price=0, max_price=5000, markup_type="fixed",
               retail_markup_fixed=1500, wholesale_markup_fixed=1000),
    MarkupRule(id="", min_price=5001, max_price=50000, markup_type="percent",
               retail_markup_percent=20, wholesale_markup_percent=10),
    MarkupRule(id="", min_price=50001, max_price=None, markup_type="percent",
               retail_markup_percent=10, wholesale_markup_percent=5),
]


def main():
    ctx = PricingContext.build()

    if ctx.markup_rules.list_rules():
        print("Markup rules already exist, nothing to seed.")
        return

    for rule in STARTER_RULES:
        validation = ctx.markup_rules.validate_rule(rule)
        if not validation.valid:
            print(f"❌ Skipped rule from {rule.min_price:g}: {'; '.join(validation.errors)}")
            continue
        created = ctx.markup_rules.create_rule(rule)
        print(f"✅ Created rule {created.id} ({created.markup_type}, from {created.min_price:g})")


if __name__ == "__main__":
    main()
