#!/usr/bin/env python
"""
Recompute every product's selling prices from the markup rules.

Usage:
    python scripts/reprice_all.py            # preview only
    python scripts/reprice_all.py --apply    # write new prices
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from warung_pricing.services.context import PricingContext


def main():
    apply = '--apply' in sys.argv[1:]
    ctx = PricingContext.build()

    print("=" * 60)
    print("BULK REPRICE")
    print("=" * 60)

    preview = ctx.products.reprice_preview()
    if preview.empty:
        print("No products found.")
        return

    changed = preview[preview['Changed']]
    print(f"Products: {len(preview)}  |  With new prices: {len(changed)}")
    if not changed.empty:
        print()
        print(changed[['SKU', 'Name', 'Cost', 'Retail', 'New Retail', 'Wholesale', 'New Wholesale']].to_string(index=False))

    if not apply:
        print("\nPreview only. Run with --apply to save.")
        return

    report = ctx.products.bulk_reprice()
    print()
    print(f"✅ Updated {report.updated} products")
    if report.skipped:
        print(f"   Skipped {report.skipped} (no cost price or markup rule)")


if __name__ == "__main__":
    main()
