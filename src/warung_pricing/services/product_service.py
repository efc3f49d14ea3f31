"""
Product Service - catalog records, SKU generation and markup-based repricing.
"""
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from ..data.store import JsonStore
from ..engine.markup_resolver import MarkupResolver
from ..engine.models import Product, SellingPrices
from .category_service import CategoryService
from .markup_service import now_iso

logger = logging.getLogger(__name__)

DEFAULT_SKU_PREFIX = 'PRD'
SKU_DIGITS = 4


def next_sku(prefix: str, existing_skus: list[str]) -> str:
    """
    Next SKU for a prefix: highest numeric suffix + 1, zero-padded.

    SKUs with the prefix but a non-numeric suffix count as 0.
    """
    numbers = []
    for sku in existing_skus:
        if not sku.startswith(prefix):
            continue
        match = re.match(r'\d+', sku[len(prefix):])
        numbers.append(int(match.group()) if match else 0)

    next_num = (max(numbers) if numbers else 0) + 1
    return f"{prefix}{next_num:0{SKU_DIGITS}d}"


@dataclass
class RepriceReport:
    """Outcome of a bulk repricing run."""
    updated: int = 0
    skipped: int = 0
    updated_ids: list[str] = field(default_factory=list)


class ProductService:
    """Service for product records and their suggested prices."""

    UPDATABLE_FIELDS = {
        'name', 'sku', 'category', 'cost_price', 'retail_price',
        'wholesale_price', 'wholesale_min_qty', 'stock', 'unit',
    }

    def __init__(
        self,
        store: JsonStore,
        resolver: MarkupResolver,
        categories: CategoryService,
        storage_key: str = 'db_products'
    ):
        self.store = store
        self.resolver = resolver
        self.categories = categories
        self.storage_key = storage_key

    def list_products(self) -> list[Product]:
        records = self.store.get(self.storage_key, [])
        return [Product.from_record(r) for r in records if isinstance(r, dict)]

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None

    def generate_sku(self, category_name: str) -> str:
        """Generate the next SKU for a category, e.g. MKN0001."""
        prefix = self.categories.get_prefixes().get(category_name, DEFAULT_SKU_PREFIX)
        return next_sku(prefix, [p.sku for p in self.list_products()])

    def category_id_for(self, category_name: str) -> Optional[str]:
        """Products reference categories by name; markup rules by id."""
        if not category_name:
            return None
        category = self.categories.get_category_by_name(category_name)
        return category.id if category else None

    def suggest_prices(self, cost_price: float, category_name: str = "") -> Optional[SellingPrices]:
        """Suggested selling prices for a cost price, or None when no rule applies."""
        if cost_price <= 0:
            return None
        return self.resolver.compute_selling_prices(cost_price, self.category_id_for(category_name))

    def create_product(self, product: Product) -> Product:
        """
        Create a product.

        A blank SKU is generated from the category prefix. When neither
        selling price is given they are suggested from the markup rules.
        """
        if not product.id:
            product.id = str(uuid.uuid4())
        if not product.sku:
            product.sku = self.generate_sku(product.category)

        if not product.retail_price and not product.wholesale_price:
            prices = self.suggest_prices(product.cost_price, product.category)
            if prices:
                product.retail_price = prices.retail_price
                product.wholesale_price = prices.wholesale_price

        now = now_iso()
        product.created_at = now
        product.updated_at = now

        products = self.list_products()
        products.append(product)
        self._write(products)
        logger.info("Created product %s (%s)", product.sku, product.name)
        return product

    def update_product(self, product_id: str, updates: dict) -> Product:
        products = self.list_products()
        for product in products:
            if product.id == product_id:
                for key, value in updates.items():
                    if key in self.UPDATABLE_FIELDS:
                        setattr(product, key, value)
                product.updated_at = now_iso()
                self._write(products)
                return product

        raise ValueError(f"Product '{product_id}' not found")

    def delete_product(self, product_id: str) -> bool:
        products = self.list_products()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            raise ValueError(f"Product '{product_id}' not found")
        self._write(remaining)
        return True

    @staticmethod
    def parse_records(records: list) -> list[Product]:
        return [Product.from_record(r) for r in records if isinstance(r, dict)]

    def replace_all(self, products: list[Product]):
        """Replace every stored product (used by backup restore)."""
        self.store.set(self.storage_key, [p.to_record() for p in products])

    def bulk_reprice(self) -> RepriceReport:
        """
        Recompute selling prices of every product from the current markup rules.

        Products without a cost price or without an applicable rule are skipped
        and keep their prices.
        """
        report = RepriceReport()
        products = self.list_products()

        for product in products:
            prices = self.suggest_prices(product.cost_price, product.category)
            if prices is None:
                report.skipped += 1
                continue

            product.retail_price = prices.retail_price
            product.wholesale_price = prices.wholesale_price
            product.updated_at = now_iso()
            report.updated += 1
            report.updated_ids.append(product.id)

        if report.updated:
            self._write(products)
        logger.info("Bulk reprice: %d updated, %d skipped", report.updated, report.skipped)
        return report

    def reprice_preview(self) -> pd.DataFrame:
        """Current and suggested prices for every product, without saving."""
        rows = []
        for product in self.list_products():
            prices = self.suggest_prices(product.cost_price, product.category)
            rows.append({
                'SKU': product.sku,
                'Name': product.name,
                'Category': product.category,
                'Cost': product.cost_price,
                'Retail': product.retail_price,
                'Wholesale': product.wholesale_price,
                'New Retail': prices.retail_price if prices else None,
                'New Wholesale': prices.wholesale_price if prices else None,
            })

        df = pd.DataFrame(rows, columns=[
            'SKU', 'Name', 'Category', 'Cost', 'Retail', 'Wholesale',
            'New Retail', 'New Wholesale',
        ])
        df['Changed'] = df['New Retail'].notna() & (
            (df['New Retail'] != df['Retail']) | (df['New Wholesale'] != df['Wholesale'])
        )
        return df

    def _write(self, products: list[Product]):
        self.store.set(self.storage_key, [p.to_record() for p in products])
