"""
Service wiring shared by the API, the Streamlit UI and the scripts.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.settings import Settings, get_settings
from ..data.backup import BackupService
from ..data.store import JsonStore
from ..engine.markup_resolver import MarkupResolver
from .category_service import CategoryService
from .markup_service import MarkupService
from .product_service import ProductService


@dataclass
class PricingContext:
    """All services built over one data directory."""
    settings: Settings
    store: JsonStore
    categories: CategoryService
    markup_rules: MarkupService
    resolver: MarkupResolver
    products: ProductService
    backup: BackupService

    @classmethod
    def build(cls, settings: Optional[Settings] = None) -> 'PricingContext':
        settings = settings or get_settings()
        store = JsonStore(settings.data_dir)

        categories = CategoryService(store, settings.categories_key)
        markup_rules = MarkupService(
            store,
            settings.markup_rules_key,
            reject_overlapping_bands=settings.reject_overlapping_bands,
            category_exists=categories.category_exists,
        )
        # Rules are re-read from the store on every resolution
        resolver = MarkupResolver(markup_rules.list_rules, settings.rounding_unit)
        products = ProductService(store, resolver, categories, settings.products_key)
        backup = BackupService(
            products,
            categories,
            markup_rules,
            backup_version=settings.backup_version,
            app_version=settings.app_version,
        )

        return cls(
            settings=settings,
            store=store,
            categories=categories,
            markup_rules=markup_rules,
            resolver=resolver,
            products=products,
            backup=backup,
        )
