"""
Category Service - product categories and their SKU prefixes.
"""
import logging
import time
import uuid
from typing import Optional

from ..data.store import JsonStore
from ..engine.models import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ('Makanan', 'MKN'),
    ('Minuman', 'MNM'),
    ('Snack', 'SNK'),
    ('Rokok', 'RKK'),
    ('Kebersihan', 'KBR'),
    ('Sembako', 'SMB'),
    ('Lainnya', 'LNY'),
]


def _now_millis() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


def normalize_prefix(prefix: str) -> str:
    return prefix.strip().upper()[:3]


class CategoryService:
    """Service for managing product categories."""

    def __init__(self, store: JsonStore, storage_key: str = 'db_categories'):
        self.store = store
        self.storage_key = storage_key

    def _seed_defaults(self) -> list[Category]:
        now = _now_millis()
        categories = [
            # Offset keeps the default order stable when sorting by created_at
            Category(id=_new_id(), name=name, prefix=prefix, created_at=now + idx)
            for idx, (name, prefix) in enumerate(DEFAULT_CATEGORIES)
        ]
        self._write(categories)
        logger.info("Seeded %d default categories", len(categories))
        return categories

    def list_categories(self) -> list[Category]:
        """List categories in creation order, seeding the defaults on first use."""
        if not self.store.exists(self.storage_key):
            return self._seed_defaults()

        records = self.store.get(self.storage_key, [])
        categories = [Category.from_record(r) for r in records if isinstance(r, dict)]
        return sorted(categories, key=lambda c: c.created_at)

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self.list_categories():
            if category.id == category_id:
                return category
        return None

    def get_category_by_name(self, name: str) -> Optional[Category]:
        wanted = name.strip().lower()
        for category in self.list_categories():
            if category.name.lower() == wanted:
                return category
        return None

    def category_exists(self, category_id: str) -> bool:
        return self.get_category(category_id) is not None

    def get_prefixes(self) -> dict[str, str]:
        """Map of category name to SKU prefix."""
        return {c.name: c.prefix for c in self.list_categories()}

    def create_category(self, name: str, prefix: str) -> Category:
        """Create a category; names and prefixes must be unique."""
        categories = self.list_categories()
        self._check_unique(categories, name, prefix)

        category = Category(
            id=_new_id(),
            name=name.strip(),
            prefix=normalize_prefix(prefix),
            created_at=_now_millis(),
        )
        categories.append(category)
        self._write(categories)
        logger.info("Created category %s (%s)", category.name, category.prefix)
        return category

    def update_category(self, category_id: str, name: str, prefix: str) -> Category:
        categories = self.list_categories()
        for category in categories:
            if category.id == category_id:
                self._check_unique(categories, name, prefix, exclude_id=category_id)
                category.name = name.strip()
                category.prefix = normalize_prefix(prefix)
                self._write(categories)
                return category

        raise ValueError(f"Category '{category_id}' not found")

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; the last remaining category cannot be deleted."""
        categories = self.list_categories()
        remaining = [c for c in categories if c.id != category_id]

        if len(remaining) == len(categories):
            raise ValueError(f"Category '{category_id}' not found")
        if not remaining:
            raise ValueError("At least one category must remain")

        self._write(remaining)
        logger.info("Deleted category %s", category_id)
        return True

    @staticmethod
    def parse_records(records: list) -> list[Category]:
        """Parse stored category records; raises ValueError on an unreadable createdAt."""
        return [Category.from_record(r) for r in records if isinstance(r, dict)]

    def replace_all(self, categories: list[Category]) -> list[Category]:
        """
        Replace every stored category (used by backup restore).

        An empty list re-seeds the defaults so at least one category exists.
        """
        if not categories:
            return self._seed_defaults()
        self._write(categories)
        return categories

    def _check_unique(self, categories: list[Category], name: str, prefix: str, exclude_id: Optional[str] = None):
        for other in categories:
            if other.id == exclude_id:
                continue
            if other.name.lower() == name.strip().lower():
                raise ValueError(f"Category name '{name.strip()}' already exists")
            if other.prefix.upper() == normalize_prefix(prefix):
                raise ValueError(f"Category prefix '{normalize_prefix(prefix)}' already exists")

    def _write(self, categories: list[Category]):
        self.store.set(self.storage_key, [c.to_record() for c in categories])


def is_category_in_use(category_name: str, products) -> bool:
    """Whether any product references the category by name."""
    return any(p.category == category_name for p in products)
