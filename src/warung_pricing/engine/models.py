"""
Data models for the markup engine.

Uses dataclasses for structured, type-safe data representation.
Stored records use the camelCase keys of the POS storage format.
"""
import math
from dataclasses import dataclass, field
from typing import Optional, Union

MARKUP_PERCENT = "percent"
MARKUP_FIXED = "fixed"
MARKUP_TYPES = (MARKUP_PERCENT, MARKUP_FIXED)


@dataclass(frozen=True)
class PercentMarkup:
    """Markup as a percentage of the cost price."""
    retail_percent: float
    wholesale_percent: float

    def apply(self, cost_price: float) -> tuple[float, float]:
        """Return raw (retail, wholesale) prices before rounding."""
        return (
            cost_price * (1 + self.retail_percent / 100),
            cost_price * (1 + self.wholesale_percent / 100),
        )


@dataclass(frozen=True)
class FixedMarkup:
    """Markup as an absolute amount added to the cost price."""
    retail_amount: float
    wholesale_amount: float

    def apply(self, cost_price: float) -> tuple[float, float]:
        """Return raw (retail, wholesale) prices before rounding."""
        return cost_price + self.retail_amount, cost_price + self.wholesale_amount


Markup = Union[PercentMarkup, FixedMarkup]


def _number(value, default: float = 0) -> float:
    """Read a stored number; blanks and unreadable values become the default."""
    if value is None or value == '' or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


@dataclass
class MarkupRule:
    """A cost-price band mapped to a markup formula."""
    id: str
    min_price: float
    max_price: Optional[float] = None  # None = no upper bound
    markup_type: str = MARKUP_PERCENT
    retail_markup_percent: float = 0
    wholesale_markup_percent: float = 0
    retail_markup_fixed: float = 0
    wholesale_markup_fixed: float = 0
    category_id: Optional[str] = None  # None = applies to every category
    created_at: str = ""
    updated_at: str = ""

    @property
    def markup(self) -> Markup:
        """The formula selected by markup_type."""
        if self.markup_type == MARKUP_FIXED:
            return FixedMarkup(self.retail_markup_fixed, self.wholesale_markup_fixed)
        return PercentMarkup(self.retail_markup_percent, self.wholesale_markup_percent)

    def contains(self, cost_price: float) -> bool:
        """Whether the cost price falls inside this rule's band (inclusive)."""
        if cost_price < self.min_price:
            return False
        return self.max_price is None or cost_price <= self.max_price

    def overlaps(self, other: 'MarkupRule') -> bool:
        """Whether two bands share at least one cost price."""
        if self.max_price is not None and other.min_price > self.max_price:
            return False
        if other.max_price is not None and self.min_price > other.max_price:
            return False
        return True

    def to_record(self) -> dict:
        """Convert to the stored record format."""
        return {
            'id': self.id,
            'minPrice': self.min_price,
            'maxPrice': self.max_price,
            'markupType': self.markup_type,
            'retailMarkupPercent': self.retail_markup_percent,
            'wholesaleMarkupPercent': self.wholesale_markup_percent,
            'retailMarkupFixed': self.retail_markup_fixed,
            'wholesaleMarkupFixed': self.wholesale_markup_fixed,
            'categoryId': self.category_id,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }

    @classmethod
    def from_record(cls, record: dict) -> 'MarkupRule':
        """
        Create a MarkupRule from a stored record.

        Older records lack markupType and the fixed amounts; they are read
        as percent rules with zero fixed markup.
        """
        return cls(
            id=str(record.get('id', '')),
            min_price=_number(record.get('minPrice')),
            max_price=_number(record.get('maxPrice'), None),
            markup_type=record.get('markupType') or MARKUP_PERCENT,
            retail_markup_percent=_number(record.get('retailMarkupPercent')),
            wholesale_markup_percent=_number(record.get('wholesaleMarkupPercent')),
            retail_markup_fixed=_number(record.get('retailMarkupFixed')),
            wholesale_markup_fixed=_number(record.get('wholesaleMarkupFixed')),
            category_id=record.get('categoryId') or None,
            created_at=record.get('createdAt', ''),
            updated_at=record.get('updatedAt', ''),
        )


@dataclass
class MarkupResult:
    """The markup values of the rule that matched a cost price."""
    type: str
    retail_percent: float
    wholesale_percent: float
    retail_fixed: float
    wholesale_fixed: float
    rule_id: Optional[str] = None
    category_id: Optional[str] = None

    @property
    def markup(self) -> Markup:
        if self.type == MARKUP_FIXED:
            return FixedMarkup(self.retail_fixed, self.wholesale_fixed)
        return PercentMarkup(self.retail_percent, self.wholesale_percent)

    @classmethod
    def from_rule(cls, rule: MarkupRule) -> 'MarkupResult':
        return cls(
            type=rule.markup_type,
            retail_percent=rule.retail_markup_percent,
            wholesale_percent=rule.wholesale_markup_percent,
            retail_fixed=rule.retail_markup_fixed,
            wholesale_fixed=rule.wholesale_markup_fixed,
            rule_id=rule.id,
            category_id=rule.category_id,
        )


@dataclass
class SellingPrices:
    """Suggested selling prices, rounded to the nearest thousand."""
    retail_price: int
    wholesale_price: int


@dataclass
class TraceStep:
    """A single step in the markup resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class Category:
    """A product category; the prefix is used for generated SKUs."""
    id: str
    name: str
    prefix: str
    created_at: int = 0

    def to_record(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'prefix': self.prefix,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict) -> 'Category':
        return cls(
            id=str(record.get('id', '')),
            name=record.get('name', ''),
            prefix=record.get('prefix', ''),
            created_at=int(record.get('createdAt') or 0),
        )


@dataclass
class Product:
    """The catalog fields needed for pricing and SKU generation."""
    id: str
    name: str
    sku: str
    category: str  # category name
    cost_price: float = 0
    retail_price: float = 0
    wholesale_price: float = 0
    wholesale_min_qty: int = 10
    stock: int = 0
    unit: str = "Pcs"
    created_at: str = ""
    updated_at: str = ""
    extra: dict = field(default_factory=dict)

    def to_record(self) -> dict:
        record = dict(self.extra)
        record.update({
            'id': self.id,
            'name': self.name,
            'sku': self.sku,
            'category': self.category,
            'costPrice': self.cost_price,
            'retailPrice': self.retail_price,
            'wholesalePrice': self.wholesale_price,
            'wholesaleMinQty': self.wholesale_min_qty,
            'stock': self.stock,
            'unit': self.unit,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        })
        return record

    @classmethod
    def from_record(cls, record: dict) -> 'Product':
        known = {
            'id', 'name', 'sku', 'category', 'costPrice', 'retailPrice',
            'wholesalePrice', 'wholesaleMinQty', 'stock', 'unit',
            'createdAt', 'updatedAt',
        }
        return cls(
            id=str(record.get('id', '')),
            name=record.get('name', ''),
            sku=record.get('sku', ''),
            category=record.get('category', ''),
            cost_price=_number(record.get('costPrice')),
            retail_price=_number(record.get('retailPrice')),
            wholesale_price=_number(record.get('wholesalePrice')),
            wholesale_min_qty=int(_number(record.get('wholesaleMinQty'), 10)),
            stock=int(_number(record.get('stock'))),
            unit=record.get('unit') or "Pcs",
            created_at=record.get('createdAt', ''),
            updated_at=record.get('updatedAt', ''),
            # Fields owned by other screens (images, barcodes) survive a rewrite
            extra={k: v for k, v in record.items() if k not in known},
        )
