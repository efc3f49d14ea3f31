"""
Markup Service - CRUD operations for markup rules.
Rules are kept in the JSON store sorted ascending by min_price.
"""
import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..data.store import JsonStore
from ..engine.models import MARKUP_FIXED, MARKUP_PERCENT, MARKUP_TYPES, MarkupRule

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ValidationResult:
    """Result of rule validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False


class MarkupService:
    """Service for managing markup rules."""

    UPDATABLE_FIELDS = {
        'min_price', 'max_price', 'markup_type', 'retail_markup_percent',
        'wholesale_markup_percent', 'retail_markup_fixed',
        'wholesale_markup_fixed', 'category_id',
    }

    def __init__(
        self,
        store: JsonStore,
        storage_key: str = 'warungpos_markup_rules',
        reject_overlapping_bands: bool = False,
        category_exists=None
    ):
        self.store = store
        self.storage_key = storage_key
        self.reject_overlapping_bands = reject_overlapping_bands
        # Optional callable(category_id) -> bool used for validation warnings
        self.category_exists = category_exists

    def list_rules(self) -> list[MarkupRule]:
        """List all rules, sorted ascending by min_price."""
        records = self.store.get(self.storage_key, [])
        rules = [MarkupRule.from_record(r) for r in records if isinstance(r, dict)]
        rules.sort(key=lambda r: r.min_price)
        return rules

    def get_rule(self, rule_id: str) -> Optional[MarkupRule]:
        """Get a single rule by ID."""
        for rule in self.list_rules():
            if rule.id == rule_id:
                return rule
        return None

    def create_rule(self, rule: MarkupRule) -> MarkupRule:
        """Create a new rule."""
        if not rule.id:
            rule.id = str(uuid.uuid4())

        if self.get_rule(rule.id):
            raise ValueError(f"Markup rule '{rule.id}' already exists")

        now = now_iso()
        rule.created_at = now
        rule.updated_at = now

        rules = self.list_rules()
        rules.append(rule)
        self._write_rules(rules)
        logger.info("Created markup rule %s (%s, min %s)", rule.id, rule.markup_type, rule.min_price)
        return rule

    def update_rule(self, rule_id: str, updates: dict) -> MarkupRule:
        """Update an existing rule."""
        rules = self.list_rules()

        for rule in rules:
            if rule.id == rule_id:
                for key, value in updates.items():
                    if key in self.UPDATABLE_FIELDS:
                        setattr(rule, key, value)
                rule.updated_at = now_iso()
                self._write_rules(rules)
                logger.info("Updated markup rule %s", rule_id)
                return rule

        raise ValueError(f"Markup rule '{rule_id}' not found")

    def delete_rule(self, rule_id: str) -> bool:
        """Delete a rule."""
        rules = self.list_rules()
        remaining = [r for r in rules if r.id != rule_id]

        if len(remaining) == len(rules):
            raise ValueError(f"Markup rule '{rule_id}' not found")

        self._write_rules(remaining)
        logger.info("Deleted markup rule %s", rule_id)
        return True

    @staticmethod
    def parse_records(records: list) -> list[MarkupRule]:
        return [MarkupRule.from_record(r) for r in records if isinstance(r, dict)]

    def replace_all(self, rules: list[MarkupRule]):
        """Replace every stored rule (used by backup restore)."""
        self._write_rules(rules)

    def validate_rule(self, rule: MarkupRule) -> ValidationResult:
        """Validate a rule before saving."""
        result = ValidationResult(valid=True)

        if rule.markup_type not in MARKUP_TYPES:
            result.add_error(f"Markup type must be one of: {', '.join(MARKUP_TYPES)}")

        if rule.min_price < 0:
            result.add_error("Minimum price must not be negative")

        if rule.max_price is not None and rule.max_price <= rule.min_price:
            result.add_error("Maximum price must be greater than minimum price")

        if rule.markup_type == MARKUP_PERCENT:
            if rule.retail_markup_percent < 0 or rule.wholesale_markup_percent < 0:
                result.add_error("Markup percentages must not be negative")
        elif rule.markup_type == MARKUP_FIXED:
            if rule.retail_markup_fixed < 0 or rule.wholesale_markup_fixed < 0:
                result.add_error("Fixed markup amounts must not be negative")

        if rule.category_id and self.category_exists and not self.category_exists(rule.category_id):
            result.warnings.append(f"Category '{rule.category_id}' not found")

        # Overlaps are resolved by scan order (lowest min_price wins)
        if result.valid:
            for message in self._check_overlaps(rule):
                if self.reject_overlapping_bands:
                    result.add_error(message)
                else:
                    result.warnings.append(message)

        return result

    def _check_overlaps(self, rule: MarkupRule) -> list[str]:
        """Find rules in the same category scope whose band overlaps this one."""
        messages = []
        for existing in self.list_rules():
            if existing.id == rule.id:
                continue
            if existing.category_id != rule.category_id:
                continue
            if rule.overlaps(existing):
                upper = "up" if existing.max_price is None else f"{existing.max_price:g}"
                messages.append(
                    f"Price band overlaps rule '{existing.id}' "
                    f"({existing.min_price:g} - {upper})"
                )
        return messages

    def _write_rules(self, rules: list[MarkupRule]):
        """Write rules back to the store, sorted by min_price."""
        ordered = sorted(rules, key=lambda r: r.min_price)
        self.store.set(self.storage_key, [r.to_record() for r in ordered])

    def get_stats(self) -> dict:
        """Get statistics about rules."""
        rules = self.list_rules()
        by_type = Counter(r.markup_type for r in rules)
        by_category = Counter(r.category_id or 'all' for r in rules)

        return {
            'total': len(rules),
            'percent': by_type.get(MARKUP_PERCENT, 0),
            'fixed': by_type.get(MARKUP_FIXED, 0),
            'general': by_category.get('all', 0),
            'by_category': dict(by_category),
        }
