"""
Backup/Restore - exports and imports every store as one JSON document.

Backup format (version 2):
{
    "version": 2,
    "createdAt": "<ISO timestamp>",
    "appVersion": "1.1.0",
    "data": {"products": [...], "categories": [...], "markupRules": [...]}
}
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ('products',)


def backup_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"warungpos-backup-{day.isoformat()}.json"


def validate_backup(data: Any) -> bool:
    """Check the envelope of a backup document."""
    if not isinstance(data, dict):
        return False
    # bool is an int subclass but never a valid version
    if not isinstance(data.get('version'), int) or isinstance(data.get('version'), bool):
        return False
    if not isinstance(data.get('createdAt'), str):
        return False
    payload = data.get('data')
    if not isinstance(payload, dict):
        return False
    return all(isinstance(payload.get(section), list) for section in REQUIRED_SECTIONS)


@dataclass
class RestoreResult:
    """Outcome of a restore."""
    success: bool
    message: str
    item_counts: dict[str, int] = field(default_factory=dict)


class BackupService:
    """Export and restore of products, categories and markup rules."""

    def __init__(self, products, categories, markup_rules, backup_version: int = 2, app_version: str = ""):
        self.products = products
        self.categories = categories
        self.markup_rules = markup_rules
        self.backup_version = backup_version
        self.app_version = app_version

    def export_backup(self) -> dict:
        """Build the backup document from the current stores."""
        backup = {
            "version": self.backup_version,
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "appVersion": self.app_version,
            "data": {
                "products": [p.to_record() for p in self.products.list_products()],
                "categories": [c.to_record() for c in self.categories.list_categories()],
                "markupRules": [r.to_record() for r in self.markup_rules.list_rules()],
            },
        }
        logger.info(
            "Exported backup: %d products, %d categories, %d markup rules",
            len(backup["data"]["products"]),
            len(backup["data"]["categories"]),
            len(backup["data"]["markupRules"]),
        )
        return backup

    def export_json(self) -> str:
        return json.dumps(self.export_backup(), indent=2, ensure_ascii=False)

    def import_backup(self, data: Any) -> RestoreResult:
        """
        Restore a backup document.

        Products are always replaced; categories and markup rules only when
        the backup contains them. Every section is parsed before anything is
        written, so an invalid or unreadable document leaves the stores as
        they were.
        """
        if not validate_backup(data):
            logger.warning("Rejected invalid backup document")
            return RestoreResult(success=False, message="Invalid backup file format")

        payload = data['data']
        try:
            products = self.products.parse_records(payload['products'])
            categories = None
            if isinstance(payload.get('categories'), list):
                categories = self.categories.parse_records(payload['categories'])
            rules = None
            if isinstance(payload.get('markupRules'), list):
                rules = self.markup_rules.parse_records(payload['markupRules'])
        except (TypeError, ValueError) as e:
            logger.warning("Unreadable record in backup: %s", e)
            return RestoreResult(success=False, message="Invalid backup file format")

        counts = {}
        self.products.replace_all(products)
        counts['products'] = len(products)

        if categories is not None:
            counts['categories'] = len(self.categories.replace_all(categories))

        if rules is not None:
            self.markup_rules.replace_all(rules)
            counts['markupRules'] = len(rules)

        logger.info("Restored backup from %s: %s", data['createdAt'], counts)
        return RestoreResult(success=True, message="Data restored", item_counts=counts)

    def import_json(self, text: str) -> RestoreResult:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Unreadable backup file: %s", e)
            return RestoreResult(success=False, message="Could not read backup file")
        return self.import_backup(data)
