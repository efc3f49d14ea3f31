import json
import pytest
import sys
import os
from datetime import date

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from warung_pricing.config.settings import Settings
from warung_pricing.data.backup import backup_filename, validate_backup
from warung_pricing.engine.models import MarkupRule, Product
from warung_pricing.services.context import PricingContext


def build_context(path):
    return PricingContext.build(Settings(project_root=path, data_dir=path / 'data'))


@pytest.fixture
def ctx(tmp_path):
    ctx = build_context(tmp_path / 'source')
    ctx.markup_rules.create_rule(MarkupRule(id="", min_price=0, retail_markup_percent=20,
                                            wholesale_markup_percent=10))
    ctx.products.create_product(Product(id="", name="Kopi", sku="", category="Minuman", cost_price=2500))
    return ctx


def test_backup_filename():
    assert backup_filename(date(2026, 3, 1)) == "warungpos-backup-2026-03-01.json"


def test_export_contains_all_stores(ctx):
    backup = ctx.backup.export_backup()

    assert backup['version'] == 2
    assert backup['appVersion'] == ctx.settings.app_version
    assert isinstance(backup['createdAt'], str)
    assert len(backup['data']['products']) == 1
    assert len(backup['data']['categories']) == 7
    assert backup['data']['markupRules'][0]['markupType'] == 'percent'
    assert validate_backup(backup)


def test_restore_into_empty_store(ctx, tmp_path):
    target = build_context(tmp_path / 'target')

    result = target.backup.import_json(ctx.backup.export_json())

    assert result.success
    assert result.item_counts == {'products': 1, 'categories': 7, 'markupRules': 1}
    assert target.products.list_products()[0].sku == "MNM0001"
    assert [c.id for c in target.categories.list_categories()] == \
        [c.id for c in ctx.categories.list_categories()]
    assert target.resolver.compute_selling_prices(2500).retail_price == 3000


def test_restore_sorts_markup_rules(ctx):
    backup = ctx.backup.export_backup()
    backup['data']['markupRules'] = [
        {'id': 'b', 'minPrice': 5000, 'maxPrice': None, 'retailMarkupPercent': 10,
         'wholesaleMarkupPercent': 5, 'categoryId': None},
        {'id': 'a', 'minPrice': 0, 'maxPrice': 4999, 'retailMarkupPercent': 20,
         'wholesaleMarkupPercent': 10, 'categoryId': None},
    ]

    ctx.backup.import_backup(backup)

    assert [r.id for r in ctx.markup_rules.list_rules()] == ['a', 'b']


def test_restore_without_optional_sections_keeps_them(ctx):
    backup = {'version': 2, 'createdAt': '2026-01-01T00:00:00', 'data': {'products': []}}

    result = ctx.backup.import_backup(backup)

    assert result.success
    assert result.item_counts == {'products': 0}
    assert ctx.products.list_products() == []
    assert len(ctx.markup_rules.list_rules()) == 1


@pytest.mark.parametrize("data", [
    None,
    [],
    {'version': '2', 'createdAt': 'x', 'data': {'products': []}},
    {'version': True, 'createdAt': 'x', 'data': {'products': []}},
    {'version': 2, 'data': {'products': []}},
    {'version': 2, 'createdAt': 'x', 'data': []},
    {'version': 2, 'createdAt': 'x', 'data': {'markupRules': []}},
])
def test_invalid_backup_rejected_without_writing(ctx, data):
    result = ctx.backup.import_backup(data)

    assert not result.success
    assert len(ctx.products.list_products()) == 1


def test_unreadable_json_rejected(ctx):
    result = ctx.backup.import_json("{not json")

    assert not result.success
    assert "Could not read" in result.message


def test_export_json_is_parseable(ctx):
    assert json.loads(ctx.backup.export_json())['data']['products'][0]['name'] == "Kopi"


def test_restored_text_prices_still_resolve(ctx):
    backup = ctx.backup.export_backup()
    backup['data']['markupRules'] = [
        {'id': 'a', 'minPrice': '1000', 'maxPrice': None, 'retailMarkupPercent': 20,
         'wholesaleMarkupPercent': 10, 'categoryId': None},
        {'id': 'b', 'minPrice': 0, 'maxPrice': 999, 'retailMarkupPercent': 50,
         'wholesaleMarkupPercent': 40, 'categoryId': None},
    ]

    assert ctx.backup.import_backup(backup).success
    assert [r.id for r in ctx.markup_rules.list_rules()] == ['b', 'a']
    assert ctx.resolver.compute_selling_prices(2500).retail_price == 3000


def test_failed_restore_leaves_stores_unchanged(ctx):
    before = ctx.backup.export_backup()['data']
    backup = {'version': 2, 'createdAt': 'x', 'data': {
        'products': [],
        'categories': [{'id': 'c1', 'name': 'Bumbu', 'prefix': 'BMB',
                        'createdAt': '2024-01-01T00:00:00Z'}],
        'markupRules': [],
    }}

    result = ctx.backup.import_backup(backup)

    assert not result.success
    after = ctx.backup.export_backup()['data']
    assert after == before


def test_restore_with_empty_categories_seeds_defaults(ctx):
    backup = {'version': 2, 'createdAt': 'x', 'data': {'products': [], 'categories': []}}

    result = ctx.backup.import_backup(backup)

    assert result.success
    assert result.item_counts['categories'] == 7
    assert [c.prefix for c in ctx.categories.list_categories()][0] == 'MKN'
