import pytest
import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from warung_pricing.data.store import JsonStore
from warung_pricing.engine.models import MarkupRule
from warung_pricing.services.markup_service import MarkupService

KEY = 'warungpos_markup_rules'


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / 'data')


@pytest.fixture
def service(store):
    return MarkupService(store, KEY)


def percent_rule(min_price, max_price=None, retail=20, wholesale=10, category_id=None):
    return MarkupRule(id="", min_price=min_price, max_price=max_price,
                      retail_markup_percent=retail, wholesale_markup_percent=wholesale,
                      category_id=category_id)


def test_rules_are_stored_sorted_by_min_price(service, store):
    service.create_rule(percent_rule(50000))
    service.create_rule(percent_rule(0, 4999))
    service.create_rule(percent_rule(5000, 49999))

    assert [r.min_price for r in service.list_rules()] == [0, 5000, 50000]
    assert [r['minPrice'] for r in store.get(KEY)] == [0, 5000, 50000]


def test_create_assigns_id_and_timestamps(service):
    rule = service.create_rule(percent_rule(0))

    assert rule.id
    assert rule.created_at and rule.created_at == rule.updated_at
    assert service.get_rule(rule.id) == rule


def test_create_duplicate_id_raises(service):
    rule = service.create_rule(percent_rule(0))
    with pytest.raises(ValueError, match="already exists"):
        service.create_rule(MarkupRule(id=rule.id, min_price=10))


def test_update_rule(service):
    rule = service.create_rule(percent_rule(0, 1000))

    updated = service.update_rule(rule.id, {'max_price': None, 'markup_type': 'fixed',
                                            'retail_markup_fixed': 500, 'id': 'ignored'})

    assert updated.id == rule.id
    assert updated.max_price is None
    assert updated.markup_type == 'fixed'
    assert updated.updated_at >= rule.created_at
    assert service.get_rule(rule.id).retail_markup_fixed == 500


def test_update_resorts_rules(service):
    first = service.create_rule(percent_rule(0, 1000))
    service.create_rule(percent_rule(2000))

    service.update_rule(first.id, {'min_price': 5000, 'max_price': None})

    assert service.list_rules()[-1].id == first.id


def test_update_and_delete_unknown_rule_raise(service):
    with pytest.raises(ValueError, match="not found"):
        service.update_rule('missing', {'min_price': 1})
    with pytest.raises(ValueError, match="not found"):
        service.delete_rule('missing')


def test_delete_rule(service):
    rule = service.create_rule(percent_rule(0))
    assert service.delete_rule(rule.id) is True
    assert service.list_rules() == []


def test_legacy_records_are_normalized(store, service):
    store.set(KEY, [
        {'id': 'old', 'minPrice': 1000, 'maxPrice': None,
         'retailMarkupPercent': 15, 'wholesaleMarkupPercent': 8, 'categoryId': None},
        {'id': 'older', 'minPrice': 0, 'maxPrice': 999,
         'retailMarkupPercent': 20, 'wholesaleMarkupPercent': 10, 'categoryId': ''},
    ])

    rules = service.list_rules()

    assert [r.id for r in rules] == ['older', 'old']
    assert all(r.markup_type == 'percent' for r in rules)
    assert all(r.retail_markup_fixed == 0 and r.wholesale_markup_fixed == 0 for r in rules)
    assert rules[0].category_id is None


def test_text_and_unreadable_numbers_are_normalized(store, service):
    store.set(KEY, [
        {'id': 'text', 'minPrice': '1000', 'maxPrice': '',
         'retailMarkupPercent': '20', 'wholesaleMarkupPercent': 'abc'},
        {'id': 'number', 'minPrice': 0, 'maxPrice': 999,
         'retailMarkupPercent': 10, 'wholesaleMarkupPercent': 5},
    ])

    rules = service.list_rules()

    assert [r.id for r in rules] == ['number', 'text']
    assert rules[1].min_price == 1000.0
    assert rules[1].max_price is None
    assert rules[1].retail_markup_percent == 20.0
    assert rules[1].wholesale_markup_percent == 0
    assert rules[1].contains(2500)


def test_missing_store_lists_no_rules(service):
    assert service.list_rules() == []


@pytest.mark.parametrize("rule,message", [
    (percent_rule(-1), "Minimum price"),
    (percent_rule(5000, 5000), "Maximum price"),
    (percent_rule(5000, 1000), "Maximum price"),
    (percent_rule(0, retail=-5), "percentages"),
    (MarkupRule(id="", min_price=0, markup_type="fixed", wholesale_markup_fixed=-1), "Fixed markup"),
    (MarkupRule(id="", min_price=0, markup_type="tiered"), "Markup type"),
])
def test_validate_rejects_bad_rules(service, rule, message):
    result = service.validate_rule(rule)

    assert not result.valid
    assert any(message in e for e in result.errors)


def test_negative_percent_ignored_for_fixed_rules(service):
    rule = MarkupRule(id="", min_price=0, markup_type="fixed", retail_markup_percent=-10,
                      retail_markup_fixed=1000, wholesale_markup_fixed=500)
    assert service.validate_rule(rule).valid


def test_overlap_is_a_warning_by_default(service):
    existing = service.create_rule(percent_rule(0, 10000))

    result = service.validate_rule(percent_rule(5000, 20000))

    assert result.valid
    assert any(existing.id in w for w in result.warnings)


def test_overlap_only_checked_within_category_scope(service):
    service.create_rule(percent_rule(0, 10000))

    result = service.validate_rule(percent_rule(5000, 20000, category_id='cat-1'))

    assert result.valid
    assert result.warnings == []


def test_adjacent_bands_do_not_overlap(service):
    service.create_rule(percent_rule(0, 4999))
    assert service.validate_rule(percent_rule(5000)).warnings == []


def test_overlap_rejected_when_configured(store):
    service = MarkupService(store, KEY, reject_overlapping_bands=True)
    service.create_rule(percent_rule(1000))

    result = service.validate_rule(percent_rule(0, 2000))

    assert not result.valid
    assert "overlaps" in result.errors[0]


def test_rule_does_not_overlap_itself_on_edit(store):
    service = MarkupService(store, KEY, reject_overlapping_bands=True)
    rule = service.create_rule(percent_rule(0, 1000))
    rule.max_price = 2000

    assert service.validate_rule(rule).valid


def test_unknown_category_is_a_warning(store):
    service = MarkupService(store, KEY, category_exists=lambda category_id: category_id == 'known')

    assert service.validate_rule(percent_rule(0, category_id='known')).warnings == []
    result = service.validate_rule(percent_rule(0, category_id='gone'))
    assert result.valid
    assert "not found" in result.warnings[0]


def test_stats(service):
    service.create_rule(percent_rule(0, 999))
    service.create_rule(percent_rule(0, category_id='cat-1'))
    service.create_rule(MarkupRule(id="", min_price=1000, markup_type='fixed'))

    stats = service.get_stats()

    assert stats['total'] == 3
    assert stats['percent'] == 2
    assert stats['fixed'] == 1
    assert stats['general'] == 2
    assert stats['by_category'] == {'all': 2, 'cat-1': 1}
