"""Engine subpackage - markup rule resolution and price rounding."""
from .markup_resolver import MarkupResolver, round_to_thousand
from .models import MarkupRule, MarkupResult, SellingPrices, PercentMarkup, FixedMarkup

__all__ = [
    'MarkupResolver', 'round_to_thousand', 'MarkupRule', 'MarkupResult',
    'SellingPrices', 'PercentMarkup', 'FixedMarkup',
]
