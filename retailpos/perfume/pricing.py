"""
Perfume refill arithmetic: weight to volume, refill quotes and scent
popularity. Pure functions over plain values so they are usable from
views, checkout and reports alike.
"""
import re
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

DEFAULT_DENSITY = Decimal('0.9')
LOW_STOCK_ML = Decimal('100')
GAUGE_FULL_ML = Decimal('500')
BOTTLE_SIZES = [10, 15, 20, 25, 30, 50, 100]
MAX_SCENTS_PER_BOTTLE = 10
MIXTURE_SEPARATOR = ' + '

DEFAULT_RETAIL_PRICE_PER_ML = Decimal('800')
DEFAULT_WHOLESALE_PRICE_PER_ML = Decimal('400')
DEFAULT_BOTTLE_COST = Decimal('1000')
DEFAULT_BOTTLE_COST_RANGES = [
    {'min': 0, 'max': 10, 'cost': 300},
    {'min': 11, 'max': 30, 'cost': 500},
    {'min': 31, 'max': 50, 'cost': 1000},
    {'min': 51, 'max': 100, 'cost': 1500},
    {'min': 101, 'max': 200, 'cost': 2000},
    {'min': 201, 'max': 999999, 'cost': 3000},
]
DEFAULT_RETAIL_BOTTLE_PRICES = {10: 8000, 15: 12000, 20: 16000, 25: 20000, 30: 24000, 50: 40000, 100: 80000}

ONE_DP = Decimal('0.1')
ML_SUFFIX = re.compile(r'\s*\(\s*\d+(?:\.\d+)?\s*ml\s*\)\s*$', re.IGNORECASE)


class PerfumeError(ValueError):
    """Invalid perfume input (weights, scent selection, bottle size)"""


def _dec(value):
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_1dp(value):
    return _dec(value).quantize(ONE_DP, rounding=ROUND_HALF_UP)


def validate_weights(empty_weight_g, current_weight_g):
    if empty_weight_g is None or _dec(empty_weight_g) <= 0:
        raise PerfumeError('Empty bottle weight must be greater than zero')
    if current_weight_g is None or _dec(current_weight_g) < _dec(empty_weight_g):
        raise PerfumeError('Current weight cannot be less than the empty bottle weight')


def ml_from_weight(empty_weight_g, current_weight_g, density=DEFAULT_DENSITY):
    """Volume of oil left in a container, rounded to 0.1 ml. Zero when nothing is left."""
    empty = _dec(empty_weight_g)
    current = _dec(current_weight_g)
    density = _dec(density or DEFAULT_DENSITY)
    if density <= 0:
        raise PerfumeError('Density must be greater than zero')
    if current <= empty:
        return Decimal('0.0')
    return round_1dp((current - empty) / density)


def stock_status(stock_ml):
    """'empty', 'low' or 'ok' plus the fill gauge percentage (500 ml = full)"""
    stock_ml = _dec(stock_ml or 0)
    if stock_ml <= 0:
        status = 'empty'
    elif stock_ml < LOW_STOCK_ML:
        status = 'low'
    else:
        status = 'ok'
    percent = min(Decimal('100'), stock_ml / GAUGE_FULL_ML * 100)
    return status, int(percent.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def stock_overview(stock_levels):
    """Totals across scents: total ml, scents with stock, low and empty counts"""
    levels = [_dec(ml or 0) for ml in stock_levels]
    return {
        'total_scents': len(levels),
        'total_ml': round_1dp(sum(levels, Decimal('0'))),
        'with_stock': sum(1 for ml in levels if ml > 0),
        'low_stock': sum(1 for ml in levels if 0 < ml < LOW_STOCK_ML),
        'empty': sum(1 for ml in levels if ml <= 0),
    }


@dataclass
class PricingConfig:
    retail_price_per_ml: Decimal = DEFAULT_RETAIL_PRICE_PER_ML
    wholesale_price_per_ml: Decimal = DEFAULT_WHOLESALE_PRICE_PER_ML
    retail_bottle_prices: dict = field(default_factory=lambda: dict(DEFAULT_RETAIL_BOTTLE_PRICES))
    bottle_cost_ranges: list = field(default_factory=lambda: [dict(r) for r in DEFAULT_BOTTLE_COST_RANGES])

    @classmethod
    def from_model(cls, config):
        if config is None:
            return cls()
        sizes = (config.retail_bottle_pricing or {}).get('sizes') or []
        ranges = (config.bottle_cost_config or {}).get('ranges')
        return cls(
            retail_price_per_ml=_dec(config.retail_price_per_ml or DEFAULT_RETAIL_PRICE_PER_ML),
            wholesale_price_per_ml=_dec(config.wholesale_price_per_ml or DEFAULT_WHOLESALE_PRICE_PER_ML),
            retail_bottle_prices={int(s['ml']): _dec(s['price']) for s in sizes if 'ml' in s and 'price' in s},
            bottle_cost_ranges=ranges if ranges else None,
        )

    def price_per_ml(self, customer_type):
        return self.wholesale_price_per_ml if customer_type == 'wholesale' else self.retail_price_per_ml


def bottle_cost_for(total_ml, ranges):
    """Empty bottle cost for a fill size; 1000 when no range matches"""
    if not ranges:
        return DEFAULT_BOTTLE_COST
    for r in ranges:
        if _dec(r['min']) <= _dec(total_ml) <= _dec(r['max']):
            return _dec(r['cost']) or DEFAULT_BOTTLE_COST
    return DEFAULT_BOTTLE_COST


def refill_price(total_ml, customer_type, config):
    """
    Retail refills use the bottle size price list, falling back to the
    per-ml rate. Wholesale is always the per-ml rate, rounded to a whole unit.
    """
    total_ml = _dec(total_ml)
    if total_ml <= 0:
        return Decimal('0')
    if customer_type == 'wholesale':
        return (total_ml * config.wholesale_price_per_ml).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    listed = config.retail_bottle_prices.get(int(total_ml)) if total_ml == int(total_ml) else None
    if listed is not None:
        return _dec(listed)
    return total_ml * config.retail_price_per_ml


@dataclass
class ScentPortion:
    name: str
    ml: Decimal
    scent_id: Optional[int] = None
    available_ml: Optional[Decimal] = None


@dataclass
class RefillQuote:
    bottle_size_ml: int
    customer_type: str
    portions: List[ScentPortion]
    ml_per_scent: Decimal
    price: Decimal
    price_per_ml: Decimal
    base_price: Decimal
    bottle_cost: Decimal
    scent_mixture: str
    item_name: str
    low_stock_warnings: List[str] = field(default_factory=list)
    insufficient: List[str] = field(default_factory=list)

    @property
    def is_fulfillable(self):
        return not self.insufficient

    def as_cart_item(self):
        """Line ready to post to checkout"""
        return {
            'type': 'perfume_refill',
            'name': self.item_name,
            'quantity': 1,
            'unit_price': str(self.price),
            'customer_type': self.customer_type,
            'scent_mixture': self.scent_mixture,
            'ml_amount': str(self.bottle_size_ml),
            'price_per_ml': str(self.price_per_ml),
            'bottle_cost': str(self.bottle_cost),
            'selected_scents': [
                {'scent_id': p.scent_id, 'scent': p.name, 'ml': str(p.ml)} for p in self.portions
            ],
        }


def quote_refill(scents, bottle_size_ml, customer_type='retail', config=None):
    """
    Price a mixed refill.

    ``scents`` is a list of ``(name, scent_id, available_ml)`` tuples; the
    last two may be None for scents that are not stock-tracked.
    """
    config = config or PricingConfig()
    if customer_type not in ('retail', 'wholesale'):
        raise PerfumeError('Customer type must be retail or wholesale')
    try:
        bottle_size_ml = int(bottle_size_ml)
    except (TypeError, ValueError):
        raise PerfumeError('Select a bottle size')
    if bottle_size_ml <= 0:
        raise PerfumeError('Select a bottle size')
    if not scents:
        raise PerfumeError('Add at least one scent')
    if len(scents) > MAX_SCENTS_PER_BOTTLE:
        raise PerfumeError(f'A bottle can mix at most {MAX_SCENTS_PER_BOTTLE} scents')
    names = [name.strip() for name, _, _ in scents]
    if len({n.lower() for n in names}) != len(names):
        raise PerfumeError('Each scent can only be added once')

    ml_per_scent = round_1dp(Decimal(bottle_size_ml) / len(scents))
    portions = []
    low, insufficient = [], []
    for (name, scent_id, available), clean_name in zip(scents, names):
        available = _dec(available) if available is not None else None
        portions.append(ScentPortion(name=clean_name, ml=ml_per_scent, scent_id=scent_id, available_ml=available))
        if available is None:
            continue
        if ml_per_scent > available:
            insufficient.append(f'{clean_name} (need {ml_per_scent}ml, have {available}ml)')
        elif available < LOW_STOCK_ML:
            low.append(f'{clean_name} only has {available}ml remaining')

    price_per_ml = config.price_per_ml(customer_type)
    mixture = MIXTURE_SEPARATOR.join(names)
    return RefillQuote(
        bottle_size_ml=bottle_size_ml,
        customer_type=customer_type,
        portions=portions,
        ml_per_scent=ml_per_scent,
        price=refill_price(bottle_size_ml, customer_type, config),
        price_per_ml=price_per_ml,
        base_price=bottle_size_ml * price_per_ml,
        bottle_cost=bottle_cost_for(bottle_size_ml, config.bottle_cost_ranges),
        scent_mixture=mixture,
        item_name=f'{mixture} ({bottle_size_ml}ml)',
        low_stock_warnings=low,
        insufficient=insufficient,
    )


def split_scent_mixture(mixture):
    """'Oud + Rose (30ml)' -> ['Oud', 'Rose']"""
    if not mixture:
        return []
    cleaned = ML_SUFFIX.sub('', mixture.strip())
    return [part.strip() for part in cleaned.split('+') if part.strip()]


def scent_popularity(mixtures, limit=5):
    """Most used scents across sold mixtures as (name, count) pairs"""
    counter = Counter()
    for mixture in mixtures:
        counter.update(split_scent_mixture(mixture))
    return counter.most_common(limit)
