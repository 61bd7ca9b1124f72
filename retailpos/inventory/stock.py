"""
Stock movements for products, variants and perfume scents.

Decrements run as single UPDATE statements clamped at zero so concurrent
tills never drive a counter negative. Bulk ``update()`` calls skip the
model signals, so the inventory topics are invalidated explicitly.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.db.models import Count, DecimalField, F, Q, Value
from django.db.models.functions import Greatest

from retailpos.catalog.models import Product, ProductVariant
from retailpos.core.realtime import INVENTORY_TOPICS, invalidate_topics
from retailpos.perfume.models import Scent
from retailpos.perfume.services import find_scent

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
PERFUME_TOPICS = ('perfume-stock', 'perfume-scents')


class StockError(Exception):
    """Stock operation that cannot be carried out"""


class InsufficientStockError(StockError):
    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__('; '.join(self.problems))


@dataclass
class ScentDraw:
    scent: Optional[Scent]
    name: str
    ml: Decimal


@dataclass
class StockLine:
    """One resolved cart line as far as stock is concerned"""
    name: str
    quantity: int = 1
    product: Optional[Product] = None
    variant: Optional[ProductVariant] = None
    ml_amount: Optional[Decimal] = None
    scents: List[ScentDraw] = field(default_factory=list)

    @property
    def ml_to_deduct(self):
        """ml-tracked products sell ``ml_amount`` per unit, or one ml per unit without it"""
        if self.ml_amount:
            return Decimal(str(self.ml_amount)) * self.quantity
        return Decimal(self.quantity)


def check_stock_availability(product, quantity, tracking_type=None, ml_amount=None):
    """
    Returns ``(ok, available)``. ml-tracked products are compared against
    total_ml, everything else against the unit stock.
    """
    tracking_type = tracking_type or product.tracking_type
    if tracking_type == 'ml':
        needed = Decimal(str(ml_amount)) * quantity if ml_amount else Decimal(quantity)
        available = product.total_ml or ZERO
        return available >= needed, available
    available = product.stock or 0
    return available >= quantity, available


def check_variant_stock_availability(variant, quantity):
    available = variant.stock or 0
    return available >= quantity, available


def find_shortages(lines):
    """Human readable problems for every line the shelf cannot cover"""
    problems = []
    scent_needs = {}
    for line in lines:
        if line.variant is not None:
            ok, available = check_variant_stock_availability(line.variant, line.quantity)
            if not ok:
                problems.append(f"{line.name}: only {available} in stock")
        elif line.scents:
            for draw in line.scents:
                if draw.scent is None:
                    continue
                key = draw.scent.pk
                needed, scent = scent_needs.get(key, (ZERO, draw.scent))
                scent_needs[key] = (needed + draw.ml * line.quantity, scent)
        elif line.product is not None:
            ok, available = check_stock_availability(line.product, line.quantity, ml_amount=line.ml_amount)
            if not ok:
                unit = 'ml' if line.product.is_ml_tracked else ''
                problems.append(f"{line.name}: only {available}{unit} in stock")

    for needed, scent in scent_needs.values():
        if needed > scent.stock_ml:
            problems.append(f"{scent.name}: need {needed}ml, have {scent.stock_ml}ml")
    return problems


def _decrement(model, pk, field_name, amount):
    if field_name == 'stock':
        expression = Greatest(F(field_name) - amount, Value(0))
    else:
        expression = Greatest(
            F(field_name) - Value(amount), Value(ZERO),
            output_field=DecimalField(max_digits=12, decimal_places=2)
        )
    model.objects.filter(pk=pk).update(**{field_name: expression})


def _increment(model, pk, field_name, amount):
    model.objects.filter(pk=pk).update(**{field_name: F(field_name) + amount})


def _invalidate_after_commit(perfume=False):
    topics = INVENTORY_TOPICS + (PERFUME_TOPICS if perfume else ())
    transaction.on_commit(lambda: invalidate_topics(topics))


def reduce_stock(lines, department_id):
    """
    Deduct stock for sold lines.

    Variants reduce variant stock, refills reduce each drawn scent,
    ml products reduce total_ml, quantity products reduce stock. Lines
    without a product or variant (services, custom items) are skipped.
    """
    touched_scents = False
    with transaction.atomic():
        for line in lines:
            if line.variant is not None:
                _decrement(ProductVariant, line.variant.pk, 'stock', line.quantity)
            elif line.scents:
                for draw in line.scents:
                    scent = draw.scent or find_scent(department_id, name=draw.name)
                    if scent is None:
                        logger.warning(f"Scent '{draw.name}' not found in department {department_id}, stock not reduced")
                        continue
                    _decrement(Scent, scent.pk, 'stock_ml', draw.ml * line.quantity)
                    touched_scents = True
            elif line.product is not None:
                if line.product.is_ml_tracked:
                    _decrement(Product, line.product.pk, 'total_ml', line.ml_to_deduct)
                else:
                    _decrement(Product, line.product.pk, 'stock', line.quantity)
        _invalidate_after_commit(perfume=touched_scents)


def restore_stock(sale):
    """Put back everything a sale took off the shelf"""
    touched_scents = False
    with transaction.atomic():
        for item in sale.items.select_related('product', 'variant'):
            if item.variant_id:
                _increment(ProductVariant, item.variant_id, 'stock', item.quantity)
            elif item.selected_scents:
                for entry in item.selected_scents:
                    scent = find_scent(sale.department_id, scent_id=entry.get('scent_id'), name=entry.get('scent'))
                    if scent is None:
                        continue
                    _increment(Scent, scent.pk, 'stock_ml', Decimal(str(entry.get('ml') or 0)) * item.quantity)
                    touched_scents = True
            elif item.product_id:
                if item.product.is_ml_tracked:
                    ml = Decimal(str(item.ml_amount)) * item.quantity if item.ml_amount else Decimal(item.quantity)
                    _increment(Product, item.product_id, 'total_ml', ml)
                else:
                    _increment(Product, item.product_id, 'stock', item.quantity)
        _invalidate_after_commit(perfume=touched_scents)
    logger.info(f"Stock restored for sale {sale.id}")


def apply_adjustment(product, adjustment_type, quantity, variant=None):
    """
    Manual stock in/out. Returns the new level, clamped at zero for
    outgoing corrections larger than what is on hand.
    """
    if quantity <= 0:
        raise StockError('Quantity must be greater than zero')
    if adjustment_type not in ('in', 'out'):
        raise StockError('Adjustment type must be "in" or "out"')

    if variant is not None:
        target, field_name, amount = variant, 'stock', int(quantity)
    elif product.is_ml_tracked:
        target, field_name, amount = product, 'total_ml', Decimal(str(quantity))
    else:
        target, field_name, amount = product, 'stock', int(quantity)

    with transaction.atomic():
        if adjustment_type == 'in':
            _increment(type(target), target.pk, field_name, amount)
        else:
            _decrement(type(target), target.pk, field_name, amount)
        _invalidate_after_commit()
    target.refresh_from_db(fields=[field_name])
    return getattr(target, field_name)


def low_stock_products(queryset):
    """
    Unit-tracked products without variants at or below their threshold
    (min_stock, or 5 when unset).
    """
    return (
        queryset.filter(tracking_type='quantity', is_active=True, is_archived=False)
        .annotate(variant_count=Count('variants'))
        .filter(variant_count=0)
        .filter(Q(min_stock__gt=0, stock__lte=F('min_stock')) | Q(min_stock__lte=0, stock__lte=5))
    )


def low_stock_alerts(queryset):
    """Split low-stock products into critical (out of stock) and low"""
    critical, low = [], []
    for product in low_stock_products(queryset).order_by('stock', 'name'):
        entry = {
            'id': product.id,
            'name': product.name,
            'sku': product.sku,
            'stock': product.stock,
            'min_stock': product.low_stock_threshold,
            'department': product.department_id,
        }
        (critical if product.stock <= 0 else low).append(entry)
    return {'critical': critical, 'low': low, 'count': len(critical) + len(low)}
