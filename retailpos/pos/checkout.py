"""
Checkout and void.

Both run inside a single transaction: catalog rows and scents are locked
while the cart is priced and checked, so two tills cannot sell the same
last unit. A failure anywhere rolls back the sale, its items, the stock
movements and the credit ledger entry together.
"""
import logging
import re
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from retailpos.catalog.models import Product, ProductVariant, Service
from retailpos.inventory.stock import (
    InsufficientStockError, ScentDraw, StockLine, find_shortages, reduce_stock, restore_stock
)
from retailpos.parties.ledger import LedgerError, record_credit_transaction
from retailpos.parties.models import Customer
from retailpos.perfume.pricing import PerfumeError, quote_refill
from retailpos.perfume.services import find_scent, pricing_config_for
from .models import DocumentSequence, Sale, SaleItem

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')
RECEIPT_PREFIX = 'RCP-'
INVOICE_PREFIX = 'INV-'


class SaleError(Exception):
    """Checkout or void refused for a business reason"""


def _money(value):
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _seed_sequence(name, prefix):
    """Highest number already issued, for sequences created after sales exist"""
    field_name = 'receipt_number' if name == 'receipt' else 'invoice_number'
    pattern = re.compile(rf'^{re.escape(prefix)}(\d+)$')
    highest = 0
    for value in Sale.objects.filter(**{f'{field_name}__startswith': prefix}).values_list(field_name, flat=True):
        match = pattern.match(value or '')
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def next_document_number(name, prefix):
    """Next number of a sequence, formatted like RCP-000001"""
    with transaction.atomic():
        sequence, created = DocumentSequence.objects.select_for_update().get_or_create(name=name)
        if created:
            sequence.last_value = _seed_sequence(name, prefix)
        sequence.last_value += 1
        sequence.save(update_fields=['last_value'])
    return f"{prefix}{sequence.last_value:06d}"


def generate_sale_number():
    return f"SALE-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"


@dataclass
class PricedLine:
    item_type: str
    name: str
    quantity: int
    unit_price: Decimal
    product: Optional[Product] = None
    variant: Optional[ProductVariant] = None
    service: Optional[Service] = None
    customer_type: Optional[str] = None
    scent_mixture: Optional[str] = None
    ml_amount: Optional[Decimal] = None
    price_per_ml: Optional[Decimal] = None
    bottle_cost: Optional[Decimal] = None
    selected_scents: List[dict] = field(default_factory=list)
    stock_line: Optional[StockLine] = None

    @property
    def total(self):
        return _money(self.unit_price * self.quantity)

    def to_sale_item(self, sale):
        return SaleItem(
            sale=sale,
            item_type=self.item_type,
            product=self.product,
            variant=self.variant,
            service=self.service,
            name=self.name[:255],
            quantity=self.quantity,
            unit_price=_money(self.unit_price),
            total=self.total,
            customer_type=self.customer_type,
            scent_mixture=self.scent_mixture,
            ml_amount=self.ml_amount,
            price_per_ml=self.price_per_ml,
            bottle_cost=self.bottle_cost,
            selected_scents=self.selected_scents,
        )


def _check_price_bounds(product, price):
    if product.min_price is not None and price < product.min_price:
        raise SaleError(f"{product.name}: price {price} is below the minimum of {product.min_price}")
    if product.max_price is not None and price > product.max_price:
        raise SaleError(f"{product.name}: price {price} is above the maximum of {product.max_price}")


def _check_price_override(product, price, default_price, user):
    if price == default_price or product.allow_custom_price:
        return
    if user is not None and user.is_admin:
        return
    raise SaleError(f"{product.name}: the price cannot be changed at the till")


def _default_product_price(product, customer_type, ml_amount):
    wholesale = customer_type == 'wholesale'
    if product.is_ml_tracked and ml_amount:
        per_ml = product.wholesale_price_per_ml if wholesale else product.retail_price_per_ml
        if per_ml:
            return _money(per_ml * ml_amount)
    if wholesale and product.wholesale_price:
        return product.wholesale_price
    return product.effective_price


def _price_refill(item, department_id):
    selections = []
    resolved = []
    for entry in item.get('selected_scents') or []:
        scent = find_scent(department_id, scent_id=entry.get('scent_id'), name=entry.get('scent'), for_update=True)
        if scent is None and not entry.get('scent'):
            raise SaleError(f"Scent {entry.get('scent_id')} not found")
        name = scent.name if scent else entry['scent']
        selections.append((name, scent.id if scent else None, scent.stock_ml if scent else None))
        resolved.append(scent)

    try:
        quote = quote_refill(
            selections, item.get('ml_amount'), item.get('customer_type') or 'retail',
            pricing_config_for(department_id)
        )
    except PerfumeError as e:
        raise SaleError(str(e))

    draws = [ScentDraw(scent=scent, name=portion.name, ml=portion.ml)
             for scent, portion in zip(resolved, quote.portions)]
    return PricedLine(
        item_type='perfume_refill',
        name=item.get('name') or quote.item_name,
        quantity=item['quantity'],
        unit_price=quote.price,
        customer_type=quote.customer_type,
        scent_mixture=quote.scent_mixture,
        ml_amount=Decimal(quote.bottle_size_ml),
        price_per_ml=quote.price_per_ml,
        bottle_cost=quote.bottle_cost,
        selected_scents=[
            {'scent_id': p.scent_id, 'scent': p.name, 'ml': str(p.ml)} for p in quote.portions
        ],
        stock_line=StockLine(name=quote.item_name, quantity=item['quantity'], scents=draws),
    )


def price_item(item, department_id, user=None):
    """
    Resolve one validated cart item against the catalog, locking the rows it will touch.

    A client-sent unit price replaces the catalog price only for products that
    allow custom prices, negotiable services and admins.
    """
    quantity = item['quantity']
    given_price = item.get('unit_price')
    customer_type = item.get('customer_type')
    item_type = item.get('type') or 'product'

    if item_type == 'perfume_refill' or item.get('selected_scents'):
        return _price_refill(item, department_id)

    if item.get('variant_id'):
        variant = (ProductVariant.objects.select_for_update().select_related('product')
                   .filter(pk=item['variant_id']).first())
        if variant is None or variant.product.department_id != department_id:
            raise SaleError(f"Variant {item['variant_id']} not found in this department")
        product = variant.product
        default_price = variant.price or product.effective_price
        price = given_price if given_price is not None else default_price
        _check_price_override(product, price, default_price, user)
        _check_price_bounds(product, price)
        name = item.get('name') or f"{product.name} - {variant.variant_name or variant.name}"
        return PricedLine(
            item_type='product', name=name, quantity=quantity, unit_price=price,
            product=product, variant=variant, customer_type=customer_type,
            stock_line=StockLine(name=name, quantity=quantity, product=product, variant=variant),
        )

    if item.get('product_id'):
        product = Product.objects.select_for_update().filter(pk=item['product_id']).first()
        if product is None or product.department_id != department_id:
            raise SaleError(f"Product {item['product_id']} not found in this department")
        if product.is_archived or not product.is_active:
            raise SaleError(f"{product.name} is not available for sale")
        ml_amount = item.get('ml_amount') if product.is_ml_tracked else None
        default_price = _default_product_price(product, customer_type, ml_amount)
        price = given_price if given_price is not None else default_price
        _check_price_override(product, price, default_price, user)
        _check_price_bounds(product, price)
        name = item.get('name') or product.name
        return PricedLine(
            item_type='product', name=name, quantity=quantity, unit_price=price,
            product=product, customer_type=customer_type, ml_amount=ml_amount,
            stock_line=StockLine(name=name, quantity=quantity, product=product, ml_amount=ml_amount),
        )

    if item.get('service_id'):
        service = Service.objects.filter(pk=item['service_id'], department_id=department_id).first()
        if service is None:
            raise SaleError(f"Service {item['service_id']} not found in this department")
        if given_price is not None and service.is_negotiable:
            price = given_price
        else:
            price = service.price
        return PricedLine(item_type='service', name=item.get('name') or service.name,
                          quantity=quantity, unit_price=price, service=service)

    if not item.get('name') or given_price is None:
        raise SaleError('Custom items need a name and a unit price')
    return PricedLine(item_type='custom', name=item['name'], quantity=quantity, unit_price=given_price)


def checkout(data, user, department_id):
    """
    Create a completed sale from validated checkout data.

    Credit sales (and loans) need a customer; the unpaid part of the total
    is charged to the customer's ledger. Other payment methods must cover
    the total and get change back.
    """
    payment_method = data.get('payment_method', 'cash')
    is_loan = data.get('is_loan', False)
    discount = _money(data.get('discount') or 0)
    tax = _money(data.get('tax') or 0)

    with transaction.atomic():
        lines = [price_item(item, department_id, user) for item in data['items']]
        problems = find_shortages([line.stock_line for line in lines if line.stock_line])
        if problems:
            raise InsufficientStockError(problems)

        subtotal = sum((line.total for line in lines), ZERO)
        if discount > subtotal:
            raise SaleError('Discount cannot exceed the subtotal')
        total = subtotal - discount + tax

        customer = None
        if data.get('customer'):
            customer = Customer.objects.filter(pk=data['customer']).first()
            if customer is None or customer.department_id not in (None, department_id):
                raise SaleError('Customer not found in this department')

        on_account = payment_method == 'credit' or is_loan
        if on_account:
            if customer is None:
                raise SaleError('A customer is required for credit sales')
            amount_paid = _money(data['amount_paid']) if data.get('amount_paid') is not None else ZERO
            amount_paid = min(amount_paid, total)
            charge = total - amount_paid
            if customer.credit_limit > 0 and charge > customer.available_credit:
                raise SaleError(
                    f"Credit limit exceeded: {customer.name} has {customer.available_credit} available"
                )
            change = ZERO
        else:
            amount_paid = _money(data['amount_paid']) if data.get('amount_paid') is not None else total
            if amount_paid < total:
                raise SaleError('Amount paid is less than the total')
            charge = ZERO
            change = amount_paid - total

        receipt_number = next_document_number('receipt', RECEIPT_PREFIX)
        invoice_number = next_document_number('invoice', INVOICE_PREFIX) if data.get('is_invoice') else None

        sale = Sale.objects.create(
            sale_number=generate_sale_number(),
            receipt_number=receipt_number,
            department_id=department_id,
            customer=customer,
            cashier=user,
            cashier_name=user.display_name,
            payment_method=payment_method,
            subtotal=subtotal,
            discount=discount,
            tax=tax,
            total=total,
            amount_paid=amount_paid,
            change_amount=change,
            status='completed',
            is_invoice=bool(data.get('is_invoice')),
            invoice_number=invoice_number,
            is_loan=is_loan,
            notes=data.get('notes'),
            remarks=data.get('remarks'),
        )
        for line in lines:
            line.to_sale_item(sale).save()

        reduce_stock([line.stock_line for line in lines if line.stock_line], department_id)

        if charge > 0:
            try:
                record_credit_transaction(
                    customer, 'charge', charge, user=user, sale=sale, department=sale.department,
                    notes=f"Credit sale {receipt_number}"
                )
            except LedgerError as e:
                raise SaleError(str(e))

    logger.info(f"Sale {sale.receipt_number} completed by {user.username}: total={total} method={payment_method}")
    return sale


def void_sale(sale, user, reason):
    """Void a completed sale: stock goes back on the shelf and any credit charge is reversed"""
    if not reason or not str(reason).strip():
        raise SaleError('A reason is required to void a sale')

    with transaction.atomic():
        locked = Sale.objects.select_for_update().get(pk=sale.pk)
        if locked.status == 'voided':
            raise SaleError('Sale is already voided')

        restore_stock(locked)

        # Reverse against whoever the ledger charged, not the sale's current customer
        charged = {}
        for entry in locked.credit_transactions.filter(transaction_type='charge').select_related('customer'):
            total, _ = charged.get(entry.customer_id, (ZERO, entry.customer))
            charged[entry.customer_id] = (total + entry.amount, entry.customer)
        for amount, customer in charged.values():
            if amount > 0:
                record_credit_transaction(
                    customer, 'adjustment', -amount, user=user, sale=locked,
                    department=locked.department, notes=f"Void of {locked.receipt_number}"
                )

        locked.status = 'voided'
        locked.void_reason = str(reason).strip()
        locked.voided_at = timezone.now()
        locked.voided_by = user
        locked.save()

    logger.info(f"Sale {locked.receipt_number} voided by {user.username}: {locked.void_reason}")
    return locked


def reorder_cart(sale):
    """Cart lines that repeat a past sale, ready to post back to checkout"""
    cart = []
    for item in sale.items.all():
        line = {'type': item.item_type, 'name': item.name, 'quantity': item.quantity}
        if item.item_type == 'perfume_refill':
            line.update({
                'customer_type': item.customer_type or 'retail',
                'ml_amount': str(item.ml_amount) if item.ml_amount is not None else None,
                'selected_scents': [
                    {'scent_id': s.get('scent_id'), 'scent': s.get('scent')} for s in item.selected_scents
                ],
            })
        elif item.variant_id:
            line['variant_id'] = item.variant_id
        elif item.product_id:
            line['product_id'] = item.product_id
            if item.ml_amount is not None:
                line['ml_amount'] = str(item.ml_amount)
        elif item.service_id:
            line['service_id'] = item.service_id
        else:
            line['unit_price'] = str(item.unit_price)
        cart.append(line)
    return cart
