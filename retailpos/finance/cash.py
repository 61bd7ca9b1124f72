"""
Cash control: reconciliation against recorded cash sales and the cash
drawer shift lifecycle.
"""
import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from retailpos.pos.models import Sale
from .models import Reconciliation, SuspendedRevenue, CashDrawerShift, CurrencyCashCount, ClosingChecklist

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
DEFAULT_CURRENCIES = [
    {'code': 'UGX', 'name': 'Ugandan Shillings', 'rate': Decimal('1')},
    {'code': 'USD', 'name': 'US Dollars', 'rate': Decimal('3750')},
    {'code': 'KES', 'name': 'Kenyan Shillings', 'rate': Decimal('29')},
]


class CashError(ValueError):
    """Cash operation that is not allowed in the current state"""


def cash_sales_total(department_id, date=None, since=None):
    """Completed cash sales of a department on a day, or since a moment"""
    sales = Sale.objects.filter(department_id=department_id, payment_method='cash', status='completed')
    if date is not None:
        sales = sales.filter(created_at__date=date)
    if since is not None:
        sales = sales.filter(created_at__gte=since)
    return sales.aggregate(total=Sum('total'))['total'] or ZERO


def reconcile(department_id, date, cashier_name, reported_cash, notes=None, user=None):
    """
    Record a day's cash count.

    A surplus is filed as pending suspended revenue; a shortage leaves the
    reconciliation pending for a manager to look at.
    """
    reported_cash = Decimal(str(reported_cash))
    if reported_cash < 0:
        raise CashError('Reported cash cannot be negative')

    with transaction.atomic():
        system_cash = cash_sales_total(department_id, date=date)
        discrepancy = reported_cash - system_cash
        reconciliation = Reconciliation.objects.create(
            department_id=department_id,
            cashier_name=cashier_name,
            date=date,
            system_cash=system_cash,
            reported_cash=reported_cash,
            discrepancy=discrepancy,
            status='completed' if discrepancy == 0 else 'pending',
            notes=notes,
            created_by=user,
        )
        if discrepancy > 0:
            SuspendedRevenue.objects.create(
                department_id=department_id,
                reconciliation=reconciliation,
                cashier_name=cashier_name,
                date=date,
                amount=discrepancy,
                reason=f"Surplus from reconciliation on {date.isoformat()}",
                status='pending',
            )
            logger.info(f"Surplus of {discrepancy} from {cashier_name} on {date} moved to suspended revenue")
    return reconciliation


def current_shift(department_id):
    return CashDrawerShift.objects.filter(department_id=department_id, status='open').first()


def expected_cash(shift):
    """Opening float plus completed cash sales since the drawer opened"""
    return shift.opening_float + cash_sales_total(shift.department_id, since=shift.opened_at)


def open_shift(department_id, opening_float, user=None, notes=None):
    opening_float = Decimal(str(opening_float or 0))
    if opening_float < 0:
        raise CashError('Opening float cannot be negative')
    if current_shift(department_id) is not None:
        raise CashError('A cash drawer shift is already open for this department')
    try:
        with transaction.atomic():
            return CashDrawerShift.objects.create(
                department_id=department_id,
                opened_by=user,
                opening_float=opening_float,
                notes=notes,
            )
    except IntegrityError:
        raise CashError('A cash drawer shift is already open for this department')


def count_currencies(counts, currencies=None):
    """
    ``counts`` maps a currency code to the amount counted in that currency.
    Returns ``(total_in_base, rows)``; unknown codes are refused.
    """
    rates = {c['code']: Decimal(str(c['rate'])) for c in (currencies or DEFAULT_CURRENCIES)}
    total = ZERO
    rows = []
    for code, amount in (counts or {}).items():
        if code not in rates:
            raise CashError(f'Unknown currency: {code}')
        amount = Decimal(str(amount or 0))
        if amount < 0:
            raise CashError(f'Counted amount for {code} cannot be negative')
        in_base = amount * rates[code]
        total += in_base
        rows.append({'currency': code, 'amount': amount, 'exchange_rate': rates[code], 'amount_in_base': in_base})
    return total, rows


def close_shift(shift, user=None, closing_cash=None, currency_counts=None, checklist=None, currencies=None):
    """
    Close an open drawer.

    The counted cash is the sum of the per-currency counts when given,
    otherwise ``closing_cash``. The checklist must confirm the cash was
    counted and verified, and any discrepancy must be explained.
    """
    checklist = checklist or {}
    with transaction.atomic():
        shift = CashDrawerShift.objects.select_for_update().get(pk=shift.pk)
        if shift.status != 'open':
            raise CashError('This shift is already closed')

        if currency_counts:
            counted, rows = count_currencies(currency_counts, currencies)
        elif closing_cash is not None:
            counted, rows = Decimal(str(closing_cash)), []
        else:
            raise CashError('Enter the closing cash or the currency counts')

        expected = expected_cash(shift)
        discrepancy = counted - expected
        if not (checklist.get('cash_counted') and checklist.get('cash_verified')):
            raise CashError('Confirm the cash was counted and verified before closing')
        explained = bool(checklist.get('discrepancy_explained')) or discrepancy == 0
        if not explained:
            raise CashError('Explain the discrepancy before closing')

        shift.closing_cash = counted
        shift.expected_cash = expected
        shift.discrepancy = discrepancy
        shift.status = 'closed'
        shift.closed_by = user
        shift.closed_at = timezone.now()
        shift.save()

        CurrencyCashCount.objects.bulk_create([CurrencyCashCount(shift=shift, **row) for row in rows])
        ClosingChecklist.objects.create(
            shift=shift,
            department_id=shift.department_id,
            completed_by=user,
            cash_counted=True,
            cash_verified=True,
            discrepancy_explained=explained,
            notes=checklist.get('notes') or None,
        )

    logger.info(f"Shift {shift.id} closed: expected {expected}, counted {counted}, discrepancy {discrepancy}")
    return shift
