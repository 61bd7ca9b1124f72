"""
Admin financial report.

Figures are computed per active department over a reporting period and
rolled up into an income statement, a balance sheet and a cash flow
summary. Cost of goods sold is estimated at 60% of revenue; stock is
valued at cost price, or 60% of the selling price when no cost is set.
"""
import calendar
import logging
from collections import OrderedDict
from datetime import date, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from retailpos.catalog.models import Product
from retailpos.departments.models import Department
from retailpos.finance.models import Credit, Expense, Reconciliation
from retailpos.inventory.stock import low_stock_products
from retailpos.parties.models import Customer
from retailpos.pos.models import Sale, SaleItem

logger = logging.getLogger('retailpos.reports')

ZERO = Decimal('0.00')
COGS_RATIO = Decimal('0.6')
PERIODS = ('current', 'previous', 'ytd', 'daily', 'weekly')
PAYMENT_METHODS = ('cash', 'credit', 'mobile_money', 'card')
REPORT_HOURS_UTC = range(5, 8)


class ReportError(Exception):
    """Report that cannot be produced or delivered"""


def resolve_period(period, today=None):
    """
    Turn a period name into ``(start, end, label)`` with inclusive dates.

    current  - this calendar month
    previous - last calendar month
    ytd      - 1 January to today
    daily    - yesterday
    weekly   - the seven days before today
    """
    today = today or timezone.localdate()
    period = period or 'current'
    if period not in PERIODS:
        raise ReportError(f"Unknown report period: {period}")

    if period == 'previous':
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
        label = start.strftime('%B %Y')
    elif period == 'ytd':
        start, end = date(today.year, 1, 1), today
        label = f"Year to Date ({today.year})"
    elif period == 'daily':
        start = end = today - timedelta(days=1)
        label = start.strftime('%A, %B %d, %Y')
    elif period == 'weekly':
        start, end = today - timedelta(days=7), today - timedelta(days=1)
        label = f"Week of {start.strftime('%b %d')} - {end.strftime('%b %d, %Y')}"
    else:
        start = today.replace(day=1)
        end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
        label = start.strftime('%B %Y')
    return start, end, label


def should_send_scheduled_report(frequency, last_sent_at=None, now=None):
    """
    Whether a scheduled run should send now, and for which period.

    Reports only go out between 05:00 and 07:59 UTC and at most once per
    day. Daily reports send every day, weekly ones on Monday, monthly ones
    on the 1st covering the previous month.
    """
    now = now or timezone.now()
    utc_now = now.astimezone(dt_timezone.utc) if timezone.is_aware(now) else now
    if utc_now.hour not in REPORT_HOURS_UTC:
        return False, 'current'

    if last_sent_at:
        if isinstance(last_sent_at, str):
            last_sent_at = _parse_timestamp(last_sent_at)
        if last_sent_at is not None:
            last_utc = last_sent_at.astimezone(dt_timezone.utc) if timezone.is_aware(last_sent_at) else last_sent_at
            if last_utc.date() >= utc_now.date():
                return False, 'current'

    if frequency == 'daily':
        return True, 'current'
    if frequency == 'weekly':
        return utc_now.weekday() == 0, 'current'
    if frequency == 'monthly':
        if utc_now.day == 1:
            return True, 'previous'
        return False, 'current'
    return False, 'current'


def _parse_timestamp(value):
    try:
        return parse_datetime(value)
    except ValueError:
        logger.warning(f"Ignoring unreadable last_report_sent_at: {value}")
        return None


def _f(value):
    return float(value or 0)


def department_type(department):
    if department.is_mobile_money:
        return 'Mobile Money'
    if department.is_perfume_department:
        return 'Perfume'
    return 'Regular'


def inventory_value(products):
    return sum((Decimal(p.stock or 0) * p.unit_cost for p in products), ZERO)


def _method_totals(sales):
    rows = sales.order_by().values('payment_method').annotate(total=Sum('total'))
    totals = {method: ZERO for method in PAYMENT_METHODS}
    for row in rows:
        totals[row['payment_method']] = row['total'] or ZERO
    return totals


def department_financials(department, sales, expenses):
    """Figures for one department; ``sales`` and ``expenses`` are already period-filtered"""
    dept_sales = sales.filter(department=department)
    dept_expenses = expenses.filter(department=department)
    products = list(Product.objects.filter(department=department, is_archived=False))

    by_method = _method_totals(dept_sales)
    revenue = sum(by_method.values(), ZERO)
    expense_total = dept_expenses.aggregate(total=Sum('amount'))['total'] or ZERO
    cogs = revenue * COGS_RATIO
    receivables = Customer.objects.filter(department=department).aggregate(
        total=Sum('outstanding_balance')
    )['total'] or ZERO

    top_items = (
        SaleItem.objects.filter(sale__in=dept_sales)
        .order_by()
        .values('name')
        .annotate(quantity=Sum('quantity'), revenue=Sum('total'))
        .order_by('-revenue')[:5]
    )
    low_stock = low_stock_products(Product.objects.filter(department=department)).order_by('stock')[:5]

    return {
        'id': department.id,
        'name': department.name,
        'type': department_type(department),
        'revenue': _f(revenue),
        'cash_sales': _f(by_method['cash']),
        'credit_sales': _f(by_method['credit']),
        'mobile_money_sales': _f(by_method['mobile_money']),
        'card_sales': _f(by_method['card']),
        'cogs': _f(cogs),
        'gross_profit': _f(revenue - cogs),
        'expenses': _f(expense_total),
        'net_income': _f(revenue - cogs - expense_total),
        'inventory': _f(inventory_value(products)),
        'receivables': _f(receivables),
        'sales_count': dept_sales.count(),
        'top_items': [
            {'name': row['name'], 'quantity': row['quantity'], 'revenue': _f(row['revenue'])} for row in top_items
        ],
        'low_stock_items': [f"{p.name} ({p.stock})" for p in low_stock],
    }


def _open_credit_balance(credits):
    total = ZERO
    for amount, paid in credits.values_list('amount', 'paid_amount'):
        total += amount - (paid or ZERO)
    return total


def build_admin_report(period='current', today=None):
    """Everything the admin report shows, as JSON-ready values"""
    start, end, label = resolve_period(period, today)
    sales = Sale.objects.filter(created_at__date__gte=start, created_at__date__lte=end).exclude(status='voided')
    expenses = Expense.objects.filter(expense_date__gte=start, expense_date__lte=end).exclude(status='rejected')

    departments = [
        department_financials(department, sales, expenses)
        for department in Department.objects.filter(is_active=True).order_by('name')
    ]
    active_departments = [d for d in departments if d['revenue'] > 0 or d['expenses'] > 0 or d['inventory'] > 0]

    # Income statement
    by_method = _method_totals(sales)
    total_revenue = sum(by_method.values(), ZERO)
    total_cogs = total_revenue * COGS_RATIO
    gross_profit = total_revenue - total_cogs
    total_expenses = expenses.aggregate(total=Sum('amount'))['total'] or ZERO
    net_income = gross_profit - total_expenses
    expenses_by_category = OrderedDict()
    for row in expenses.order_by().values('category').annotate(total=Sum('amount')).order_by('-total'):
        category = row['category'] or 'Other'
        expenses_by_category[category] = expenses_by_category.get(category, 0) + _f(row['total'])

    # Balance sheet
    latest = Reconciliation.objects.order_by('-date', '-created_at').first()
    cash_on_hand = latest.reported_cash if latest else ZERO
    digital_receipts = by_method['mobile_money'] + by_method['card']
    stock_value = inventory_value(Product.objects.filter(is_archived=False))
    accounts_receivable = Customer.objects.aggregate(total=Sum('outstanding_balance'))['total'] or ZERO
    open_credits = Credit.objects.exclude(status__in=('settled', 'rejected')).exclude(settlement_status='settled')
    credits_receivable = _open_credit_balance(open_credits.filter(transaction_type__in=('interdepartmental', 'external_out')))
    credits_payable = _open_credit_balance(open_credits.filter(transaction_type='external_in'))
    total_current_assets = cash_on_hand + digital_receipts + accounts_receivable + stock_value + credits_receivable

    # Cash flow
    operating_cash_flow = by_method['cash'] - total_expenses
    financing_cash_flow = credits_receivable - credits_payable

    sales_count = sales.count()
    logger.info(f"Admin report built for {label}: revenue {total_revenue}, net income {net_income}")
    return {
        'period': period,
        'period_label': label,
        'start_date': start.isoformat(),
        'end_date': end.isoformat(),
        'generated_at': timezone.now().isoformat(),
        'summary': {
            'total_revenue': _f(total_revenue),
            'transactions': sales_count,
            'total_expenses': _f(total_expenses),
            'expense_records': expenses.count(),
            'gross_profit': _f(gross_profit),
            'net_income': _f(net_income),
            'gross_margin': round(_f(gross_profit) / _f(total_revenue) * 100, 1) if total_revenue else 0.0,
            'net_margin': round(_f(net_income) / _f(total_revenue) * 100, 1) if total_revenue else 0.0,
            'department_count': len(active_departments),
        },
        'departments': active_departments,
        'income_statement': {
            'revenue': _f(total_revenue),
            'cash_sales': _f(by_method['cash']),
            'credit_sales': _f(by_method['credit']),
            'mobile_money_sales': _f(by_method['mobile_money']),
            'card_sales': _f(by_method['card']),
            'cogs': _f(total_cogs),
            'gross_profit': _f(gross_profit),
            'expenses': _f(total_expenses),
            'expenses_by_category': dict(expenses_by_category),
            'net_income': _f(net_income),
        },
        'balance_sheet': {
            'cash_on_hand': _f(cash_on_hand),
            'digital_receipts': _f(digital_receipts),
            'accounts_receivable': _f(accounts_receivable),
            'inventory': _f(stock_value),
            'credits_receivable': _f(credits_receivable),
            'total_current_assets': _f(total_current_assets),
            'credits_payable': _f(credits_payable),
            'total_liabilities': _f(credits_payable),
            'retained_earnings': _f(total_current_assets - credits_payable),
        },
        'cash_flow': {
            'operating': _f(operating_cash_flow),
            'financing': _f(financing_cash_flow),
            'net_change': _f(operating_cash_flow + financing_cash_flow),
        },
    }
