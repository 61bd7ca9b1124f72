import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDate
from django.http import HttpResponse
from django.utils import timezone

from retailpos.catalog.models import Product
from retailpos.core.cache_utils import cached_query, DASHBOARD_KPI_CACHE_TTL, REPORTS_CACHE_TTL
from retailpos.core.permissions import IsAdminRole
from retailpos.core.utils import resolve_department_id, parse_date_range
from retailpos.inventory.stock import low_stock_products
from retailpos.parties.models import Customer
from retailpos.pos.models import Sale, SaleItem
from .emails import render_admin_report_html, send_admin_report
from .financials import ReportError, build_admin_report

logger = logging.getLogger('retailpos.reports')


def _report_department(request):
    """
    ``(ok, department_id)``: admins without a department see every
    department, anyone else without one sees nothing.
    """
    department_id = resolve_department_id(request)
    if department_id is None and not request.user.is_admin:
        return False, None
    return True, department_id


def _for_department(queryset, department_id, field='department_id'):
    if department_id is None:
        return queryset
    return queryset.filter(**{field: department_id})


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix="dashboard_kpis",
              topics=('dashboard', 'today-sales', 'recent-sales', 'low-stock', 'total-products', 'total-customers'))
def get_dashboard_kpis(department_id, today_iso):
    sales = _for_department(Sale.objects.filter(status='completed'), department_id)
    today = sales.filter(created_at__date=today_iso).aggregate(total=Sum('total'), count=Count('id'))
    products = _for_department(Product.objects.filter(is_active=True, is_archived=False), department_id)
    recent = sales.select_related('customer').order_by('-created_at')[:5]

    return {
        'today_revenue': float(today['total'] or 0),
        'today_sales_count': today['count'],
        'recent_sales': [
            {
                'id': sale.id,
                'receipt_number': sale.receipt_number,
                'total': float(sale.total),
                'payment_method': sale.payment_method,
                'cashier_name': sale.cashier_name,
                'customer_name': sale.customer.name if sale.customer_id else None,
                'created_at': sale.created_at.isoformat(),
            }
            for sale in recent
        ],
        'low_stock_count': low_stock_products(products).count(),
        'total_products': products.count(),
        'total_customers': _for_department(Customer.objects.all(), department_id).count(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_kpis(request):
    """Headline figures for the dashboard, cached until sales or stock change"""
    ok, department_id = _report_department(request)
    if not ok:
        return Response({'error': 'No department assigned'}, status=status.HTTP_400_BAD_REQUEST)
    today = timezone.localdate().isoformat()
    data = get_dashboard_kpis(department_id, today)
    data['date'] = today
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_summary(request):
    """Sales summary report; voided sales are excluded"""
    ok, department_id = _report_department(request)
    if not ok:
        return Response({'error': 'No department assigned'}, status=status.HTTP_400_BAD_REQUEST)
    date_from, date_to = parse_date_range(request)

    sales = _for_department(Sale.objects.filter(
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
    ).exclude(status='voided'), department_id)
    totals = sales.aggregate(
        total=Sum('total'), count=Count('id'), average=Avg('total'), discount=Sum('discount')
    )
    items = SaleItem.objects.filter(sale__in=sales)

    by_payment_method = sales.order_by().values('payment_method').annotate(total=Sum('total'), count=Count('id'))
    daily_sales = sales.annotate(date=TruncDate('created_at')).order_by().values('date').annotate(
        total=Sum('total'), count=Count('id')
    ).order_by('date')
    top_items = items.order_by().values('name').annotate(
        quantity=Sum('quantity'), revenue=Sum('total')
    ).order_by('-revenue')[:10]
    by_cashier = sales.order_by().values('cashier_name').annotate(
        total=Sum('total'), count=Count('id')
    ).order_by('-total')

    return Response({
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'summary': {
            'total_sales': float(totals['total'] or 0),
            'total_transactions': totals['count'],
            'avg_order_value': float(totals['average'] or 0),
            'total_discount': float(totals['discount'] or 0),
            'total_items_sold': items.aggregate(total=Sum('quantity'))['total'] or 0,
        },
        'by_payment_method': [
            {'payment_method': row['payment_method'], 'total': float(row['total'] or 0), 'count': row['count']}
            for row in by_payment_method
        ],
        'daily_breakdown': [
            {'date': row['date'].isoformat(), 'total': float(row['total'] or 0), 'count': row['count']}
            for row in daily_sales
        ],
        'top_items': [
            {'name': row['name'], 'quantity': row['quantity'], 'revenue': float(row['revenue'] or 0)}
            for row in top_items
        ],
        'by_cashier': [
            {'cashier_name': row['cashier_name'] or 'Unknown', 'total': float(row['total'] or 0), 'count': row['count']}
            for row in by_cashier
        ],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_transactions(request):
    """Mobile money and card sales in a date range"""
    ok, department_id = _report_department(request)
    if not ok:
        return Response({'error': 'No department assigned'}, status=status.HTTP_400_BAD_REQUEST)
    date_from, date_to = parse_date_range(request)

    sales = _for_department(Sale.objects.filter(
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
        status='completed',
        payment_method__in=('mobile_money', 'card'),
    ), department_id).select_related('department')
    method = request.query_params.get('payment_method')
    if method in ('mobile_money', 'card'):
        sales = sales.filter(payment_method=method)

    summary = {}
    for key in ('mobile_money', 'card'):
        row = sales.filter(payment_method=key).aggregate(total=Sum('total'), count=Count('id'))
        summary[key] = {'total': float(row['total'] or 0), 'count': row['count']}
    summary['total'] = {
        'total': summary['mobile_money']['total'] + summary['card']['total'],
        'count': summary['mobile_money']['count'] + summary['card']['count'],
    }

    return Response({
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'summary': summary,
        'transactions': [
            {
                'id': sale.id,
                'receipt_number': sale.receipt_number,
                'payment_method': sale.payment_method,
                'total': float(sale.total),
                'department': sale.department.name,
                'cashier_name': sale.cashier_name,
                'created_at': sale.created_at.isoformat(),
            }
            for sale in sales.order_by('-created_at')[:200]
        ],
    })


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix="perfume_revenue", topics=('perfume-revenue', 'sales'))
def get_perfume_revenue(department_id, date_from_iso, date_to_iso):
    items = _for_department(SaleItem.objects.filter(
        item_type='perfume_refill',
        sale__created_at__date__gte=date_from_iso,
        sale__created_at__date__lte=date_to_iso,
    ).exclude(sale__status='voided'), department_id, field='sale__department_id')

    ml_sold = ExpressionWrapper(F('ml_amount') * F('quantity'), output_field=DecimalField(max_digits=14, decimal_places=2))
    bottle_costs = ExpressionWrapper(F('bottle_cost') * F('quantity'), output_field=DecimalField(max_digits=14, decimal_places=2))
    by_type = {
        row['customer_type']: row for row in items.order_by().values('customer_type').annotate(
            revenue=Sum('total'), count=Count('id'), ml=Sum(ml_sold)
        )
    }
    totals = items.aggregate(revenue=Sum('total'), ml=Sum(ml_sold), bottles=Sum(bottle_costs), count=Count('id'))
    daily = items.annotate(date=TruncDate('sale__created_at')).order_by().values('date').annotate(
        revenue=Sum('total'), count=Count('id')
    ).order_by('date')

    def _segment(key):
        row = by_type.get(key) or {}
        return {'revenue': float(row.get('revenue') or 0), 'count': row.get('count', 0), 'ml_sold': float(row.get('ml') or 0)}

    revenue = totals['revenue'] or Decimal('0')
    bottles = totals['bottles'] or Decimal('0')
    return {
        'total_revenue': float(revenue),
        'total_refills': totals['count'],
        'total_ml_sold': float(totals['ml'] or 0),
        'bottle_costs': float(bottles),
        'revenue_after_bottles': float(revenue - bottles),
        'retail': _segment('retail'),
        'wholesale': _segment('wholesale'),
        'daily_revenue': [
            {'date': row['date'].isoformat(), 'revenue': float(row['revenue'] or 0), 'count': row['count']}
            for row in daily
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def perfume_revenue(request):
    """Refill revenue split into retail and wholesale, with ml sold and bottle costs"""
    ok, department_id = _report_department(request)
    if not ok:
        return Response({'error': 'No department assigned'}, status=status.HTTP_400_BAD_REQUEST)
    date_from, date_to = parse_date_range(request)
    data = get_perfume_revenue(department_id, date_from.isoformat(), date_to.isoformat())
    data['period'] = {'from': date_from.isoformat(), 'to': date_to.isoformat()}
    return Response(data)


# Admin financial report
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_report(request):
    """Admin financial report as JSON (``?period=current|previous|ytd|daily|weekly``)"""
    try:
        report = build_admin_report(request.query_params.get('period', 'current'))
    except ReportError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(report)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_report_preview(request):
    """The report email as HTML"""
    try:
        report = build_admin_report(request.query_params.get('period', 'current'))
    except ReportError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return HttpResponse(render_admin_report_html(report), content_type='text/html; charset=utf-8')


@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_report_send(request):
    """
    Email the report now.

    Body: {"period": "current", "test_mode": false, "force": false}
    """
    test_mode = request.data.get('test_mode') in (True, 'true')
    force = request.data.get('force') in (True, 'true')
    logger.info(f"User {request.user.username} requested admin report (period={request.data.get('period')}, "
                f"test_mode={test_mode}, force={force})")
    try:
        result = send_admin_report(period=request.data.get('period'), test_mode=test_mode, force=force)
    except ReportError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(result)
