import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404

from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import (
    create_audit_log, scope_to_department, department_for_write, resolve_department_id,
    get_department_object_or_404, can_access_department, paginate
)
from retailpos.inventory.stock import InsufficientStockError
from retailpos.parties.models import Customer
from .checkout import SaleError, checkout, void_sale, reorder_cart
from .models import Sale
from .receipts import (
    receipt_data, render_receipt_html, render_receipt_text, render_receipt_pdf, render_invoice_html
)
from .serializers import (
    SaleSerializer, SaleListSerializer, SaleMetadataSerializer, CheckoutSerializer, VoidSerializer
)

logger = logging.getLogger(__name__)

RECEIPT_FORMATS = ('json', 'html', 'text', 'pdf', 'invoice')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """
    GET: paginated sales history of the active department.
    POST: checkout. Validates the cart and stock, records the sale and
    reduces stock in one transaction.
    """
    if request.method == 'GET':
        queryset = scope_to_department(
            Sale.objects.select_related('customer', 'department').prefetch_related('items'), request
        )

        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)

        for param, lookup in (('status', 'status'), ('payment_method', 'payment_method'),
                              ('customer', 'customer_id'), ('cashier', 'cashier_id')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{lookup: value})
        if request.query_params.get('is_invoice') == 'true':
            queryset = queryset.filter(is_invoice=True)

        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(receipt_number__icontains=search) | Q(sale_number__icontains=search) |
                Q(invoice_number__icontains=search) | Q(customer__name__icontains=search)
            )
        return Response(paginate(queryset.order_by('-created_at'), request, SaleListSerializer))

    serializer = CheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    department_id = department_for_write(request, request.data.get('department'))

    try:
        sale = checkout(serializer.validated_data, request.user, department_id)
    except InsufficientStockError as e:
        return Response({'error': 'Insufficient stock', 'details': e.problems}, status=status.HTTP_400_BAD_REQUEST)
    except SaleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request, 'sale_create', 'Sale', sale.id,
        changes={
            'total': str(sale.total),
            'payment_method': sale.payment_method,
            'items': [f"{item.name} x{item.quantity}" for item in sale.items.all()],
        },
        object_name=f"Sale {sale.receipt_number}",
        object_reference=sale.receipt_number,
        department_id=department_id,
    )
    return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve a sale. PATCH edits receipt metadata only; amounts and items are immutable."""
    sale = get_department_object_or_404(
        Sale.objects.select_related('customer', 'department', 'voided_by').prefetch_related('items'),
        request, pk=pk
    )

    if request.method == 'GET':
        return Response(SaleSerializer(sale).data)

    serializer = SaleMetadataSerializer(sale, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    customer = serializer.validated_data.get('customer')
    if customer is not None and customer.department_id not in (None, sale.department_id):
        return Response({'error': 'Customer belongs to another department'}, status=status.HTTP_400_BAD_REQUEST)
    if ('customer' in serializer.validated_data and customer != sale.customer
            and sale.credit_transactions.exists()):
        return Response({'error': 'Customer cannot be changed on a sale charged to a credit account'},
                        status=status.HTTP_400_BAD_REQUEST)

    changes = {field: {'old': str(getattr(sale, field)), 'new': str(value)}
               for field, value in serializer.validated_data.items() if getattr(sale, field) != value}
    sale = serializer.save()
    if changes:
        create_audit_log(request, 'sale_update', 'Sale', sale.id, changes=changes,
                         object_name=f"Sale {sale.receipt_number}", object_reference=sale.receipt_number,
                         department_id=sale.department_id)
    return Response(SaleSerializer(sale).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def sale_void(request, pk):
    """Void a sale with a reason; stock and customer credit are restored"""
    sale = get_department_object_or_404(Sale, request, pk=pk)
    serializer = VoidSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        sale = void_sale(sale, request.user, serializer.validated_data['reason'])
    except SaleError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request, 'sale_void', 'Sale', sale.id,
        changes={
            'reason': sale.void_reason,
            'total': str(sale.total),
            'payment_method': sale.payment_method,
            'items': [f"{item.name} x{item.quantity}" for item in sale.items.all()],
            'customer': sale.customer.name if sale.customer_id else None,
        },
        object_name=f"Sale {sale.receipt_number}",
        object_reference=sale.receipt_number,
        department_id=sale.department_id,
    )
    return Response(SaleSerializer(sale).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_receipt(request, pk):
    """
    Receipt for a sale. ``?format=`` picks json (default), html, text
    (32-column thermal), pdf or invoice (A4 HTML).
    """
    sale = get_department_object_or_404(
        Sale.objects.select_related('customer', 'department').prefetch_related('items'), request, pk=pk
    )
    output = request.query_params.get('format', 'json')
    if output not in RECEIPT_FORMATS:
        return Response({'error': f"format must be one of {', '.join(RECEIPT_FORMATS)}"},
                        status=status.HTTP_400_BAD_REQUEST)

    if output == 'html':
        return HttpResponse(render_receipt_html(sale), content_type='text/html; charset=utf-8')
    if output == 'invoice':
        return HttpResponse(render_invoice_html(sale), content_type='text/html; charset=utf-8')
    if output == 'text':
        return HttpResponse(render_receipt_text(sale), content_type='text/plain; charset=utf-8')
    if output == 'pdf':
        response = HttpResponse(render_receipt_pdf(sale), content_type='application/pdf')
        response['Content-Disposition'] = f'inline; filename="Receipt_{sale.receipt_number}.pdf"'
        return response
    return Response(receipt_data(sale))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_purchase_history(request, customer_id):
    """Last 10 completed sales of a customer, each with a cart that repeats it"""
    customer = get_object_or_404(Customer, pk=customer_id)
    if not can_access_department(request.user, customer.department_id):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    sales = Sale.objects.filter(customer=customer, status='completed').prefetch_related('items')
    department_id = resolve_department_id(request)
    if department_id is not None:
        sales = sales.filter(department_id=department_id)
    elif not request.user.is_admin:
        sales = sales.none()

    history = []
    for sale in sales.order_by('-created_at')[:10]:
        entry = SaleSerializer(sale).data
        entry['reorder'] = reorder_cart(sale)
        history.append(entry)
    return Response({'customer': {'id': customer.id, 'name': customer.name, 'phone': customer.phone},
                     'sales': history})
