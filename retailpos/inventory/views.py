import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from retailpos.catalog.models import Product, ProductVariant
from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import (
    create_audit_log, scope_to_department, can_access_department,
    get_department_object_or_404, paginate, to_decimal
)
from .models import StockAdjustment, InternalStockUsage
from .serializers import StockAdjustmentSerializer, InternalStockUsageSerializer
from .stock import (
    StockError, apply_adjustment, check_stock_availability,
    check_variant_stock_availability, low_stock_alerts
)

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def stock_check(request):
    """
    Check whether cart lines can be fulfilled before checkout.

    Body: {"items": [{"product_id": 1, "variant_id": null, "quantity": 2, "ml_amount": null}]}
    """
    items = request.data.get('items')
    if not isinstance(items, list) or not items:
        return Response({'error': 'items must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)

    results = []
    all_available = True
    for item in items:
        try:
            quantity = int(item.get('quantity', 1))
        except (TypeError, ValueError):
            return Response({'error': 'quantity must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
        if item.get('variant_id'):
            variant = get_object_or_404(ProductVariant.objects.select_related('product'), pk=item['variant_id'])
            if not can_access_department(request.user, variant.product.department_id):
                return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
            ok, available = check_variant_stock_availability(variant, quantity)
            name = f"{variant.product.name} - {variant.name}"
        elif item.get('product_id'):
            product = get_object_or_404(Product, pk=item['product_id'])
            if not can_access_department(request.user, product.department_id):
                return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
            ml_amount = to_decimal(item.get('ml_amount'), 'ml_amount', default=0) or None
            ok, available = check_stock_availability(product, quantity, ml_amount=ml_amount)
            name = product.name
        else:
            return Response({'error': 'Each item needs a product_id or variant_id'}, status=status.HTTP_400_BAD_REQUEST)
        all_available = all_available and ok
        results.append({
            'product_id': item.get('product_id'),
            'variant_id': item.get('variant_id'),
            'name': name,
            'requested': quantity,
            'available': float(available),
            'is_available': ok,
        })

    return Response({'all_available': all_available, 'items': results})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock(request):
    """Products at or below their minimum stock, split into critical and low"""
    queryset = scope_to_department(Product.objects.all(), request)
    return Response(low_stock_alerts(queryset))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_adjustment_list_create(request):
    """List stock adjustments or record a manual stock in/out"""
    if request.method == 'GET':
        queryset = scope_to_department(
            StockAdjustment.objects.select_related('product', 'variant', 'created_by'), request
        )
        product_id = request.query_params.get('product')
        if product_id:
            queryset = queryset.filter(product_id=product_id)
        adjustment_type = request.query_params.get('type')
        if adjustment_type:
            queryset = queryset.filter(adjustment_type=adjustment_type)
        return Response(paginate(queryset, request, StockAdjustmentSerializer))

    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    product = serializer.validated_data['product']
    if not can_access_department(request.user, product.department_id):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    variant = serializer.validated_data.get('variant')

    try:
        with transaction.atomic():
            new_level = apply_adjustment(
                product, serializer.validated_data['adjustment_type'],
                serializer.validated_data['quantity'], variant=variant
            )
            adjustment = serializer.save(
                department_id=product.department_id,
                created_by=request.user,
                stock_after=new_level,
            )
    except StockError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Stock adjustment {adjustment.id} on product {product.id}: "
                f"{adjustment.adjustment_type} {adjustment.quantity} -> {new_level}")
    create_audit_log(
        request, 'stock_adjust', 'Product', product.id,
        changes={
            'adjustment_type': adjustment.adjustment_type,
            'quantity': str(adjustment.quantity),
            'reason': adjustment.reason,
            'variant': variant.id if variant else None,
            'new_stock_quantity': str(new_level),
        },
        object_name=product.name,
        department_id=product.department_id,
    )
    return Response(StockAdjustmentSerializer(adjustment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def internal_usage_list_create(request):
    """List internal stock usage requests or file a new one (pending until approved)"""
    if request.method == 'GET':
        queryset = scope_to_department(
            InternalStockUsage.objects.select_related('product', 'requested_by', 'approved_by'), request
        )
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(InternalStockUsageSerializer(queryset, many=True).data)

    serializer = InternalStockUsageSerializer(data=request.data)
    if serializer.is_valid():
        product = serializer.validated_data['product']
        if not can_access_department(request.user, product.department_id):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        usage = serializer.save(department_id=product.department_id, requested_by=request.user)
        return Response(InternalStockUsageSerializer(usage).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def internal_usage_approve(request, pk):
    """Approve a pending usage request and deduct the stock it consumed"""
    usage = get_department_object_or_404(InternalStockUsage.objects.select_related('product', 'variant'), request, pk=pk)
    if usage.status != 'pending':
        return Response({'error': f'Request is already {usage.status}'}, status=status.HTTP_400_BAD_REQUEST)

    product = usage.product
    if usage.variant_id:
        ok, available = check_variant_stock_availability(usage.variant, usage.quantity)
        amount = usage.quantity
    elif product.is_ml_tracked:
        amount = usage.ml_quantity
        ok, available = check_stock_availability(product, 1, ml_amount=amount)
    else:
        amount = usage.quantity
        ok, available = check_stock_availability(product, amount)
    if not ok:
        return Response({'error': f'Insufficient stock: {available} available'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        new_level = apply_adjustment(product, 'out', amount, variant=usage.variant)
        usage.status = 'approved'
        usage.approved_by = request.user
        usage.approved_at = timezone.now()
        usage.save()

    create_audit_log(request, 'stock_usage', 'InternalStockUsage', usage.id,
                     changes={'product': product.id, 'amount': str(amount), 'new_stock_quantity': str(new_level)},
                     object_name=product.name, department_id=usage.department_id)
    return Response(InternalStockUsageSerializer(usage).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdmin])
def internal_usage_reject(request, pk):
    usage = get_department_object_or_404(InternalStockUsage, request, pk=pk)
    if usage.status != 'pending':
        return Response({'error': f'Request is already {usage.status}'}, status=status.HTTP_400_BAD_REQUEST)
    usage.status = 'rejected'
    usage.approved_by = request.user
    usage.approved_at = timezone.now()
    if request.data.get('notes'):
        usage.notes = request.data['notes']
    usage.save()
    return Response(InternalStockUsageSerializer(usage).data)
