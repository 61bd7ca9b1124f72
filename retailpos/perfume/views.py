import logging
from datetime import timedelta

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone

from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import (
    create_audit_log, resolve_department_id, department_for_write,
    get_department_object_or_404, can_access_department
)
from retailpos.parties.models import Customer
from retailpos.pos.models import SaleItem
from .models import Scent, PerfumePricingConfig, CustomerPreference
from .pricing import (
    PerfumeError, ml_from_weight, validate_weights, quote_refill, stock_overview,
    scent_popularity as count_scent_popularity, DEFAULT_DENSITY
)
from .serializers import (
    ScentSerializer, ScentWeighSerializer, RefillQuoteRequestSerializer,
    PerfumePricingConfigSerializer, CustomerPreferenceSerializer
)
from .services import scents_for_department, find_scent, pricing_config_for

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def scent_list_create(request):
    """
    List the scents available to the active department (its own plus the
    shared ones) or add a scent. Admins create a shared scent with
    ``"is_global": true``.
    """
    if request.method == 'GET':
        department_id = resolve_department_id(request)
        active_only = request.query_params.get('include_inactive') != 'true'
        queryset = scents_for_department(department_id, active_only=active_only)
        if department_id is None and not request.user.is_admin:
            queryset = queryset.filter(department__isnull=True)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(name__icontains=search)
        return Response(ScentSerializer(queryset.order_by('name'), many=True).data)

    serializer = ScentSerializer(data=request.data)
    if serializer.is_valid():
        if request.data.get('is_global') in (True, 'true') and request.user.is_admin:
            department_id = None
        else:
            department_id = department_for_write(request, request.data.get('department'))
        duplicate = scents_for_department(department_id, active_only=False).filter(
            name__iexact=serializer.validated_data['name'].strip()
        )
        if department_id is None:
            duplicate = duplicate.filter(department__isnull=True)
        if duplicate.exists():
            return Response({'error': 'A scent with this name already exists'}, status=status.HTTP_400_BAD_REQUEST)
        scent = serializer.save(department_id=department_id)
        create_audit_log(request, 'create', 'Scent', scent.id, object_name=scent.name, department_id=department_id)
        return Response(ScentSerializer(scent).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def scent_detail(request, pk):
    """Retrieve, update or delete a scent. Shared scents are admin-managed."""
    scent = get_department_object_or_404(Scent, request, pk=pk)

    if request.method == 'GET':
        return Response(ScentSerializer(scent).data)
    if scent.department_id is None and not request.user.is_admin:
        return Response({'error': 'Only admins can change shared scents'}, status=status.HTTP_403_FORBIDDEN)
    if request.method in ('PUT', 'PATCH'):
        serializer = ScentSerializer(scent, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'delete', 'Scent', scent.id, object_name=scent.name, department_id=scent.department_id)
    scent.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def scent_weigh(request, pk):
    """
    Record a weighing and derive the remaining volume.

    stock_ml = (current weight - empty bottle weight) / density
    """
    scent = get_department_object_or_404(Scent, request, pk=pk)
    serializer = ScentWeighSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    empty = serializer.validated_data['empty_bottle_weight_g']
    current = serializer.validated_data['current_weight_g']
    density = serializer.validated_data.get('density') or scent.density or DEFAULT_DENSITY
    try:
        validate_weights(empty, current)
        stock_ml = ml_from_weight(empty, current, density)
    except PerfumeError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    previous_ml = scent.stock_ml
    scent.empty_bottle_weight_g = empty
    scent.current_weight_g = current
    scent.density = density
    scent.stock_ml = stock_ml
    scent.last_weighed_at = timezone.now()
    scent.save()

    logger.info(f"Scent {scent.id} weighed by {request.user.username}: {previous_ml}ml -> {stock_ml}ml")
    create_audit_log(request, 'scent_weigh', 'Scent', scent.id, object_name=scent.name,
                     changes={'previous_ml': str(previous_ml), 'stock_ml': str(stock_ml),
                              'empty_bottle_weight_g': str(empty), 'current_weight_g': str(current),
                              'density': str(density)},
                     department_id=scent.department_id)
    return Response(ScentSerializer(scent).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scent_overview(request):
    """Stock totals across the scents of the active department"""
    department_id = resolve_department_id(request)
    scents = scents_for_department(department_id)
    levels = list(scents.values_list('stock_ml', flat=True))
    overview = stock_overview(levels)
    overview['total_ml'] = float(overview['total_ml'])
    low = scents.filter(stock_ml__gt=0, stock_ml__lt=100).order_by('stock_ml')
    overview['low_stock_scents'] = [{'id': s.id, 'name': s.name, 'stock_ml': float(s.stock_ml)} for s in low]
    return Response(overview)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def refill_quote(request):
    """
    Price a mixed refill bottle and check scent stock.

    Body: {"scents": [{"scent_id": 1}, {"scent": "Oud"}], "bottle_size_ml": 30,
           "customer_type": "retail"}
    """
    serializer = RefillQuoteRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    department_id = resolve_department_id(request)
    selections = []
    for entry in serializer.validated_data['scents']:
        scent = find_scent(department_id, scent_id=entry.get('scent_id'), name=entry.get('scent'))
        if scent is None and entry.get('scent_id'):
            return Response({'error': f"Scent {entry['scent_id']} not found"}, status=status.HTTP_404_NOT_FOUND)
        if scent is None:
            selections.append((entry['scent'], None, None))
        else:
            selections.append((scent.name, scent.id, scent.stock_ml))

    try:
        quote = quote_refill(
            selections,
            serializer.validated_data['bottle_size_ml'],
            serializer.validated_data['customer_type'],
            pricing_config_for(department_id),
        )
    except PerfumeError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'bottle_size_ml': quote.bottle_size_ml,
        'customer_type': quote.customer_type,
        'ml_per_scent': float(quote.ml_per_scent),
        'price': float(quote.price),
        'price_per_ml': float(quote.price_per_ml),
        'base_price': float(quote.base_price),
        'bottle_cost': float(quote.bottle_cost),
        'scent_mixture': quote.scent_mixture,
        'item_name': quote.item_name,
        'low_stock_warnings': quote.low_stock_warnings,
        'insufficient_stock': quote.insufficient,
        'can_fulfil': quote.is_fulfillable,
        'cart_item': quote.as_cart_item(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def scent_popularity(request):
    """Most used scents in refills sold over the last ``days`` days (default 30)"""
    try:
        days = int(request.query_params.get('days', 30))
        limit = int(request.query_params.get('limit', 5))
    except ValueError:
        return Response({'error': 'days and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)

    since = timezone.now() - timedelta(days=days)
    items = SaleItem.objects.filter(
        sale__created_at__gte=since,
        sale__status='completed',
        scent_mixture__isnull=False,
    ).exclude(scent_mixture='')
    department_id = resolve_department_id(request)
    if department_id is not None:
        items = items.filter(sale__department_id=department_id)
    elif not request.user.is_admin:
        items = items.none()

    ranking = count_scent_popularity(items.values_list('scent_mixture', flat=True), limit=limit)
    return Response({
        'days': days,
        'scents': [{'name': name, 'count': count} for name, count in ranking],
    })


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def pricing_config(request):
    """Refill pricing for the active department. Unsaved defaults are returned until configured."""
    department_id = resolve_department_id(request)
    if department_id is None:
        return Response({'error': 'Select a department'}, status=status.HTTP_400_BAD_REQUEST)

    config = PerfumePricingConfig.objects.filter(department_id=department_id).first()
    if request.method == 'GET':
        return Response(PerfumePricingConfigSerializer(config or PerfumePricingConfig(department_id=department_id)).data)

    if not IsManagerOrAdmin().has_permission(request, None):
        return Response({'error': 'Manager or admin access required'}, status=status.HTTP_403_FORBIDDEN)
    serializer = PerfumePricingConfigSerializer(config, data=request.data, partial=True)
    if serializer.is_valid():
        config = serializer.save(department_id=department_id)
        create_audit_log(request, 'price_change', 'PerfumePricingConfig', config.id,
                         changes=request.data, department_id=department_id)
        return Response(PerfumePricingConfigSerializer(config).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def customer_preferences(request, customer_id):
    """Scent memory for a customer in the active department"""
    customer = get_object_or_404(Customer, pk=customer_id)
    if not can_access_department(request.user, customer.department_id):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    department_id = resolve_department_id(request) or customer.department_id

    preference = CustomerPreference.objects.filter(customer=customer, department_id=department_id).first()
    if request.method == 'GET':
        if preference is None:
            preference = CustomerPreference(customer=customer, department_id=department_id)
        return Response(CustomerPreferenceSerializer(preference).data)

    serializer = CustomerPreferenceSerializer(preference, data=request.data, partial=True)
    if serializer.is_valid():
        preference = serializer.save(customer=customer, department_id=department_id)
        return Response(CustomerPreferenceSerializer(preference).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
