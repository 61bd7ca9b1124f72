import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q, Sum
from django.http import HttpResponse
from django.utils import timezone

from retailpos.core.cache_utils import cached_query, DASHBOARD_KPI_CACHE_TTL
from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import (
    create_audit_log, scope_to_department, department_for_write, resolve_department_id,
    get_department_object_or_404, can_access_department
)
from retailpos.departments.models import Department
from retailpos.pos.models import Sale
from .models import ServiceRegistration, DataPackage, SimCardSettings
from .serializers import ServiceRegistrationSerializer, DataPackageSerializer, SimCardSettingsSerializer
from .sim_cards import render_sim_cards, card_settings_for

logger = logging.getLogger(__name__)


# Registration views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def registration_list_create(request):
    """List service registrations of the active department or record a new one"""
    if request.method == 'GET':
        queryset = scope_to_department(ServiceRegistration.objects.select_related('registered_by'), request)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(customer_name__icontains=search) | Q(customer_phone__icontains=search) |
                Q(customer_id_number__icontains=search)
            )
        service_type = request.query_params.get('service_type')
        if service_type:
            queryset = queryset.filter(service_type=service_type)
        date_from = request.query_params.get('date_from')
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)
        date_to = request.query_params.get('date_to')
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)
        return Response(ServiceRegistrationSerializer(queryset, many=True).data)

    serializer = ServiceRegistrationSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        registration = serializer.save(department_id=department_id, registered_by=request.user)
        logger.info(f"Registration {registration.id} ({registration.service_type}) recorded by {request.user.username}")
        create_audit_log(request, 'create', 'ServiceRegistration', registration.id,
                         object_name=registration.customer_name, department_id=department_id)
        return Response(ServiceRegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def registration_detail(request, pk):
    registration = get_department_object_or_404(ServiceRegistration, request, pk=pk)

    if request.method == 'GET':
        return Response(ServiceRegistrationSerializer(registration).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ServiceRegistrationSerializer(registration, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not request.user.is_manager_or_admin:
            return Response({'error': 'Manager or admin access required'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request, 'delete', 'ServiceRegistration', registration.id,
                         object_name=registration.customer_name, department_id=registration.department_id)
        registration.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def registration_card(request, pk):
    """Printable SIM card for one registration (``?provider=Airtel|MTN``)"""
    registration = get_department_object_or_404(ServiceRegistration, request, pk=pk)
    html = render_sim_cards([registration], request.query_params.get('provider'), registration.department_id)
    return HttpResponse(html, content_type='text/html; charset=utf-8')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def registration_cards_batch(request):
    """
    Print several cards on one page.

    Body: {"ids": [1, 2, 3], "provider": "MTN"}
    """
    ids = request.data.get('ids')
    if not isinstance(ids, list) or not ids:
        return Response({'error': 'ids must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)

    registrations = list(
        scope_to_department(ServiceRegistration.objects.filter(pk__in=ids), request).order_by('created_at')
    )
    if len(registrations) != len(set(ids)):
        return Response({'error': 'Some registrations were not found'}, status=status.HTTP_404_NOT_FOUND)
    department_ids = {r.department_id for r in registrations}
    if len(department_ids) > 1:
        return Response({'error': 'Cards must come from a single department'}, status=status.HTTP_400_BAD_REQUEST)

    html = render_sim_cards(registrations, request.data.get('provider'), department_ids.pop())
    return HttpResponse(html, content_type='text/html; charset=utf-8')


# Data package views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def data_package_list_create(request):
    if request.method == 'GET':
        queryset = scope_to_department(DataPackage.objects.all(), request)
        if request.query_params.get('active') == 'true':
            queryset = queryset.filter(is_active=True)
        return Response(DataPackageSerializer(queryset, many=True).data)

    serializer = DataPackageSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        package = serializer.save(department_id=department_id)
        return Response(DataPackageSerializer(package).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def data_package_detail(request, pk):
    package = get_department_object_or_404(DataPackage, request, pk=pk)

    if request.method == 'GET':
        return Response(DataPackageSerializer(package).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DataPackageSerializer(package, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        package.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def sim_card_settings(request):
    """Card layout settings of the active department; defaults until saved"""
    department_id = resolve_department_id(request)
    if department_id is None:
        return Response({'error': 'Select a department'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        return Response(SimCardSettingsSerializer(card_settings_for(department_id)).data)

    if not IsManagerOrAdmin().has_permission(request, None):
        return Response({'error': 'Manager or admin access required'}, status=status.HTTP_403_FORBIDDEN)
    instance = SimCardSettings.objects.filter(department_id=department_id).first()
    serializer = SimCardSettingsSerializer(instance, data=request.data, partial=True)
    if serializer.is_valid():
        saved = serializer.save(department_id=department_id)
        return Response(SimCardSettingsSerializer(saved).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@cached_query(cache_ttl=DASHBOARD_KPI_CACHE_TTL, key_prefix="mobile_money_dashboard",
              topics=('mobile-money-sales', 'registrations', 'mobile-money-dashboard'))
def get_mobile_money_dashboard(department_ids, today_iso):
    """Sales and registration figures for mobile money departments"""
    sales = Sale.objects.filter(department_id__in=department_ids, status='completed')
    today_sales = sales.filter(created_at__date=today_iso)
    registrations = ServiceRegistration.objects.filter(department_id__in=department_ids)

    today_totals = today_sales.aggregate(total=Sum('total'), count=Count('id'))
    all_totals = sales.aggregate(total=Sum('total'), count=Count('id'))
    by_method = today_sales.order_by().values('payment_method').annotate(total=Sum('total'), count=Count('id'))
    by_type = registrations.filter(created_at__date=today_iso).order_by().values('service_type').annotate(count=Count('id'))

    return {
        'today_sales': float(today_totals['total'] or 0),
        'today_transactions': today_totals['count'],
        'total_sales': float(all_totals['total'] or 0),
        'total_transactions': all_totals['count'],
        'today_by_payment_method': {
            row['payment_method']: {'total': float(row['total'] or 0), 'count': row['count']} for row in by_method
        },
        'registrations_today': registrations.filter(created_at__date=today_iso).count(),
        'registrations_total': registrations.count(),
        'registrations_today_by_type': {row['service_type']: row['count'] for row in by_type},
        'recent_registrations': [
            {'id': r.id, 'customer_name': r.customer_name, 'customer_phone': r.customer_phone,
             'service_type': r.service_type, 'created_at': r.created_at.isoformat()}
            for r in registrations.order_by('-created_at')[:5]
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def mobile_money_dashboard(request):
    """Today's and all-time figures for the active (or every) mobile money department"""
    department_id = resolve_department_id(request)
    if department_id is not None:
        if not can_access_department(request.user, department_id):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        department_ids = (department_id,)
    elif request.user.is_admin:
        department_ids = tuple(
            Department.objects.filter(is_mobile_money=True).order_by('id').values_list('id', flat=True)
        )
    else:
        return Response({'error': 'No department assigned'}, status=status.HTTP_400_BAD_REQUEST)

    today = timezone.localdate().isoformat()
    data = get_mobile_money_dashboard(department_ids, today)
    data['date'] = today
    return Response(data)
