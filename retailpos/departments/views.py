import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404

from retailpos.core.permissions import IsAdminOrReadOnly
from retailpos.core.utils import create_audit_log, resolve_department_id
from .models import Department, BusinessSettings
from .serializers import DepartmentSerializer, BusinessSettingsSerializer

logger = logging.getLogger(__name__)

REPORT_FIELDS = {'admin_email', 'admin_report_email', 'report_email_enabled',
                 'report_email_frequency', 'report_email_time'}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrReadOnly])
def department_list_create(request):
    """List departments or create a new one"""
    if request.method == 'GET':
        queryset = Department.objects.all()
        if not request.user.is_admin:
            queryset = queryset.filter(pk=request.user.department_id)
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')
        serializer = DepartmentSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = DepartmentSerializer(data=request.data)
    if serializer.is_valid():
        department = serializer.save()
        create_audit_log(request, 'create', 'Department', department.id, object_name=department.name)
        return Response(DepartmentSerializer(department).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrReadOnly])
def department_detail(request, pk):
    """Retrieve, update or delete a department"""
    department = get_object_or_404(Department, pk=pk)

    if request.method == 'GET':
        if not request.user.is_admin and request.user.department_id != department.pk:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(DepartmentSerializer(department).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DepartmentSerializer(department, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Department', department.id,
                             changes=request.data, object_name=department.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            department.delete()
        except ProtectedError:
            return Response(
                {'error': 'Department has sales history and cannot be deleted. Deactivate it instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request, 'delete', 'Department', pk, object_name=department.name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def business_settings(request):
    """
    Effective business settings for a department.

    GET falls back from the department row to the global row to defaults.
    PUT/PATCH upsert the row for the requested scope: admins may write the
    global row (no department), managers only their own department.
    """
    department_id = resolve_department_id(request)

    if request.method == 'GET':
        settings_obj = BusinessSettings.for_department(department_id)
        return Response(BusinessSettingsSerializer(settings_obj).data)

    user = request.user
    if not user.is_manager_or_admin:
        return Response({'error': 'Manager or admin access required'}, status=status.HTTP_403_FORBIDDEN)
    if department_id is None and not user.is_admin:
        return Response({'error': 'Only admins may change global settings'}, status=status.HTTP_403_FORBIDDEN)
    if not user.is_admin and REPORT_FIELDS.intersection(request.data.keys()):
        return Response({'error': 'Only admins may change report email settings'}, status=status.HTTP_403_FORBIDDEN)

    if department_id is None:
        instance = BusinessSettings.get_global()
    else:
        get_object_or_404(Department, pk=department_id)
        instance = BusinessSettings.objects.filter(department_id=department_id).first()

    serializer = BusinessSettingsSerializer(instance, data=request.data, partial=True)
    if serializer.is_valid():
        settings_obj = serializer.save(department_id=department_id)
        logger.info(f"Business settings updated by {user.username} (department={department_id})")
        create_audit_log(request, 'update', 'BusinessSettings', settings_obj.id,
                         changes=request.data, department_id=department_id)
        return Response(BusinessSettingsSerializer(settings_obj).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
