"""Utility functions for audit logging, department scoping and request parsing"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from operator import attrgetter

from django.conf import settings
from django.core.paginator import Paginator
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     department_id=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, sale_void, stock_adjust, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product name, receipt number)
        object_reference: Reference identifier (e.g., receipt number, sale number)
        department_id: Department the action happened in
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            department_id=department_id,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def _parse_department_value(value):
    if value in (None, '', 'all'):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({'department': f'Invalid department id: {value}'})


def resolve_department_id(request, explicit=None):
    """
    Department id a request acts on.

    Admins may pick any department with ``?department=`` or the
    ``X-Department-ID`` header (no value means every department). Everyone
    else is pinned to their own department.
    """
    user = request.user
    if user.is_admin:
        value = explicit
        if value is None:
            value = request.query_params.get('department')
        if value is None:
            value = request.headers.get('X-Department-ID')
        return _parse_department_value(value)
    return user.department_id


def scope_to_department(queryset, request, field='department', include_global=False):
    """Filter a queryset down to the department the request acts on"""
    user = request.user
    department_id = resolve_department_id(request)
    if department_id is None:
        if user.is_admin:
            return queryset
        # Non-admin without a department sees nothing department-bound
        if include_global:
            return queryset.filter(**{f'{field}__isnull': True})
        return queryset.none()
    if include_global:
        return queryset.filter(Q(**{f'{field}_id': department_id}) | Q(**{f'{field}__isnull': True}))
    return queryset.filter(**{f'{field}_id': department_id})


def department_for_write(request, data_value=None):
    """Department id to stamp on a new record. Raises if none can be resolved."""
    department_id = resolve_department_id(request, explicit=data_value)
    if department_id is None:
        raise ValidationError({'department': 'A department is required.'})
    return department_id


def parse_date_range(request, default_days=30):
    """Read date_from / date_to (YYYY-MM-DD) with a trailing default window"""
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    try:
        if not date_from:
            date_from = (timezone.now() - timedelta(days=default_days)).date()
        else:
            date_from = datetime.strptime(date_from, '%Y-%m-%d').date()

        if not date_to:
            date_to = timezone.now().date()
        else:
            date_to = datetime.strptime(date_to, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError({'date': 'Dates must use the YYYY-MM-DD format.'})
    if date_from > date_to:
        raise ValidationError({'date': 'date_from must be on or before date_to.'})
    return date_from, date_to


def to_decimal(value, field='amount', default=None):
    """Coerce request input to Decimal, raising a ValidationError on junk"""
    if value in (None, ''):
        if default is not None:
            return default
        raise ValidationError({field: 'This field is required.'})
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: f'Invalid number: {value}'})


def paginate(queryset, request, serializer_class, context=None):
    """Page a queryset the same way every list endpoint does"""
    try:
        page = int(request.query_params.get('page', 1))
        limit = int(request.query_params.get('limit', settings.POS_DEFAULT_PAGE_SIZE))
    except ValueError:
        raise ValidationError({'page': 'page and limit must be integers.'})
    limit = max(1, min(limit, 500))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }


def can_access_department(user, department_id):
    """Whether a user may touch a record owned by the given department"""
    return user.is_admin or department_id is None or department_id == user.department_id


def get_department_object_or_404(queryset, request, department_attr='department_id', **lookup):
    """get_object_or_404 that also refuses records owned by another department"""
    obj = get_object_or_404(queryset, **lookup)
    if not can_access_department(request.user, attrgetter(department_attr)(obj)):
        raise PermissionDenied('This record belongs to another department.')
    return obj
