import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone

from retailpos.core.permissions import IsManagerOrAdmin
from retailpos.core.utils import (
    create_audit_log, scope_to_department, department_for_write, resolve_department_id,
    get_department_object_or_404, paginate
)
from .cash import (
    CashError, DEFAULT_CURRENCIES, reconcile, current_shift, expected_cash, open_shift, close_shift
)
from .models import Expense, Reconciliation, SuspendedRevenue, Credit, InboxMessage, CashDrawerShift
from .serializers import (
    ExpenseSerializer, ReconciliationSerializer, ReconciliationCreateSerializer,
    SuspendedRevenueSerializer, CreditSerializer, InboxMessageSerializer,
    CashDrawerShiftSerializer, ShiftCloseSerializer
)

logger = logging.getLogger(__name__)


# Expense views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    """List expenses (filters: status, category, date_from, date_to) or record one"""
    if request.method == 'GET':
        queryset = scope_to_department(Expense.objects.select_related('created_by', 'approved_by'), request)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        category = request.query_params.get('category')
        if category:
            queryset = queryset.filter(category__iexact=category)
        date_from = request.query_params.get('date_from')
        if date_from:
            queryset = queryset.filter(expense_date__gte=date_from)
        date_to = request.query_params.get('date_to')
        if date_to:
            queryset = queryset.filter(expense_date__lte=date_to)
        data = paginate(queryset, request, ExpenseSerializer)
        data['total_amount'] = queryset.aggregate(total=Sum('amount'))['total'] or 0
        return Response(data)

    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        expense = serializer.save(department_id=department_id, created_by=request.user)
        create_audit_log(request, 'create', 'Expense', expense.id, object_name=expense.description,
                         changes={'amount': str(expense.amount)}, department_id=department_id)
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    expense = get_department_object_or_404(Expense, request, pk=pk)

    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    if expense.status != 'pending' and not request.user.is_manager_or_admin:
        return Response({'error': 'Only pending expenses can be changed'}, status=status.HTTP_400_BAD_REQUEST)
    if request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'delete', 'Expense', expense.id, object_name=expense.description,
                     department_id=expense.department_id)
    expense.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


def _set_expense_status(request, pk, new_status):
    expense = get_department_object_or_404(Expense, request, pk=pk)
    if expense.status != 'pending':
        return Response({'error': f'Expense is already {expense.status}'}, status=status.HTTP_400_BAD_REQUEST)
    expense.status = new_status
    expense.approved_by = request.user
    expense.approved_at = timezone.now()
    expense.save()
    logger.info(f"Expense {expense.id} {new_status} by {request.user.username}")
    create_audit_log(request, 'expense_status', 'Expense', expense.id, object_name=expense.description,
                     changes={'status': new_status}, department_id=expense.department_id)
    return Response(ExpenseSerializer(expense).data)


@api_view(['POST'])
@permission_classes([IsManagerOrAdmin])
def expense_approve(request, pk):
    return _set_expense_status(request, pk, 'approved')


@api_view(['POST'])
@permission_classes([IsManagerOrAdmin])
def expense_reject(request, pk):
    return _set_expense_status(request, pk, 'rejected')


# Reconciliation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def reconciliation_list_create(request):
    """
    List reconciliations or record a cash count.

    System cash is computed from completed cash sales of the department on
    that date; the client only reports what is in the till.
    """
    if request.method == 'GET':
        queryset = scope_to_department(Reconciliation.objects.all(), request)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(paginate(queryset, request, ReconciliationSerializer))

    serializer = ReconciliationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    department_id = department_for_write(request, request.data.get('department'))
    data = serializer.validated_data
    try:
        reconciliation = reconcile(department_id, data['date'], data['cashier_name'], data['reported_cash'],
                                   notes=data.get('notes'), user=request.user)
    except CashError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'reconciliation', 'Reconciliation', reconciliation.id,
                     object_name=reconciliation.cashier_name,
                     changes={'system_cash': str(reconciliation.system_cash),
                              'reported_cash': str(reconciliation.reported_cash),
                              'discrepancy': str(reconciliation.discrepancy)},
                     department_id=department_id)
    return Response(ReconciliationSerializer(reconciliation).data, status=status.HTTP_201_CREATED)


# Suspended revenue views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def suspended_revenue_list_create(request):
    if request.method == 'GET':
        queryset = scope_to_department(SuspendedRevenue.objects.select_related('resolved_by'), request)
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(SuspendedRevenueSerializer(queryset, many=True).data)

    serializer = SuspendedRevenueSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        entry = serializer.save(department_id=department_id)
        return Response(SuspendedRevenueSerializer(entry).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def suspended_revenue_detail(request, pk):
    """Moving an entry out of pending stamps who resolved it and when"""
    entry = get_department_object_or_404(SuspendedRevenue, request, pk=pk)
    if request.method == 'GET':
        return Response(SuspendedRevenueSerializer(entry).data)

    previous_status = entry.status
    serializer = SuspendedRevenueSerializer(entry, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data.get('status', previous_status)
    extra = {}
    if new_status != previous_status and new_status != 'pending':
        extra = {'resolved_by': request.user, 'resolved_at': timezone.now()}
    entry = serializer.save(**extra)
    return Response(SuspendedRevenueSerializer(entry).data)


# Credit views
def _credits_visible_to(request):
    department_id = resolve_department_id(request)
    queryset = Credit.objects.select_related('from_department', 'to_department', 'customer')
    if department_id is None:
        return queryset if request.user.is_admin else queryset.none()
    return queryset.filter(
        Q(department_id=department_id) | Q(from_department_id=department_id) | Q(to_department_id=department_id)
    )


def _get_credit(request, pk):
    return get_object_or_404(_credits_visible_to(request), pk=pk)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def credit_list_create(request):
    """Credits the active department lends, borrows or recorded"""
    if request.method == 'GET':
        queryset = _credits_visible_to(request)
        for param in ('status', 'transaction_type', 'settlement_status'):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})
        return Response(CreditSerializer(queryset, many=True).data)

    serializer = CreditSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        credit = serializer.save(department_id=department_id, created_by=request.user)
        create_audit_log(request, 'create', 'Credit', credit.id, object_name=credit.purpose,
                         changes={'amount': str(credit.amount), 'transaction_type': credit.transaction_type},
                         department_id=department_id)
        return Response(CreditSerializer(credit).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def credit_detail(request, pk):
    credit = _get_credit(request, pk)
    if request.method == 'GET':
        return Response(CreditSerializer(credit).data)
    if credit.status != 'pending':
        return Response({'error': 'Only pending credits can be edited'}, status=status.HTTP_400_BAD_REQUEST)
    serializer = CreditSerializer(credit, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _set_credit_status(request, pk, new_status):
    credit = _get_credit(request, pk)
    if credit.status != 'pending':
        return Response({'error': f'Credit is already {credit.status}'}, status=status.HTTP_400_BAD_REQUEST)
    credit.status = new_status
    credit.approved_by = request.user
    credit.approved_at = timezone.now()
    credit.save()
    create_audit_log(request, 'credit_status', 'Credit', credit.id, object_name=credit.purpose,
                     changes={'status': new_status}, department_id=credit.department_id)
    return Response(CreditSerializer(credit).data)


@api_view(['POST'])
@permission_classes([IsManagerOrAdmin])
def credit_approve(request, pk):
    return _set_credit_status(request, pk, 'approved')


@api_view(['POST'])
@permission_classes([IsManagerOrAdmin])
def credit_reject(request, pk):
    return _set_credit_status(request, pk, 'rejected')


@api_view(['POST'])
@permission_classes([IsManagerOrAdmin])
def credit_settle(request, pk):
    """Mark an approved credit as repaid in full"""
    credit = _get_credit(request, pk)
    if credit.status not in ('approved', 'partial'):
        return Response({'error': 'Only approved credits can be settled'}, status=status.HTTP_400_BAD_REQUEST)
    if credit.settlement_status == 'settled':
        return Response({'error': 'Credit is already settled'}, status=status.HTTP_400_BAD_REQUEST)
    credit.settlement_status = 'settled'
    credit.status = 'settled'
    credit.paid_amount = credit.amount
    credit.settled_at = timezone.now()
    credit.save()
    create_audit_log(request, 'credit_status', 'Credit', credit.id, object_name=credit.purpose,
                     changes={'status': 'settled'}, department_id=credit.department_id)
    return Response(CreditSerializer(credit).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def credit_notify(request, pk):
    """
    Send a payment notification about a credit to the other department's inbox.

    Body: {"message": "..."}
    """
    credit = _get_credit(request, pk)
    message = (request.data.get('message') or '').strip()
    if not message:
        return Response({'error': 'Message is required'}, status=status.HTTP_400_BAD_REQUEST)
    to_department_id = credit.notify_department_id
    if to_department_id is None:
        return Response({'error': 'This credit has no department to notify'}, status=status.HTTP_400_BAD_REQUEST)

    inbox_message = InboxMessage.objects.create(
        from_department_id=resolve_department_id(request),
        to_department_id=to_department_id,
        credit=credit,
        subject=f"Credit Payment Notification - {credit.purpose}",
        message=message,
        sent_by=request.user,
    )
    logger.info(f"Credit {credit.id} notification sent to department {to_department_id}")
    return Response(InboxMessageSerializer(inbox_message).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inbox_list(request):
    """Messages addressed to the active department, newest first"""
    queryset = scope_to_department(
        InboxMessage.objects.select_related('from_department'), request, field='to_department'
    )
    if request.query_params.get('unread') == 'true':
        queryset = queryset.filter(is_read=False)
    return Response({
        'results': InboxMessageSerializer(queryset, many=True).data,
        'unread_count': queryset.filter(is_read=False).count(),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def inbox_mark_read(request, pk):
    inbox_message = get_department_object_or_404(
        InboxMessage, request, department_attr='to_department_id', pk=pk
    )
    if not inbox_message.is_read:
        inbox_message.is_read = True
        inbox_message.save(update_fields=['is_read'])
    return Response(InboxMessageSerializer(inbox_message).data)


# Cash drawer views
def _drawer_department(request):
    explicit = request.data.get('department') if request.method == 'POST' else None
    return resolve_department_id(request, explicit=explicit)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cash_drawer_open(request):
    """Open the drawer with a float. One open shift per department."""
    department_id = _drawer_department(request)
    if department_id is None:
        return Response({'error': 'Select a department'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        shift = open_shift(department_id, request.data.get('opening_float', 0),
                           user=request.user, notes=request.data.get('notes'))
    except CashError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'drawer_open', 'CashDrawerShift', shift.id,
                     changes={'opening_float': str(shift.opening_float)}, department_id=department_id)
    return Response(CashDrawerShiftSerializer(shift).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_drawer_current(request):
    """The open shift with its expected cash, or ``{"shift": null}``"""
    department_id = _drawer_department(request)
    if department_id is None:
        return Response({'error': 'Select a department'}, status=status.HTTP_400_BAD_REQUEST)
    shift = current_shift(department_id)
    if shift is None:
        return Response({'shift': None, 'currencies': DEFAULT_CURRENCIES})
    expected = expected_cash(shift)
    return Response({
        'shift': CashDrawerShiftSerializer(shift).data,
        'cash_sales': expected - shift.opening_float,
        'expected_cash': expected,
        'currencies': DEFAULT_CURRENCIES,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cash_drawer_close(request):
    """
    Close the open shift.

    Body: {"currency_counts": {"UGX": 150000, "USD": 20}, "cash_counted": true,
           "cash_verified": true, "discrepancy_explained": false, "notes": ""}
    or a plain "closing_cash" instead of the currency counts.
    """
    department_id = _drawer_department(request)
    if department_id is None:
        return Response({'error': 'Select a department'}, status=status.HTTP_400_BAD_REQUEST)
    serializer = ShiftCloseSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    shift = current_shift(department_id)
    if shift is None:
        return Response({'error': 'No open shift for this department'}, status=status.HTTP_404_NOT_FOUND)

    data = serializer.validated_data
    try:
        shift = close_shift(
            shift,
            user=request.user,
            closing_cash=data.get('closing_cash'),
            currency_counts=data.get('currency_counts'),
            checklist={key: data.get(key) for key in
                       ('cash_counted', 'cash_verified', 'discrepancy_explained', 'notes')},
        )
    except CashError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'drawer_close', 'CashDrawerShift', shift.id,
                     changes={'closing_cash': str(shift.closing_cash), 'expected_cash': str(shift.expected_cash),
                              'discrepancy': str(shift.discrepancy)},
                     department_id=department_id)
    return Response(CashDrawerShiftSerializer(shift).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_drawer_history(request):
    """Last ten shifts of the active department"""
    queryset = scope_to_department(
        CashDrawerShift.objects.select_related('opened_by', 'closed_by').prefetch_related('currency_counts'),
        request
    )
    return Response(CashDrawerShiftSerializer(queryset[:10], many=True).data)
