import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404

from retailpos.core.utils import (
    create_audit_log, scope_to_department, department_for_write, can_access_department
)
from .ledger import record_credit_transaction, LedgerError
from .models import Customer, Supplier, CustomerCreditTransaction
from .serializers import CustomerSerializer, SupplierSerializer, CustomerCreditTransactionSerializer

logger = logging.getLogger(__name__)


def _get_customer_for_request(request, pk):
    customer = get_object_or_404(Customer.objects.select_related('department'), pk=pk)
    if not can_access_department(request.user, customer.department_id):
        return None
    return customer


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List customers of the active department or create a new customer"""
    if request.method == 'GET':
        queryset = scope_to_department(Customer.objects.select_related('department'), request)
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )
        if request.query_params.get('with_balance') == 'true':
            queryset = queryset.filter(outstanding_balance__gt=0)
        serializer = CustomerSerializer(queryset.order_by('name'), many=True)
        return Response(serializer.data)

    serializer = CustomerSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        customer = serializer.save(department_id=department_id)
        create_audit_log(request, 'create', 'Customer', customer.id,
                         object_name=customer.name, department_id=department_id)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = _get_customer_for_request(request, pk)
    if customer is None:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if customer.outstanding_balance > 0:
            return Response(
                {'error': 'Customer has an outstanding balance and cannot be deleted'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request, 'delete', 'Customer', customer.id,
                         object_name=customer.name, department_id=customer.department_id)
        customer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_transactions(request, pk):
    """
    Customer credit ledger.

    GET lists the movements, POST records a payment or adjustment:
    {"transaction_type": "payment", "amount": "5000", "notes": "..."}
    """
    customer = _get_customer_for_request(request, pk)
    if customer is None:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        entries = CustomerCreditTransaction.objects.filter(customer=customer).select_related('sale', 'created_by')
        serializer = CustomerCreditTransactionSerializer(entries, many=True)
        return Response({
            'customer': CustomerSerializer(customer).data,
            'transactions': serializer.data,
        })

    transaction_type = request.data.get('transaction_type', 'payment')
    if transaction_type == 'charge':
        return Response({'error': 'Charges are created by credit sales'}, status=status.HTTP_400_BAD_REQUEST)
    if transaction_type == 'adjustment' and not request.user.is_manager_or_admin:
        return Response({'error': 'Only managers can adjust balances'}, status=status.HTTP_403_FORBIDDEN)

    try:
        entry = record_credit_transaction(
            customer,
            transaction_type,
            request.data.get('amount', 0),
            user=request.user,
            notes=request.data.get('notes'),
        )
    except (LedgerError, ArithmeticError) as e:
        return Response({'error': str(e) or 'Invalid amount'}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"{transaction_type} of {entry.amount} recorded for customer {customer.id} by {request.user.username}")
    create_audit_log(request, 'payment_add', 'Customer', customer.id, object_name=customer.name,
                     changes={'transaction_type': transaction_type, 'amount': str(entry.amount),
                              'balance_after': str(entry.balance_after)},
                     department_id=customer.department_id)
    return Response(CustomerCreditTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        queryset = Supplier.objects.all().order_by('name')
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(phone__icontains=search) |
                Q(contact_person__icontains=search) |
                Q(email__icontains=search)
            )
        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        supplier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
