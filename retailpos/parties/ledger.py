"""Customer credit ledger operations"""
import logging
from decimal import Decimal

from django.db import transaction

from .models import Customer, CustomerCreditTransaction

logger = logging.getLogger(__name__)


class LedgerError(ValueError):
    """Raised when a ledger movement is not allowed"""


def record_credit_transaction(customer, transaction_type, amount, user=None, sale=None,
                              department=None, notes=None):
    """
    Apply a movement to the customer's outstanding balance and record it.

    Charges add to the balance, payments subtract from it, adjustments add
    a signed amount. The balance never drops below zero.
    """
    amount = Decimal(str(amount))
    if transaction_type in ('charge', 'payment') and amount <= 0:
        raise LedgerError('Amount must be greater than zero')
    if transaction_type not in dict(CustomerCreditTransaction.TRANSACTION_TYPE_CHOICES):
        raise LedgerError(f'Unknown transaction type: {transaction_type}')

    with transaction.atomic():
        locked = Customer.objects.select_for_update().get(pk=customer.pk)
        current = locked.outstanding_balance
        if transaction_type == 'charge':
            new_balance = current + amount
        elif transaction_type == 'payment':
            if amount > current:
                logger.info(f"Payment {amount} exceeds outstanding {current} for customer {locked.id}, capping at zero")
            new_balance = max(Decimal('0.00'), current - amount)
        else:
            new_balance = max(Decimal('0.00'), current + amount)

        locked.outstanding_balance = new_balance
        locked.save(update_fields=['outstanding_balance', 'updated_at'])

        entry = CustomerCreditTransaction.objects.create(
            customer=locked,
            department=department or locked.department,
            sale=sale,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=new_balance,
            notes=notes,
            created_by=user if user and user.is_authenticated else None,
        )

    customer.outstanding_balance = new_balance
    return entry
