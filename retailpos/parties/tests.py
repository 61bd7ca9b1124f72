"""
Tests for customers, suppliers and the customer credit ledger
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.parties.ledger import LedgerError, record_credit_transaction
from retailpos.parties.models import Customer, CustomerCreditTransaction


class CustomerTests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.other_department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Jane Nakato', 'phone': '0772000111', 'credit_limit': '100000'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['department'], self.department.id)
        self.assertEqual(Decimal(response.data['available_credit']), Decimal('100000'))

    def test_outstanding_balance_is_read_only(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Tom', 'outstanding_balance': '5000'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['outstanding_balance']), Decimal('0'))

    def test_search_and_scope(self):
        TestDataFactory.create_customer(self.department, name='Alice Auma', phone='0700111222')
        TestDataFactory.create_customer(self.department, name='Bob Okello')
        TestDataFactory.create_customer(self.other_department, name='Alice Elsewhere')
        response = self.client.get('/api/v1/customers/?search=alice')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Alice Auma'])

    def test_customer_of_other_department_is_forbidden(self):
        customer = TestDataFactory.create_customer(self.other_department)
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_with_balance_cannot_be_deleted(self):
        customer = TestDataFactory.create_customer(self.department)
        Customer.objects.filter(pk=customer.pk).update(outstanding_balance=Decimal('2000'))
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_payment(self):
        customer = TestDataFactory.create_customer(self.department)
        record_credit_transaction(customer, 'charge', '30000', user=self.user)
        response = self.client.post(f'/api/v1/customers/{customer.id}/transactions/', {
            'transaction_type': 'payment', 'amount': '10000'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['balance_after']), Decimal('20000'))

        response = self.client.get(f'/api/v1/customers/{customer.id}/transactions/')
        self.assertEqual(len(response.data['transactions']), 2)
        self.assertEqual(Decimal(response.data['customer']['outstanding_balance']), Decimal('20000'))

    def test_charges_only_come_from_sales(self):
        customer = TestDataFactory.create_customer(self.department)
        response = self.client.post(f'/api/v1/customers/{customer.id}/transactions/', {
            'transaction_type': 'charge', 'amount': '10000'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cashier_cannot_adjust_balance(self):
        customer = TestDataFactory.create_customer(self.department)
        response = self.client.post(f'/api/v1/customers/{customer.id}/transactions/', {
            'transaction_type': 'adjustment', 'amount': '-500'
        })
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LedgerTests(TestCase):
    """Test the customer credit ledger"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.customer = TestDataFactory.create_customer(self.department, credit_limit=Decimal('50000'))

    def test_charge_raises_balance(self):
        entry = record_credit_transaction(self.customer, 'charge', Decimal('12000'))
        self.assertEqual(entry.balance_after, Decimal('12000'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.outstanding_balance, Decimal('12000'))
        self.assertEqual(self.customer.available_credit, Decimal('38000'))

    def test_overpayment_caps_at_zero(self):
        record_credit_transaction(self.customer, 'charge', Decimal('5000'))
        entry = record_credit_transaction(self.customer, 'payment', Decimal('8000'))
        self.assertEqual(entry.balance_after, Decimal('0'))

    def test_non_positive_amount_is_refused(self):
        with self.assertRaises(LedgerError):
            record_credit_transaction(self.customer, 'payment', 0)
        self.assertEqual(CustomerCreditTransaction.objects.count(), 0)

    def test_unknown_type_is_refused(self):
        with self.assertRaises(LedgerError):
            record_credit_transaction(self.customer, 'gift', 100)

    def test_entry_defaults_to_customer_department(self):
        entry = record_credit_transaction(self.customer, 'charge', 100)
        self.assertEqual(entry.department, self.department)


class SupplierTests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list_suppliers(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'Kampala Wholesalers', 'phone': '0414000000'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        TestDataFactory.create_supplier()
        response = self.client.get('/api/v1/suppliers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
