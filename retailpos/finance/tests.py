"""
Tests for expenses, reconciliation, credits, the inbox and the cash drawer
"""
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status

from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.finance.cash import CashError, close_shift, count_currencies, open_shift, reconcile
from retailpos.finance.models import CashDrawerShift, Credit, Expense, InboxMessage, SuspendedRevenue


class CurrencyCountTests(SimpleTestCase):

    def test_counts_convert_to_base(self):
        total, rows = count_currencies({'UGX': '100000', 'USD': '20'})
        self.assertEqual(total, Decimal('175000'))
        self.assertEqual(rows[1]['amount_in_base'], Decimal('75000'))

    def test_unknown_currency(self):
        with self.assertRaises(CashError):
            count_currencies({'EUR': 10})

    def test_negative_count(self):
        with self.assertRaises(CashError):
            count_currencies({'UGX': -1})


class ExpenseTests(TestCase):
    """Test expense endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _create(self, amount='25000'):
        return self.client.post('/api/v1/expenses/', {
            'description': 'Shop rent', 'category': 'Rent', 'amount': amount,
            'expense_date': timezone.localdate().isoformat(),
        })

    def test_create_expense_is_pending(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['department'], self.department.id)

    def test_amount_must_be_positive(self):
        response = self._create(amount='0')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_totals(self):
        self._create('10000')
        self._create('5000')
        response = self.client.get('/api/v1/expenses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(Decimal(response.data['total_amount']), Decimal('15000'))

    def test_cashier_cannot_approve(self):
        expense_id = self._create().data['id']
        response = self.client.post(f'/api/v1/expenses/{expense_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_approves_once(self):
        expense_id = self._create().data['id']
        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/expenses/{expense_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        self.assertEqual(response.data['approved_by'], self.manager.id)
        self.assertTrue(AuditLog.objects.filter(action='expense_status', object_id=str(expense_id)).exists())

        response = self.client.post(f'/api/v1/expenses/{expense_id}/reject/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cashier_cannot_edit_decided_expense(self):
        expense_id = self._create().data['id']
        Expense.objects.filter(pk=expense_id).update(status='rejected')
        response = self.client.patch(f'/api/v1/expenses/{expense_id}/', {'amount': '1'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReconciliationTests(TestCase):
    """Test cash reconciliation and suspended revenue"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.product = TestDataFactory.create_product(self.department, price=Decimal('10000'), stock=20)
        TestDataFactory.create_sale(self.user, self.department,
                                    items=[{'type': 'product', 'product_id': self.product.id, 'quantity': 3}])
        self.today = timezone.localdate()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_exact_count_completes(self):
        reconciliation = reconcile(self.department.id, self.today, 'Alice', Decimal('30000'))
        self.assertEqual(reconciliation.system_cash, Decimal('30000.00'))
        self.assertEqual(reconciliation.discrepancy, Decimal('0'))
        self.assertEqual(reconciliation.status, 'completed')
        self.assertFalse(SuspendedRevenue.objects.exists())

    def test_shortage_stays_pending(self):
        reconciliation = reconcile(self.department.id, self.today, 'Alice', Decimal('28000'))
        self.assertEqual(reconciliation.discrepancy, Decimal('-2000.00'))
        self.assertEqual(reconciliation.status, 'pending')
        self.assertFalse(SuspendedRevenue.objects.exists())

    def test_non_cash_sales_are_ignored(self):
        TestDataFactory.create_sale(self.user, self.department,
                                    items=[{'type': 'product', 'product_id': self.product.id, 'quantity': 1}],
                                    payment_method='card')
        reconciliation = reconcile(self.department.id, self.today, 'Alice', Decimal('30000'))
        self.assertEqual(reconciliation.system_cash, Decimal('30000.00'))

    def test_surplus_is_suspended(self):
        response = self.client.post('/api/v1/reconciliations/', {
            'cashier_name': 'Alice', 'date': self.today.isoformat(), 'reported_cash': '32500'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['discrepancy']), Decimal('2500'))
        self.assertEqual(response.data['status'], 'pending')
        suspended = SuspendedRevenue.objects.get()
        self.assertEqual(suspended.amount, Decimal('2500.00'))
        self.assertEqual(suspended.reconciliation_id, response.data['id'])

        response = self.client.get('/api/v1/suspended-revenue/?status=pending')
        self.assertEqual(len(response.data), 1)

    def test_resolving_suspended_revenue_stamps_resolver(self):
        reconcile(self.department.id, self.today, 'Alice', Decimal('31000'))
        suspended = SuspendedRevenue.objects.get()
        response = self.client.patch(f'/api/v1/suspended-revenue/{suspended.id}/', {
            'status': 'resolved', 'investigation_notes': 'Customer overpaid'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['resolved_by'], self.user.id)
        self.assertIsNotNone(response.data['resolved_at'])


class CreditTests(TestCase):
    """Test credits between departments and the inbox"""

    def setUp(self):
        self.shop = TestDataFactory.create_department(name='Electronics')
        self.perfumes = TestDataFactory.create_department(name='Perfumes')
        self.user = TestDataFactory.create_user(department=self.shop)
        self.manager = TestDataFactory.create_user(role='manager', department=self.shop)
        self.perfume_user = TestDataFactory.create_user(department=self.perfumes)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _lend(self, **overrides):
        payload = {'transaction_type': 'interdepartmental', 'from_department': self.shop.id,
                   'to_department': self.perfumes.id, 'amount': '50000', 'purpose': 'Stock purchase'}
        payload.update(overrides)
        return self.client.post('/api/v1/credits/', payload)

    def test_create_interdepartmental_credit(self):
        response = self._lend()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(Decimal(response.data['balance']), Decimal('50000'))

    def test_interdepartmental_needs_two_departments(self):
        response = self._lend(to_department=None)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self._lend(to_department=self.shop.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_both_sides_see_the_credit(self):
        self._lend()
        self.client.authenticate_user(self.perfume_user)
        response = self.client.get('/api/v1/credits/')
        self.assertEqual(len(response.data), 1)

    def test_approve_then_settle(self):
        credit_id = self._lend().data['id']
        response = self.client.post(f'/api/v1/credits/{credit_id}/settle/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/credits/{credit_id}/settle/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/credits/{credit_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.post(f'/api/v1/credits/{credit_id}/settle/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        credit = Credit.objects.get(pk=credit_id)
        self.assertEqual(credit.status, 'settled')
        self.assertEqual(credit.settlement_status, 'settled')
        self.assertEqual(credit.paid_amount, credit.amount)

    def test_notify_lands_in_other_inbox(self):
        credit_id = self._lend().data['id']
        response = self.client.post(f'/api/v1/credits/{credit_id}/notify/', {'message': 'Payment due Friday'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['to_department'], self.perfumes.id)

        self.client.authenticate_user(self.perfume_user)
        response = self.client.get('/api/v1/inbox/')
        self.assertEqual(response.data['unread_count'], 1)
        message_id = response.data['results'][0]['id']

        response = self.client.post(f'/api/v1/inbox/{message_id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(InboxMessage.objects.get(pk=message_id).is_read)
        self.assertEqual(self.client.get('/api/v1/inbox/').data['unread_count'], 0)

    def test_notify_needs_message(self):
        credit_id = self._lend().data['id']
        response = self.client.post(f'/api/v1/credits/{credit_id}/notify/', {'message': '  '})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sender_cannot_read_recipient_inbox(self):
        credit_id = self._lend().data['id']
        message_id = self.client.post(f'/api/v1/credits/{credit_id}/notify/', {'message': 'Hi'}).data['id']
        response = self.client.post(f'/api/v1/inbox/{message_id}/read/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CashDrawerTests(TestCase):
    """Test the cash drawer shift lifecycle"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _sell_for_cash(self, amount):
        product = TestDataFactory.create_product(self.department, price=Decimal(amount), stock=5)
        TestDataFactory.create_sale(self.user, self.department,
                                    items=[{'type': 'product', 'product_id': product.id, 'quantity': 1}])

    def test_no_open_shift(self):
        response = self.client.get('/api/v1/cash-drawer/current/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['shift'])

    def test_only_one_open_shift(self):
        response = self.client.post('/api/v1/cash-drawer/open/', {'opening_float': '50000'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/cash-drawer/open/', {'opening_float': '50000'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_expected_cash_includes_sales(self):
        self.client.post('/api/v1/cash-drawer/open/', {'opening_float': '50000'})
        self._sell_for_cash('5000')
        response = self.client.get('/api/v1/cash-drawer/current/')
        self.assertEqual(response.data['cash_sales'], Decimal('5000'))
        self.assertEqual(response.data['expected_cash'], Decimal('55000'))

    def test_close_with_currency_counts(self):
        self.client.post('/api/v1/cash-drawer/open/', {'opening_float': '50000'})
        self._sell_for_cash('5000')
        response = self.client.post('/api/v1/cash-drawer/close/', {
            'currency_counts': {'UGX': '17500', 'USD': '10'},
            'cash_counted': True, 'cash_verified': True,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'closed')
        self.assertEqual(Decimal(response.data['discrepancy']), Decimal('0'))
        self.assertEqual(len(response.data['currency_counts']), 2)
        self.assertTrue(response.data['checklist']['cash_verified'])

        response = self.client.get('/api/v1/cash-drawer/history/')
        self.assertEqual(len(response.data), 1)

    def test_close_needs_checklist(self):
        self.client.post('/api/v1/cash-drawer/open/', {'opening_float': '1000'})
        response = self.client.post('/api/v1/cash-drawer/close/', {'closing_cash': '1000', 'cash_counted': True})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(CashDrawerShift.objects.get().status, 'open')

    def test_discrepancy_must_be_explained(self):
        shift = open_shift(self.department.id, Decimal('1000'), user=self.user)
        checklist = {'cash_counted': True, 'cash_verified': True}
        with self.assertRaises(CashError):
            close_shift(shift, user=self.user, closing_cash=Decimal('900'), checklist=checklist)
        checklist['discrepancy_explained'] = True
        shift = close_shift(shift, user=self.user, closing_cash=Decimal('900'), checklist=checklist)
        self.assertEqual(shift.discrepancy, Decimal('-100'))
        self.assertTrue(shift.checklist.discrepancy_explained)

    def test_close_without_open_shift(self):
        response = self.client.post('/api/v1/cash-drawer/close/', {
            'closing_cash': '0', 'cash_counted': True, 'cash_verified': True
        })
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_negative_float_is_refused(self):
        with self.assertRaises(CashError):
            open_shift(self.department.id, Decimal('-1'))
