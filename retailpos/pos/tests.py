"""
Tests for checkout, voids, receipts and purchase history
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.inventory.stock import InsufficientStockError
from retailpos.parties.models import CustomerCreditTransaction
from retailpos.pos.checkout import SaleError, checkout, void_sale, reorder_cart
from retailpos.pos.models import Sale
from retailpos.pos.receipts import format_amount, render_receipt_text


class CheckoutTests(TestCase):
    """Test the checkout service"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.product = TestDataFactory.create_product(self.department, price=Decimal('2500'), stock=10)

    def _cart(self, quantity=2, **data):
        data.setdefault('payment_method', 'cash')
        data['items'] = [{'type': 'product', 'product_id': self.product.id, 'quantity': quantity}]
        return data

    def test_cash_sale_gives_change(self):
        sale = checkout(self._cart(amount_paid=Decimal('6000')), self.user, self.department.id)
        self.assertEqual(sale.total, Decimal('5000.00'))
        self.assertEqual(sale.change_amount, Decimal('1000.00'))
        self.assertTrue(sale.receipt_number.startswith('RCP-'))
        self.assertEqual(sale.items.count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)

    def test_receipt_numbers_increase(self):
        first = checkout(self._cart(quantity=1), self.user, self.department.id)
        second = checkout(self._cart(quantity=1), self.user, self.department.id)
        self.assertEqual(int(second.receipt_number[4:]), int(first.receipt_number[4:]) + 1)

    def test_invoice_number_only_for_invoices(self):
        sale = checkout(self._cart(quantity=1, is_invoice=True), self.user, self.department.id)
        self.assertTrue(sale.invoice_number.startswith('INV-'))
        sale = checkout(self._cart(quantity=1), self.user, self.department.id)
        self.assertIsNone(sale.invoice_number)

    def test_underpayment_is_refused(self):
        with self.assertRaises(SaleError):
            checkout(self._cart(amount_paid=Decimal('100')), self.user, self.department.id)
        self.assertEqual(Sale.objects.count(), 0)

    def test_discount_cannot_exceed_subtotal(self):
        with self.assertRaises(SaleError):
            checkout(self._cart(discount=Decimal('9000')), self.user, self.department.id)

    def test_insufficient_stock_rolls_back(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            checkout(self._cart(quantity=11), self.user, self.department.id)
        self.assertEqual(len(ctx.exception.problems), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        self.assertEqual(Sale.objects.count(), 0)

    def test_credit_sale_charges_ledger(self):
        customer = TestDataFactory.create_customer(self.department)
        sale = checkout(self._cart(payment_method='credit', customer=customer.id, amount_paid=Decimal('1000')),
                        self.user, self.department.id)
        customer.refresh_from_db()
        self.assertEqual(customer.outstanding_balance, Decimal('4000.00'))
        entry = CustomerCreditTransaction.objects.get(sale=sale)
        self.assertEqual(entry.transaction_type, 'charge')
        self.assertEqual(entry.amount, Decimal('4000.00'))

    def test_credit_sale_needs_customer(self):
        with self.assertRaises(SaleError):
            checkout(self._cart(payment_method='credit'), self.user, self.department.id)

    def test_credit_limit_is_enforced(self):
        customer = TestDataFactory.create_customer(self.department, credit_limit=Decimal('3000'))
        with self.assertRaises(SaleError):
            checkout(self._cart(payment_method='credit', customer=customer.id), self.user, self.department.id)

    def test_loan_is_charged_like_credit(self):
        customer = TestDataFactory.create_customer(self.department)
        checkout(self._cart(payment_method='cash', is_loan=True, customer=customer.id, amount_paid=Decimal('0')),
                 self.user, self.department.id)
        customer.refresh_from_db()
        self.assertEqual(customer.outstanding_balance, Decimal('5000.00'))

    def test_product_from_other_department_is_refused(self):
        other = TestDataFactory.create_product(TestDataFactory.create_department())
        with self.assertRaises(SaleError):
            checkout({'items': [{'product_id': other.id, 'quantity': 1}]}, self.user, self.department.id)

    def test_price_below_minimum_is_refused(self):
        self.product.min_price = Decimal('2000')
        self.product.allow_custom_price = True
        self.product.save()
        with self.assertRaises(SaleError):
            checkout({'items': [{'product_id': self.product.id, 'quantity': 1, 'unit_price': Decimal('1500')}]},
                     self.user, self.department.id)

    def test_fixed_price_cannot_be_overridden(self):
        with self.assertRaises(SaleError):
            checkout({'items': [{'product_id': self.product.id, 'quantity': 1, 'unit_price': Decimal('1')}]},
                     self.user, self.department.id)
        self.assertEqual(Sale.objects.count(), 0)

    def test_catalog_price_may_be_sent_back(self):
        sale = checkout({'items': [{'product_id': self.product.id, 'quantity': 1, 'unit_price': Decimal('2500')}]},
                        self.user, self.department.id)
        self.assertEqual(sale.total, Decimal('2500.00'))

    def test_custom_price_product_accepts_override(self):
        self.product.allow_custom_price = True
        self.product.save()
        sale = checkout({'items': [{'product_id': self.product.id, 'quantity': 1, 'unit_price': Decimal('2200')}]},
                        self.user, self.department.id)
        self.assertEqual(sale.total, Decimal('2200.00'))

    def test_admin_may_override_price(self):
        admin = TestDataFactory.create_admin()
        sale = checkout({'items': [{'product_id': self.product.id, 'quantity': 1, 'unit_price': Decimal('2000')}]},
                        admin, self.department.id)
        self.assertEqual(sale.total, Decimal('2000.00'))

    def test_variant_price_cannot_be_overridden(self):
        variant = TestDataFactory.create_variant(self.product, price=Decimal('3000'))
        with self.assertRaises(SaleError):
            checkout({'items': [{'variant_id': variant.id, 'quantity': 1, 'unit_price': Decimal('10')}]},
                     self.user, self.department.id)

    def test_negotiable_service_price(self):
        service = TestDataFactory.create_service(self.department, price=Decimal('5000'), is_negotiable=True)
        sale = checkout({'items': [{'type': 'service', 'service_id': service.id, 'quantity': 1,
                                    'unit_price': Decimal('4000')}]}, self.user, self.department.id)
        self.assertEqual(sale.total, Decimal('4000.00'))

    def test_refill_draws_scents(self):
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('200'))
        rose = TestDataFactory.create_scent(self.department, name='Rose', stock_ml=Decimal('200'))
        sale = checkout({'items': [{
            'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('30'), 'customer_type': 'retail',
            'selected_scents': [{'scent_id': oud.id}, {'scent_id': rose.id}],
        }]}, self.user, self.department.id)
        item = sale.items.get()
        self.assertEqual(item.name, 'Oud + Rose (30ml)')
        self.assertEqual(item.unit_price, Decimal('24000.00'))
        oud.refresh_from_db()
        rose.refresh_from_db()
        self.assertEqual(oud.stock_ml, Decimal('185.0'))
        self.assertEqual(rose.stock_ml, Decimal('185.0'))

    def test_refill_beyond_scent_stock_is_refused(self):
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('5'))
        with self.assertRaises(InsufficientStockError):
            checkout({'items': [{'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('30'),
                                 'selected_scents': [{'scent_id': oud.id}]}]}, self.user, self.department.id)


class VoidTests(TestCase):
    """Test voiding sales"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.product = TestDataFactory.create_product(self.department, price=Decimal('2000'), stock=10)

    def test_void_restores_stock_and_reverses_credit(self):
        customer = TestDataFactory.create_customer(self.department)
        sale = TestDataFactory.create_sale(
            self.user, self.department,
            items=[{'type': 'product', 'product_id': self.product.id, 'quantity': 3}],
            payment_method='credit', customer=customer.id,
        )
        customer.refresh_from_db()
        self.assertEqual(customer.outstanding_balance, Decimal('6000.00'))

        sale = void_sale(sale, self.user, 'Wrong item')
        self.assertEqual(sale.status, 'voided')
        self.assertEqual(sale.voided_by, self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        customer.refresh_from_db()
        self.assertEqual(customer.outstanding_balance, Decimal('0.00'))
        self.assertTrue(CustomerCreditTransaction.objects.filter(
            sale=sale, transaction_type='adjustment', amount=Decimal('-6000.00')
        ).exists())

    def test_void_needs_reason(self):
        sale = TestDataFactory.create_sale(self.user, self.department)
        with self.assertRaises(SaleError):
            void_sale(sale, self.user, '  ')

    def test_second_void_is_refused(self):
        sale = TestDataFactory.create_sale(self.user, self.department)
        void_sale(sale, self.user, 'Mistake')
        with self.assertRaises(SaleError):
            void_sale(sale, self.user, 'Again')

    def test_void_restores_scents(self):
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('100'))
        sale = TestDataFactory.create_sale(self.user, self.department, items=[{
            'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('20'),
            'selected_scents': [{'scent_id': oud.id}],
        }])
        oud.refresh_from_db()
        self.assertEqual(oud.stock_ml, Decimal('80.0'))
        void_sale(sale, self.user, 'Customer changed mind')
        oud.refresh_from_db()
        self.assertEqual(oud.stock_ml, Decimal('100.0'))

    def test_void_reverses_the_customer_originally_charged(self):
        alice = TestDataFactory.create_customer(self.department, name='Alice')
        bob = TestDataFactory.create_customer(self.department, name='Bob')
        sale = TestDataFactory.create_sale(
            self.user, self.department,
            items=[{'type': 'product', 'product_id': self.product.id, 'quantity': 1}],
            payment_method='credit', customer=alice.id,
        )
        Sale.objects.filter(pk=sale.pk).update(customer=bob)
        sale.refresh_from_db()

        void_sale(sale, self.user, 'Charged to the wrong account')
        alice.refresh_from_db()
        bob.refresh_from_db()
        self.assertEqual(alice.outstanding_balance, Decimal('0.00'))
        self.assertEqual(bob.outstanding_balance, Decimal('0.00'))
        self.assertFalse(CustomerCreditTransaction.objects.filter(customer=bob).exists())


class SaleEndpointTests(TestCase):
    """Test sale endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.cashier = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.product = TestDataFactory.create_product(self.department, name='Charger', price=Decimal('15000'),
                                                      stock=5)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.cashier)

    def test_checkout_endpoint(self):
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product_id': self.product.id, 'quantity': 2}],
            'payment_method': 'mobile_money',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total']), Decimal('30000'))
        self.assertEqual(response.data['department'], self.department.id)
        self.assertTrue(AuditLog.objects.filter(action='sale_create', object_id=str(response.data['id'])).exists())

    def test_checkout_reports_shortages(self):
        response = self.client.post('/api/v1/sales/', {'items': [{'product_id': self.product.id, 'quantity': 9}]})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient stock')
        self.assertEqual(len(response.data['details']), 1)

    def test_credit_checkout_without_customer(self):
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product_id': self.product.id, 'quantity': 1}], 'payment_method': 'credit'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data['error'])

    def test_empty_cart_is_refused(self):
        response = self.client.post('/api/v1/sales/', {'items': []})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sales_list_is_scoped(self):
        TestDataFactory.create_sale(self.cashier, self.department)
        other = TestDataFactory.create_department()
        TestDataFactory.create_sale(TestDataFactory.create_user(department=other), other)
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_metadata_edit_is_audited(self):
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'remarks': 'Delivered'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['remarks'], 'Delivered')
        self.assertTrue(AuditLog.objects.filter(action='sale_update', object_id=str(sale.id)).exists())

    def test_customer_of_credit_sale_cannot_be_changed(self):
        alice = TestDataFactory.create_customer(self.department, name='Alice')
        bob = TestDataFactory.create_customer(self.department, name='Bob')
        sale = TestDataFactory.create_sale(self.cashier, self.department,
                                           items=[{'product_id': self.product.id, 'quantity': 1}],
                                           payment_method='credit', customer=alice.id)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'customer': bob.id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        sale.refresh_from_db()
        self.assertEqual(sale.customer, alice)

    def test_customer_of_cash_sale_can_be_set(self):
        customer = TestDataFactory.create_customer(self.department)
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'customer': customer.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer'], customer.id)

    def test_marking_as_invoice_issues_sequence_number(self):
        invoiced = TestDataFactory.create_sale(self.cashier, self.department, is_invoice=True)
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {
            'is_invoice': True, 'invoice_number': 'MY-OWN-1'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_invoice'])
        self.assertEqual(int(response.data['invoice_number'][4:]), int(invoiced.invoice_number[4:]) + 1)
        self.assertTrue(response.data['invoice_number'].startswith('INV-'))

    def test_cashier_cannot_void(self):
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        response = self.client.post(f'/api/v1/sales/{sale.id}/void/', {'reason': 'Oops'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_voids_once(self):
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/sales/{sale.id}/void/', {'reason': 'Oops'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'voided')
        response = self.client.post(f'/api/v1/sales/{sale.id}/void/', {'reason': 'Oops'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_void_needs_reason_field(self):
        sale = TestDataFactory.create_sale(self.cashier, self.department)
        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/sales/{sale.id}/void/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_purchase_history_with_reorder(self):
        customer = TestDataFactory.create_customer(self.department)
        TestDataFactory.create_sale(self.cashier, self.department,
                                    items=[{'type': 'product', 'product_id': self.product.id, 'quantity': 1}],
                                    customer=customer.id)
        response = self.client.get(f'/api/v1/customers/{customer.id}/purchase-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer']['id'], customer.id)
        self.assertEqual(len(response.data['sales']), 1)
        self.assertEqual(response.data['sales'][0]['reorder'],
                         [{'type': 'product', 'name': 'Charger', 'quantity': 1, 'product_id': self.product.id}])


class ReceiptTests(TestCase):
    """Test receipt formats"""

    def setUp(self):
        self.department = TestDataFactory.create_department(name='Scent Corner')
        self.user = TestDataFactory.create_user(department=self.department)
        TestDataFactory.create_business_settings(business_name='Main Street Traders', whatsapp_number='+256700000000')
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('300'))
        rose = TestDataFactory.create_scent(self.department, name='Rose', stock_ml=Decimal('300'))
        self.sale = TestDataFactory.create_sale(self.user, self.department, items=[{
            'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('50'),
            'selected_scents': [{'scent_id': oud.id}, {'scent_id': rose.id}],
        }])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_format_amount(self):
        self.assertEqual(format_amount(1234567), '1,234,567')
        self.assertEqual(format_amount(Decimal('10.50')), '10.50')
        self.assertEqual(format_amount(None), '0')

    def test_text_receipt(self):
        text = render_receipt_text(self.sale)
        self.assertIn(f'Receipt: {self.sale.receipt_number}', text)
        self.assertIn('TOTAL:', text)
        self.assertIn('40,000 UGX', text)
        self.assertIn('Paid by: CASH', text)
        self.assertIn('THANK YOU!', text)
        self.assertIn('  - Oud', text)
        self.assertIn('  - Rose', text)
        self.assertTrue(all(len(line) <= 32 for line in text.splitlines()))

    def test_json_receipt(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business']['name'], 'Main Street Traders')
        self.assertEqual(response.data['items'][0]['scents'], ['Oud', 'Rose'])

    def test_html_receipt(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=html')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(self.sale.receipt_number, response.content.decode())

    def test_text_receipt_endpoint(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=text')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/plain'))

    def test_pdf_receipt(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=pdf')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_invoice(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=invoice')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_unknown_format(self):
        response = self.client.get(f'/api/v1/sales/{self.sale.id}/receipt/?format=docx')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reorder_cart_repeats_refill(self):
        cart = reorder_cart(self.sale)
        self.assertEqual(cart[0]['type'], 'perfume_refill')
        self.assertEqual([s['scent'] for s in cart[0]['selected_scents']], ['Oud', 'Rose'])
