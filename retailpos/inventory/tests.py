"""
Tests for stock movements, stock checks, adjustments and internal usage
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.inventory.models import InternalStockUsage
from retailpos.inventory.stock import (
    ScentDraw, StockError, StockLine, apply_adjustment, check_stock_availability,
    find_shortages, reduce_stock, restore_stock
)


class StockMovementTests(TestCase):
    """Test reduce/restore and adjustments"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)

    def test_reduce_quantity_product(self):
        product = TestDataFactory.create_product(self.department, stock=10)
        reduce_stock([StockLine(name=product.name, quantity=3, product=product)], self.department.id)
        product.refresh_from_db()
        self.assertEqual(product.stock, 7)

    def test_reduce_never_goes_negative(self):
        product = TestDataFactory.create_product(self.department, stock=2)
        reduce_stock([StockLine(name=product.name, quantity=5, product=product)], self.department.id)
        product.refresh_from_db()
        self.assertEqual(product.stock, 0)

    def test_reduce_ml_product_by_ml_times_quantity(self):
        product = TestDataFactory.create_product(self.department, tracking_type='ml', total_ml=Decimal('100'))
        reduce_stock([StockLine(name=product.name, quantity=2, product=product, ml_amount=Decimal('30'))],
                     self.department.id)
        product.refresh_from_db()
        self.assertEqual(product.total_ml, Decimal('40.00'))

    def test_reduce_variant_leaves_product_stock(self):
        product = TestDataFactory.create_product(self.department, stock=10)
        variant = TestDataFactory.create_variant(product, stock=4)
        reduce_stock([StockLine(name='v', quantity=3, product=product, variant=variant)], self.department.id)
        variant.refresh_from_db()
        product.refresh_from_db()
        self.assertEqual(variant.stock, 1)
        self.assertEqual(product.stock, 10)

    def test_reduce_scent_draws(self):
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('200'))
        line = StockLine(name='Oud (30ml)', quantity=2, scents=[ScentDraw(scent=oud, name='Oud', ml=Decimal('15'))])
        reduce_stock([line], self.department.id)
        oud.refresh_from_db()
        self.assertEqual(oud.stock_ml, Decimal('170.0'))

    def test_restore_puts_sold_stock_back(self):
        product = TestDataFactory.create_product(self.department, stock=10)
        sale = TestDataFactory.create_sale(self.user, self.department,
                                           items=[{'type': 'product', 'product_id': product.id, 'quantity': 4}])
        product.refresh_from_db()
        self.assertEqual(product.stock, 6)
        restore_stock(sale)
        product.refresh_from_db()
        self.assertEqual(product.stock, 10)

    def test_availability_checks(self):
        product = TestDataFactory.create_product(self.department, stock=3)
        self.assertEqual(check_stock_availability(product, 3), (True, 3))
        self.assertFalse(check_stock_availability(product, 4)[0])
        oil = TestDataFactory.create_product(self.department, tracking_type='ml', total_ml=Decimal('50'))
        self.assertTrue(check_stock_availability(oil, 1, ml_amount=Decimal('50'))[0])
        self.assertFalse(check_stock_availability(oil, 2, ml_amount=Decimal('30'))[0])

    def test_shortages_sum_scent_needs_across_lines(self):
        rose = TestDataFactory.create_scent(self.department, name='Rose', stock_ml=Decimal('20'))
        lines = [
            StockLine(name='a', scents=[ScentDraw(scent=rose, name='Rose', ml=Decimal('15'))]),
            StockLine(name='b', scents=[ScentDraw(scent=rose, name='Rose', ml=Decimal('10'))]),
        ]
        problems = find_shortages(lines)
        self.assertEqual(len(problems), 1)
        self.assertIn('Rose', problems[0])

    def test_adjustment_in_and_out(self):
        product = TestDataFactory.create_product(self.department, stock=5)
        self.assertEqual(apply_adjustment(product, 'in', 10), 15)
        self.assertEqual(apply_adjustment(product, 'out', 20), 0)

    def test_adjustment_validation(self):
        product = TestDataFactory.create_product(self.department)
        with self.assertRaises(StockError):
            apply_adjustment(product, 'in', 0)
        with self.assertRaises(StockError):
            apply_adjustment(product, 'sideways', 1)


class InventoryEndpointTests(TestCase):
    """Test inventory endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_stock_check(self):
        product = TestDataFactory.create_product(self.department, stock=2)
        response = self.client.post('/api/v1/inventory/stock-check/', {
            'items': [{'product_id': product.id, 'quantity': 3}]
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['all_available'])
        self.assertEqual(response.data['items'][0]['available'], 2.0)

    def test_stock_check_needs_items(self):
        response = self.client.post('/api/v1/inventory/stock-check/', {'items': []})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_low_stock_splits_critical_and_low(self):
        TestDataFactory.create_product(self.department, name='Gone', stock=0)
        TestDataFactory.create_product(self.department, name='Few', stock=3)
        TestDataFactory.create_product(self.department, name='Plenty', stock=40)
        response = self.client.get('/api/v1/inventory/low-stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['name'] for p in response.data['critical']], ['Gone'])
        self.assertEqual([p['name'] for p in response.data['low']], ['Few'])
        self.assertEqual(response.data['count'], 2)

    def test_products_with_variants_are_not_low_stock(self):
        product = TestDataFactory.create_product(self.department, stock=0)
        TestDataFactory.create_variant(product, stock=10)
        response = self.client.get('/api/v1/inventory/low-stock/')
        self.assertEqual(response.data['count'], 0)

    def test_stock_adjustment_is_recorded_and_audited(self):
        product = TestDataFactory.create_product(self.department, stock=5)
        response = self.client.post('/api/v1/inventory/adjustments/', {
            'product': product.id, 'adjustment_type': 'in', 'quantity': '12', 'reason': 'restock'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['stock_after']), Decimal('17'))
        product.refresh_from_db()
        self.assertEqual(product.stock, 17)
        self.assertTrue(AuditLog.objects.filter(action='stock_adjust', object_id=str(product.id)).exists())

    def test_internal_usage_needs_approval(self):
        product = TestDataFactory.create_product(self.department, stock=5)
        response = self.client.post('/api/v1/inventory/internal-usage/', {
            'product': product.id, 'quantity': 2, 'reason': 'Shop cleaning'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        usage_id = response.data['id']
        product.refresh_from_db()
        self.assertEqual(product.stock, 5)

        response = self.client.post(f'/api/v1/inventory/internal-usage/{usage_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/inventory/internal-usage/{usage_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')
        product.refresh_from_db()
        self.assertEqual(product.stock, 3)

        response = self.client.post(f'/api/v1/inventory/internal-usage/{usage_id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_internal_usage(self):
        product = TestDataFactory.create_product(self.department, stock=5)
        usage = InternalStockUsage.objects.create(product=product, department=self.department, quantity=1,
                                                  reason='Demo unit', requested_by=self.user)
        self.client.authenticate_user(self.manager)
        response = self.client.post(f'/api/v1/inventory/internal-usage/{usage.id}/reject/', {'notes': 'No'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'rejected')
        product.refresh_from_db()
        self.assertEqual(product.stock, 5)
