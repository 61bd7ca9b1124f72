"""
Tests for products, variants, services, categories and shelf labels
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from retailpos.catalog.label_generator import generate_product_label
from retailpos.catalog.models import Product
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProductTests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.other_department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product_in_own_department(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'USB Cable',
            'price': '5000',
            'stock': 20,
            'department': self.other_department.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(pk=response.data['id'])
        self.assertEqual(product.department, self.department)
        self.assertTrue(product.internal_barcode.startswith('INT'))

    def test_sku_is_optional(self):
        response = self.client.post('/api/v1/products/', {'name': 'Loose Item', 'price': '100'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['sku'])

    def test_negative_stock_is_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Broken', 'price': '100', 'stock': -1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_min_price_cannot_exceed_max_price(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Phone', 'price': '100', 'min_price': '200', 'max_price': '150'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_scoped_and_hides_archived(self):
        mine = TestDataFactory.create_product(self.department, name='Charger')
        TestDataFactory.create_product(self.department, name='Old Model', is_archived=True)
        TestDataFactory.create_product(self.other_department, name='Not Mine')
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [mine.id])

    def test_search_matches_barcode(self):
        product = TestDataFactory.create_product(self.department, name='Earphones', barcode='6001234567890')
        TestDataFactory.create_product(self.department, name='Speaker')
        response = self.client.get('/api/v1/products/?search=6001234567890')
        self.assertEqual([p['id'] for p in response.data], [product.id])

    def test_paginated_list(self):
        for _ in range(3):
            TestDataFactory.create_product(self.department)
        response = self.client.get('/api/v1/products/?page=1&limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['next'], 2)

    def test_low_stock_filter(self):
        low = TestDataFactory.create_product(self.department, stock=2, min_stock=5)
        TestDataFactory.create_product(self.department, stock=50, min_stock=5)
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual([p['id'] for p in response.data], [low.id])
        self.assertTrue(response.data[0]['is_low_stock'])

    def test_other_department_product_is_forbidden(self):
        product = TestDataFactory.create_product(self.other_department)
        response = self.client.get(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_price_change_is_audited(self):
        product = TestDataFactory.create_product(self.department, price=Decimal('1000'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '1200'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLog.objects.get(action='price_change')
        self.assertEqual(entry.changes['price'], {'old': '1000.00', 'new': '1200.00'})

    def test_archive_and_unarchive(self):
        product = TestDataFactory.create_product(self.department)
        response = self.client.post(f'/api/v1/products/{product.id}/archive/')
        self.assertTrue(response.data['is_archived'])
        response = self.client.post(f'/api/v1/products/{product.id}/unarchive/')
        self.assertFalse(response.data['is_archived'])

    def test_product_with_sales_cannot_be_deleted(self):
        product = TestDataFactory.create_product(self.department)
        TestDataFactory.create_sale(self.user, self.department,
                                    items=[{'type': 'product', 'product_id': product.id, 'quantity': 1}])
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_label_is_png_data_url(self):
        product = TestDataFactory.create_product(self.department, name='Flash Disk', price=Decimal('25000'))
        response = self.client.get(f'/api/v1/products/{product.id}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['barcode'], product.internal_barcode)
        self.assertTrue(response.data['label'].startswith('data:image/png;base64,'))


class ProductModelTests(TestCase):
    """Test product pricing and valuation helpers"""

    def setUp(self):
        self.department = TestDataFactory.create_department()

    def test_effective_price_prefers_selling_price(self):
        product = TestDataFactory.create_product(self.department, price=Decimal('1000'), selling_price=Decimal('900'))
        self.assertEqual(product.effective_price, Decimal('900'))

    def test_unit_cost_falls_back_to_sixty_percent(self):
        product = TestDataFactory.create_product(self.department, price=Decimal('1000'))
        self.assertEqual(product.unit_cost, Decimal('600.0000'))
        product.cost_price = Decimal('450')
        self.assertEqual(product.unit_cost, Decimal('450'))

    def test_low_stock_threshold_defaults_to_five(self):
        product = TestDataFactory.create_product(self.department, min_stock=0)
        self.assertEqual(product.low_stock_threshold, 5)

    def test_label_for_long_names(self):
        label = generate_product_label('A' * 60, 'INT0001', price_text='UGX 1,000', department_name='Shop')
        self.assertTrue(label.startswith('data:image/png;base64,'))


class VariantAndServiceTests(TestCase):
    """Test variants, services and categories"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.product = TestDataFactory.create_product(self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_add_variant(self):
        response = self.client.post(f'/api/v1/products/{self.product.id}/variants/', {
            'name': '64GB', 'price': '450000', 'stock': 3
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product'], self.product.id)

    def test_variant_stock_cannot_be_negative(self):
        variant = TestDataFactory.create_variant(self.product)
        response = self.client.patch(f'/api/v1/variants/{variant.id}/', {'stock': -2})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_and_search_services(self):
        response = self.client.post('/api/v1/services/', {'name': 'Screen Repair', 'price': '60000',
                                                          'is_negotiable': True})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/services/?search=screen')
        self.assertEqual(len(response.data), 1)

    def test_categories_include_shared(self):
        TestDataFactory.create_category(self.department, name='Phones')
        TestDataFactory.create_category(None, name='General')
        TestDataFactory.create_category(TestDataFactory.create_department(), name='Elsewhere')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(sorted(c['name'] for c in response.data), ['General', 'Phones'])
