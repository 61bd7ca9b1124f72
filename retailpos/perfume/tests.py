"""
Tests for scents, weighing, refill pricing and customer scent preferences
"""
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.perfume.models import PerfumePricingConfig
from retailpos.perfume.pricing import (
    PerfumeError, PricingConfig, bottle_cost_for, ml_from_weight, quote_refill, refill_price,
    scent_popularity, split_scent_mixture, stock_overview, stock_status, validate_weights,
    DEFAULT_BOTTLE_COST_RANGES
)


class PricingTests(SimpleTestCase):
    """Test refill arithmetic"""

    def test_ml_from_weight(self):
        self.assertEqual(ml_from_weight('150', '240', '0.9'), Decimal('100.0'))
        self.assertEqual(ml_from_weight('150', '150'), Decimal('0.0'))

    def test_weights_are_validated(self):
        with self.assertRaises(PerfumeError):
            validate_weights(0, 100)
        with self.assertRaises(PerfumeError):
            validate_weights(200, 100)

    def test_stock_status(self):
        self.assertEqual(stock_status(0), ('empty', 0))
        self.assertEqual(stock_status(50), ('low', 10))
        self.assertEqual(stock_status(750), ('ok', 100))

    def test_stock_overview(self):
        overview = stock_overview([Decimal('0'), Decimal('40'), Decimal('300')])
        self.assertEqual(overview['total_scents'], 3)
        self.assertEqual(overview['with_stock'], 2)
        self.assertEqual(overview['low_stock'], 1)
        self.assertEqual(overview['empty'], 1)

    def test_retail_uses_bottle_price_list(self):
        self.assertEqual(refill_price(30, 'retail', PricingConfig()), Decimal('24000'))

    def test_retail_falls_back_to_per_ml(self):
        self.assertEqual(refill_price(12, 'retail', PricingConfig()), Decimal('9600'))

    def test_wholesale_is_per_ml(self):
        self.assertEqual(refill_price(30, 'wholesale', PricingConfig()), Decimal('12000'))

    def test_bottle_cost_ranges(self):
        self.assertEqual(bottle_cost_for(10, DEFAULT_BOTTLE_COST_RANGES), Decimal('300'))
        self.assertEqual(bottle_cost_for(30, DEFAULT_BOTTLE_COST_RANGES), Decimal('500'))
        self.assertEqual(bottle_cost_for(30, None), Decimal('1000'))

    def test_quote_splits_bottle_between_scents(self):
        quote = quote_refill([('Oud', 1, Decimal('300')), ('Rose', 2, Decimal('50')), ('Musk', None, None)], 10)
        self.assertEqual(quote.ml_per_scent, Decimal('3.3'))
        self.assertEqual(quote.scent_mixture, 'Oud + Rose + Musk')
        self.assertEqual(quote.item_name, 'Oud + Rose + Musk (10ml)')
        self.assertEqual(quote.price, Decimal('8000'))
        self.assertEqual(len(quote.low_stock_warnings), 1)
        self.assertTrue(quote.is_fulfillable)

    def test_quote_flags_insufficient_scent(self):
        quote = quote_refill([('Amber', 5, Decimal('10'))], 30)
        self.assertFalse(quote.is_fulfillable)
        self.assertIn('Amber', quote.insufficient[0])

    def test_quote_refuses_duplicates_and_empty(self):
        with self.assertRaises(PerfumeError):
            quote_refill([('Oud', None, None), ('oud', None, None)], 30)
        with self.assertRaises(PerfumeError):
            quote_refill([], 30)
        with self.assertRaises(PerfumeError):
            quote_refill([('Oud', None, None)], 30, customer_type='vip')

    def test_cart_item(self):
        item = quote_refill([('Oud', 1, None)], 15, 'wholesale').as_cart_item()
        self.assertEqual(item['type'], 'perfume_refill')
        self.assertEqual(item['unit_price'], '6000')
        self.assertEqual(item['selected_scents'], [{'scent_id': 1, 'scent': 'Oud', 'ml': '15.0'}])

    def test_popularity(self):
        self.assertEqual(split_scent_mixture('Oud + Rose (30ml)'), ['Oud', 'Rose'])
        ranking = scent_popularity(['Oud + Rose (30ml)', 'Oud (10ml)', 'Musk'], limit=2)
        self.assertEqual(ranking[0], ('Oud', 2))

    def test_config_from_saved_model(self):
        config = PricingConfig.from_model(PerfumePricingConfig(
            retail_price_per_ml=Decimal('1000'),
            wholesale_price_per_ml=Decimal('500'),
            retail_bottle_pricing={'sizes': [{'ml': 30, 'price': 27000}]},
            bottle_cost_config={'ranges': []},
        ))
        self.assertEqual(refill_price(30, 'retail', config), Decimal('27000'))
        self.assertEqual(refill_price(50, 'retail', config), Decimal('50000'))
        self.assertEqual(config.bottle_cost_ranges, None)


class ScentEndpointTests(TestCase):
    """Test scent endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department(is_perfume_department=True)
        self.other_department = TestDataFactory.create_department(is_perfume_department=True)
        self.user = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_includes_shared_scents(self):
        TestDataFactory.create_scent(self.department, name='Oud')
        TestDataFactory.create_scent(None, name='Vanilla')
        TestDataFactory.create_scent(self.other_department, name='Hidden')
        response = self.client.get('/api/v1/perfume/scents/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['Oud', 'Vanilla'])

    def test_duplicate_scent_names_are_refused(self):
        TestDataFactory.create_scent(self.department, name='Oud')
        response = self.client.post('/api/v1/perfume/scents/', {'name': 'oud'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_creates_shared_scent(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/perfume/scents/', {'name': 'Sandalwood', 'is_global': True})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_global'])

    def test_staff_cannot_edit_shared_scent(self):
        scent = TestDataFactory.create_scent(None, name='Vanilla')
        response = self.client.patch(f'/api/v1/perfume/scents/{scent.id}/', {'description': 'Sweet'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_weigh_updates_stock(self):
        scent = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('0'))
        response = self.client.post(f'/api/v1/perfume/scents/{scent.id}/weigh/', {
            'empty_bottle_weight_g': '150', 'current_weight_g': '240'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        scent.refresh_from_db()
        self.assertEqual(scent.stock_ml, Decimal('100.0'))
        self.assertIsNotNone(scent.last_weighed_at)

    def test_weigh_rejects_light_bottle(self):
        scent = TestDataFactory.create_scent(self.department)
        response = self.client.post(f'/api/v1/perfume/scents/{scent.id}/weigh/', {
            'empty_bottle_weight_g': '150', 'current_weight_g': '100'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_overview(self):
        TestDataFactory.create_scent(self.department, stock_ml=Decimal('40'))
        TestDataFactory.create_scent(self.department, stock_ml=Decimal('400'))
        response = self.client.get('/api/v1/perfume/scents/overview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_ml'], 440.0)
        self.assertEqual(len(response.data['low_stock_scents']), 1)

    def test_refill_quote(self):
        oud = TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('300'))
        response = self.client.post('/api/v1/perfume/refill-quote/', {
            'scents': [{'scent_id': oud.id}, {'scent': 'Rose'}],
            'bottle_size_ml': 30,
            'customer_type': 'retail',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price'], 24000.0)
        self.assertEqual(response.data['ml_per_scent'], 15.0)
        self.assertTrue(response.data['can_fulfil'])

    def test_refill_quote_unknown_scent_id(self):
        response = self.client.post('/api/v1/perfume/refill-quote/', {
            'scents': [{'scent_id': 99999}], 'bottle_size_ml': 30
        })
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_pricing_defaults_then_manager_update(self):
        response = self.client.get('/api/v1/perfume/pricing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['retail_price_per_ml']), Decimal('800'))

        response = self.client.patch('/api/v1/perfume/pricing/', {'retail_price_per_ml': '900'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.manager)
        response = self.client.patch('/api/v1/perfume/pricing/', {'retail_price_per_ml': '900'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(PerfumePricingConfig.objects.get(department=self.department).retail_price_per_ml,
                         Decimal('900'))

    def test_customer_preferences(self):
        customer = TestDataFactory.create_customer(self.department)
        response = self.client.put(f'/api/v1/perfume/preferences/{customer.id}/', {
            'preferred_scents': ['Oud', 'Rose'], 'preferred_bottle_sizes': [30]
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/perfume/preferences/{customer.id}/')
        self.assertEqual(response.data['preferred_scents'], ['Oud', 'Rose'])

    def test_popularity_counts_completed_refills(self):
        TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('300'))
        for _ in range(2):
            TestDataFactory.create_sale(self.user, self.department, items=[{
                'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('10'),
                'customer_type': 'retail', 'selected_scents': [{'scent': 'Oud'}],
            }])
        response = self.client.get('/api/v1/perfume/scents/popularity/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['scents'], [{'name': 'Oud', 'count': 2}])
