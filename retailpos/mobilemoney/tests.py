"""
Tests for mobile money registrations, SIM cards, data packages and the dashboard
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.mobilemoney.models import ServiceRegistration, SimCardSettings
from retailpos.mobilemoney.sim_cards import normalize_provider


def make_registration(department, user=None, **fields):
    fields.setdefault('customer_name', f'Customer {TestDataFactory.random_string(4)}')
    fields.setdefault('customer_phone', '0772123456')
    return ServiceRegistration.objects.create(department=department, registered_by=user, **fields)


class ProviderTests(SimpleTestCase):

    def test_normalize_provider(self):
        self.assertEqual(normalize_provider('mtn'), 'MTN')
        self.assertEqual(normalize_provider(' AIRTEL '), 'Airtel')
        self.assertEqual(normalize_provider('Safaricom'), 'Airtel')
        self.assertEqual(normalize_provider(None), 'Airtel')


class RegistrationTests(TestCase):
    """Test service registration endpoints and SIM cards"""

    def setUp(self):
        self.department = TestDataFactory.create_department(is_mobile_money=True)
        self.other_department = TestDataFactory.create_department(is_mobile_money=True)
        self.user = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_registration(self):
        response = self.client.post('/api/v1/mobile-money/registrations/', {
            'service_type': 'sim_registration',
            'customer_name': 'Grace Namuli',
            'customer_phone': '+256 772 123 456',
            'customer_id_number': 'CM123456789',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['department'], self.department.id)
        self.assertEqual(response.data['registered_by'], self.user.id)
        self.assertEqual(response.data['service_type_label'], 'SIM REGISTRATION')

    def test_short_phone_is_rejected(self):
        response = self.client.post('/api/v1/mobile-money/registrations/', {
            'customer_name': 'Grace Namuli', 'customer_phone': '0772'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer_phone', response.data)

    def test_list_is_scoped_and_searchable(self):
        make_registration(self.department, customer_name='Peter Ouma')
        make_registration(self.department, customer_name='Sarah Akello')
        make_registration(self.other_department, customer_name='Peter Elsewhere')
        response = self.client.get('/api/v1/mobile-money/registrations/?search=peter')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r['customer_name'] for r in response.data], ['Peter Ouma'])

    def test_only_managers_delete(self):
        registration = make_registration(self.department)
        response = self.client.delete(f'/api/v1/mobile-money/registrations/{registration.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.manager)
        response = self.client.delete(f'/api/v1/mobile-money/registrations/{registration.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ServiceRegistration.objects.filter(pk=registration.id).exists())

    def test_single_card(self):
        registration = make_registration(self.department, customer_name='Grace Namuli')
        response = self.client.get(f'/api/v1/mobile-money/registrations/{registration.id}/card/?provider=mtn')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        html = response.content.decode()
        self.assertIn('Grace Namuli', html)
        self.assertIn('MTN', html)
        self.assertIn('Keep your SIM card PIN secure', html)

    def test_batch_cards(self):
        first = make_registration(self.department, customer_name='Grace Namuli')
        second = make_registration(self.department, customer_name='Peter Ouma')
        response = self.client.post('/api/v1/mobile-money/registrations/cards/', {
            'ids': [first.id, second.id], 'provider': 'Airtel'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        html = response.content.decode()
        self.assertIn('Grace Namuli', html)
        self.assertIn('Peter Ouma', html)

    def test_batch_cards_needs_ids(self):
        response = self.client.post('/api/v1/mobile-money/registrations/cards/', {'ids': []})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_batch_cards_of_other_department_are_not_found(self):
        mine = make_registration(self.department)
        theirs = make_registration(self.other_department)
        response = self.client.post('/api/v1/mobile-money/registrations/cards/', {'ids': [mine.id, theirs.id]})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DataPackageAndSettingsTests(TestCase):
    """Test data packages and SIM card settings"""

    def setUp(self):
        self.department = TestDataFactory.create_department(is_mobile_money=True)
        self.user = TestDataFactory.create_user(department=self.department)
        self.manager = TestDataFactory.create_user(role='manager', department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_data_package(self):
        response = self.client.post('/api/v1/mobile-money/data-packages/', {
            'name': 'Weekly Bundle', 'data_amount': '2', 'data_unit': 'GB', 'price': '10000',
            'validity_period': '7 days'
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/mobile-money/data-packages/?active=true')
        self.assertEqual(len(response.data), 1)

    def test_negative_price_is_rejected(self):
        response = self.client.post('/api/v1/mobile-money/data-packages/', {
            'name': 'Broken', 'data_amount': '1', 'price': '-5'
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_settings_defaults(self):
        response = self.client.get('/api/v1/mobile-money/sim-card-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('check_balance', response.data['help_codes'])
        self.assertEqual(len(response.data['sim_warnings']), 6)

    def test_only_managers_change_settings(self):
        payload = {'sim_warnings': ['Do not share your PIN']}
        response = self.client.patch('/api/v1/mobile-money/sim-card-settings/', payload)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.manager)
        response = self.client.patch('/api/v1/mobile-money/sim-card-settings/', payload)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(SimCardSettings.objects.get(department=self.department).sim_warnings,
                         ['Do not share your PIN'])

    def test_warnings_must_be_strings(self):
        self.client.authenticate_user(self.manager)
        response = self.client.patch('/api/v1/mobile-money/sim-card-settings/', {'sim_warnings': [1, 2]})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DashboardTests(TestCase):
    """Test the mobile money dashboard"""

    def setUp(self):
        cache.clear()
        self.department = TestDataFactory.create_department(is_mobile_money=True)
        self.user = TestDataFactory.create_user(department=self.department)
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_dashboard_totals(self):
        product = TestDataFactory.create_product(self.department, price=Decimal('5000'), stock=10)
        TestDataFactory.create_sale(self.user, self.department,
                                    items=[{'type': 'product', 'product_id': product.id, 'quantity': 2}],
                                    payment_method='mobile_money')
        make_registration(self.department, service_type='account_opening')

        response = self.client.get('/api/v1/mobile-money/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['today_sales'], 10000.0)
        self.assertEqual(response.data['today_transactions'], 1)
        self.assertEqual(response.data['today_by_payment_method']['mobile_money']['count'], 1)
        self.assertEqual(response.data['registrations_today'], 1)
        self.assertEqual(response.data['registrations_today_by_type'], {'account_opening': 1})

    def test_admin_sees_every_mobile_money_department(self):
        other = TestDataFactory.create_department(is_mobile_money=True)
        make_registration(self.department)
        make_registration(other)
        make_registration(TestDataFactory.create_department())
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/mobile-money/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['registrations_total'], 2)

    def test_user_without_department(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/mobile-money/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
