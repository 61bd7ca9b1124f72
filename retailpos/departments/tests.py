"""
Tests for departments and business settings
"""
from django.test import TestCase
from rest_framework import status

from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.departments.models import BusinessSettings, Department


class DepartmentTests(TestCase):
    """Test department endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.shop = TestDataFactory.create_department(name='Electronics')
        self.perfume = TestDataFactory.create_department(name='Perfumes', is_perfume_department=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_lists_all_departments(self):
        response = self.client.get('/api/v1/departments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_cashier_only_sees_own_department(self):
        cashier = TestDataFactory.create_user(department=self.shop)
        self.client.authenticate_user(cashier)
        response = self.client.get('/api/v1/departments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d['id'] for d in response.data], [self.shop.id])

    def test_create_department(self):
        response = self.client.post('/api/v1/departments/', {'name': 'Mobile Money', 'is_mobile_money': True})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Department.objects.get(name='Mobile Money').is_mobile_money)

    def test_department_names_are_unique(self):
        response = self.client.post('/api/v1/departments/', {'name': 'Electronics'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cashier_cannot_create_department(self):
        cashier = TestDataFactory.create_user(department=self.shop)
        self.client.authenticate_user(cashier)
        response = self.client.post('/api/v1/departments/', {'name': 'Hardware'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_department_with_sales_cannot_be_deleted(self):
        TestDataFactory.create_sale(self.admin, self.shop)
        response = self.client.delete(f'/api/v1/departments/{self.shop.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Department.objects.filter(pk=self.shop.id).exists())

    def test_deactivate_department(self):
        response = self.client.patch(f'/api/v1/departments/{self.shop.id}/', {'is_active': False})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.shop.refresh_from_db()
        self.assertFalse(self.shop.is_active)


class BusinessSettingsTests(TestCase):
    """Test business settings fallback and permissions"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.shop = TestDataFactory.create_department()
        self.manager = TestDataFactory.create_user(role='manager', department=self.shop)
        self.cashier = TestDataFactory.create_user(department=self.shop)
        self.client = AuthenticatedAPIClient()

    def test_defaults_when_nothing_saved(self):
        settings_obj = BusinessSettings.for_department(self.shop.id)
        self.assertIsNone(settings_obj.pk)
        self.assertEqual(settings_obj.currency, 'UGX')

    def test_department_falls_back_to_global(self):
        TestDataFactory.create_business_settings(business_name='Main Street Traders')
        self.assertEqual(BusinessSettings.for_department(self.shop.id).business_name, 'Main Street Traders')

    def test_department_row_overrides_global(self):
        TestDataFactory.create_business_settings(business_name='Main Street Traders')
        TestDataFactory.create_business_settings(department=self.shop, business_name='Scent Corner')
        self.assertEqual(BusinessSettings.for_department(self.shop.id).business_name, 'Scent Corner')

    def test_report_recipient_prefers_report_email(self):
        settings_obj = BusinessSettings(admin_email='boss@test.com', admin_report_email='reports@test.com')
        self.assertEqual(settings_obj.report_recipient, 'reports@test.com')
        settings_obj.admin_report_email = None
        self.assertEqual(settings_obj.report_recipient, 'boss@test.com')

    def test_admin_updates_global_settings(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/v1/business-settings/', {'business_name': 'HQ'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(BusinessSettings.get_global().business_name, 'HQ')

    def test_manager_updates_own_department(self):
        self.client.authenticate_user(self.manager)
        response = self.client.patch('/api/v1/business-settings/', {'receipt_footer': 'No refunds'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(BusinessSettings.objects.get(department=self.shop).receipt_footer, 'No refunds')

    def test_manager_cannot_change_report_settings(self):
        self.client.authenticate_user(self.manager)
        response = self.client.patch('/api/v1/business-settings/', {'report_email_enabled': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cashier_cannot_change_settings(self):
        self.client.authenticate_user(self.cashier)
        response = self.client.patch('/api/v1/business-settings/', {'business_name': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cashier_reads_effective_settings(self):
        TestDataFactory.create_business_settings(business_name='Main Street Traders')
        self.client.authenticate_user(self.cashier)
        response = self.client.get('/api/v1/business-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'Main Street Traders')
