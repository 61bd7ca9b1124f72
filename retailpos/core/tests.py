"""
Tests for authentication, staff management, department scoping, audit logs
and realtime cache invalidation
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from retailpos.core.cache_utils import cached_query, get_generation
from retailpos.core.models import AuditLog
from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.core.utils import (
    create_audit_log, resolve_department_id, scope_to_department, department_for_write, to_decimal
)
from retailpos.parties.models import Customer


def _request(user, path='/api/v1/customers/', **headers):
    request = Request(APIRequestFactory().get(path, **headers))
    request.user = user
    return request


class AuthTests(TestCase):
    """Test login and the current user endpoint"""

    def setUp(self):
        self.department = TestDataFactory.create_department(is_perfume_department=True)
        self.user = TestDataFactory.create_user(username='cashier1', department=self.department)
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'cashier1', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'cashier')

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'cashier1', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_includes_department_info(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_void_sales'])
        self.assertEqual(response.data['department_info']['id'], self.department.id)
        self.assertEqual(response.data['department_info']['kind'], 'Perfume')

    def test_unauthenticated_request_is_rejected(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserManagementTests(TestCase):
    """Test staff management endpoints"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_creates_cashier(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'newcashier',
            'password': 'Str0ng-Passw0rd!',
            'password_confirm': 'Str0ng-Passw0rd!',
            'role': 'cashier',
            'department': self.department.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['department'], self.department.id)

    def test_non_admin_staff_need_a_department(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'floating',
            'password': 'Str0ng-Passw0rd!',
            'password_confirm': 'Str0ng-Passw0rd!',
            'role': 'cashier',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('department', response.data)

    def test_cashier_cannot_list_users(self):
        cashier = TestDataFactory.create_user(department=self.department)
        self.client.authenticate_user(cashier)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DepartmentScopingTests(TestCase):
    """Test how requests resolve the department they act on"""

    def setUp(self):
        self.shop = TestDataFactory.create_department()
        self.other = TestDataFactory.create_department()
        self.admin = TestDataFactory.create_admin()
        self.cashier = TestDataFactory.create_user(department=self.shop)

    def test_admin_picks_department_from_query(self):
        request = _request(self.admin, f'/api/v1/customers/?department={self.other.id}')
        self.assertEqual(resolve_department_id(request), self.other.id)

    def test_admin_picks_department_from_header(self):
        request = _request(self.admin, HTTP_X_DEPARTMENT_ID=str(self.other.id))
        self.assertEqual(resolve_department_id(request), self.other.id)

    def test_admin_without_department_sees_everything(self):
        self.assertIsNone(resolve_department_id(_request(self.admin)))

    def test_cashier_is_pinned_to_own_department(self):
        request = _request(self.cashier, f'/api/v1/customers/?department={self.other.id}')
        self.assertEqual(resolve_department_id(request), self.shop.id)

    def test_invalid_department_value(self):
        request = _request(self.admin, '/api/v1/customers/?department=abc')
        with self.assertRaises(ValidationError):
            resolve_department_id(request)

    def test_scope_filters_to_department(self):
        mine = TestDataFactory.create_customer(department=self.shop)
        TestDataFactory.create_customer(department=self.other)
        scoped = scope_to_department(Customer.objects.all(), _request(self.cashier))
        self.assertEqual(list(scoped), [mine])

    def test_scope_without_department_is_empty_for_staff(self):
        loose = TestDataFactory.create_user(department=None)
        TestDataFactory.create_customer(department=self.shop)
        self.assertFalse(scope_to_department(Customer.objects.all(), _request(loose)).exists())

    def test_department_for_write_requires_a_department(self):
        with self.assertRaises(ValidationError):
            department_for_write(_request(self.admin))

    def test_to_decimal_rejects_junk(self):
        with self.assertRaises(ValidationError):
            to_decimal('12abc')
        self.assertEqual(str(to_decimal('12.50')), '12.50')


class AuditLogTests(TestCase):
    """Test audit log creation and visibility"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.other = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_audit_log_records_user(self):
        entry = create_audit_log(action='stock_adjust', model_name='Product', object_id=7, user=self.user,
                                 changes={'quantity': '3'}, department_id=self.department.id)
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.object_id, '7')

    def test_missing_fields_are_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Product', user=self.user))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_staff_only_see_their_own_entries(self):
        create_audit_log(action='create', model_name='Product', object_id=1, user=self.user)
        create_audit_log(action='create', model_name='Product', object_id=2, user=self.other)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['object_id'], '1')


class RealtimeTests(TestCase):
    """Test generation based cache invalidation"""

    def setUp(self):
        cache.clear()
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_saving_a_customer_bumps_its_topics(self):
        before = get_generation('total-customers')
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_customer(department=self.department)
        self.assertEqual(get_generation('total-customers'), before + 1)

    def test_cached_query_is_dropped_when_topic_moves(self):
        calls = []

        @cached_query(cache_ttl=60, key_prefix='test_customers', topics=('customers',))
        def count_customers():
            calls.append(1)
            return Customer.objects.count()

        self.assertEqual(count_customers(), 0)
        self.assertEqual(count_customers(), 0)
        self.assertEqual(len(calls), 1)

        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_customer(department=self.department)
        self.assertEqual(count_customers(), 1)
        self.assertEqual(len(calls), 2)

    def test_versions_endpoint_filters_topics(self):
        response = self.client.get('/api/v1/realtime/versions/?topics=sales,unknown')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(response.data['versions'].keys()), ['sales'])
