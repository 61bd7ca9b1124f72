"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from retailpos.departments.models import Department, BusinessSettings
from retailpos.catalog.models import Category, Product, ProductVariant, Service
from retailpos.parties.models import Customer, Supplier
from retailpos.perfume.models import Scent
from retailpos.pos.checkout import checkout
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='cashier', department=None,
                    is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            department=department,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_admin(department=None):
        return TestDataFactory.create_user(role='admin', department=department)

    @staticmethod
    def create_department(name=None, is_perfume_department=False, is_mobile_money=False, is_active=True):
        """Create a test department"""
        if not name:
            name = f'Department_{TestDataFactory.random_string(6)}'
        return Department.objects.create(
            name=name,
            is_perfume_department=is_perfume_department,
            is_mobile_money=is_mobile_money,
            is_active=is_active
        )

    @staticmethod
    def create_business_settings(department=None, **fields):
        """Create global (no department) or department business settings"""
        fields.setdefault('business_name', f'Business_{TestDataFactory.random_string(6)}')
        return BusinessSettings.objects.create(department=department, **fields)

    @staticmethod
    def create_category(department, name=None, type='product'):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name, type=type, department=department)

    @staticmethod
    def create_product(department, name=None, sku=None, price=None, stock=10, min_stock=5,
                       tracking_type='quantity', total_ml=None, cost_price=None, **fields):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU_{TestDataFactory.random_string(8)}'
        if price is None:
            price = Decimal('1000.00')
        return Product.objects.create(
            department=department,
            name=name,
            sku=sku,
            price=price,
            cost_price=cost_price if cost_price is not None else Decimal('0.00'),
            stock=stock,
            min_stock=min_stock,
            tracking_type=tracking_type,
            total_ml=total_ml if total_ml is not None else Decimal('0.00'),
            **fields
        )

    @staticmethod
    def create_variant(product, name=None, price=None, stock=5):
        """Create a test product variant"""
        if not name:
            name = f'Variant_{TestDataFactory.random_string(4)}'
        return ProductVariant.objects.create(
            product=product,
            name=name,
            price=price if price is not None else Decimal('1500.00'),
            stock=stock
        )

    @staticmethod
    def create_service(department, name=None, price=None, is_negotiable=False):
        """Create a test service"""
        if not name:
            name = f'Service_{TestDataFactory.random_string(6)}'
        return Service.objects.create(
            department=department,
            name=name,
            price=price if price is not None else Decimal('5000.00'),
            is_negotiable=is_negotiable
        )

    @staticmethod
    def create_customer(department=None, name=None, phone=None, email=None, credit_limit=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'07{random.randint(10000000, 99999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(
            department=department,
            name=name,
            phone=phone,
            email=email,
            credit_limit=credit_limit if credit_limit is not None else Decimal('0.00')
        )

    @staticmethod
    def create_supplier(name=None, phone=None, email=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'07{random.randint(10000000, 99999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Supplier.objects.create(
            name=name,
            phone=phone,
            email=email
        )

    @staticmethod
    def create_scent(department=None, name=None, stock_ml=None):
        """Create a test scent; no department makes it a shared scent"""
        if not name:
            name = f'Scent_{TestDataFactory.random_string(6)}'
        return Scent.objects.create(
            department=department,
            name=name,
            stock_ml=stock_ml if stock_ml is not None else Decimal('500.0')
        )

    @staticmethod
    def create_sale(user, department, items=None, payment_method='cash', **data):
        """Check out a cart; one unit of a fresh product when no items are given"""
        if items is None:
            product = TestDataFactory.create_product(department)
            items = [{'type': 'product', 'product_id': product.id, 'quantity': 1}]
        data.update({'items': items, 'payment_method': payment_method})
        return checkout(data, user, department.id)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
