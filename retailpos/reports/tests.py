"""
Tests for report periods, the admin financial report, its delivery and the report endpoints
"""
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status

from retailpos.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from retailpos.departments.models import BusinessSettings
from retailpos.finance.models import Credit, Expense
from retailpos.pos.checkout import void_sale
from retailpos.reports.emails import report_subject, send_admin_report
from retailpos.reports.financials import (
    ReportError, build_admin_report, resolve_period, should_send_scheduled_report
)


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class ResolvePeriodTests(SimpleTestCase):
    """Test period names against a fixed day (Sunday 15 March 2026)"""

    today = date(2026, 3, 15)

    def test_current_month(self):
        self.assertEqual(resolve_period('current', self.today),
                         (date(2026, 3, 1), date(2026, 3, 31), 'March 2026'))

    def test_previous_month(self):
        self.assertEqual(resolve_period('previous', self.today),
                         (date(2026, 2, 1), date(2026, 2, 28), 'February 2026'))

    def test_previous_month_across_year(self):
        start, end, label = resolve_period('previous', date(2026, 1, 10))
        self.assertEqual((start, end), (date(2025, 12, 1), date(2025, 12, 31)))
        self.assertEqual(label, 'December 2025')

    def test_year_to_date(self):
        self.assertEqual(resolve_period('ytd', self.today),
                         (date(2026, 1, 1), date(2026, 3, 15), 'Year to Date (2026)'))

    def test_daily_is_yesterday(self):
        self.assertEqual(resolve_period('daily', self.today),
                         (date(2026, 3, 14), date(2026, 3, 14), 'Saturday, March 14, 2026'))

    def test_weekly_is_previous_seven_days(self):
        self.assertEqual(resolve_period('weekly', self.today),
                         (date(2026, 3, 8), date(2026, 3, 14), 'Week of Mar 08 - Mar 14, 2026'))

    def test_default_is_current(self):
        self.assertEqual(resolve_period(None, self.today)[2], 'March 2026')

    def test_unknown_period(self):
        with self.assertRaises(ReportError):
            resolve_period('fortnightly', self.today)


class ScheduleTests(SimpleTestCase):
    """Test the scheduled send window (2 March 2026 is a Monday)"""

    def test_daily_inside_window(self):
        self.assertEqual(should_send_scheduled_report('daily', None, utc(2026, 3, 2, 6, 0)), (True, 'current'))

    def test_outside_window(self):
        self.assertFalse(should_send_scheduled_report('daily', None, utc(2026, 3, 2, 4, 59))[0])
        self.assertFalse(should_send_scheduled_report('daily', None, utc(2026, 3, 2, 8, 0))[0])

    def test_once_per_day(self):
        now = utc(2026, 3, 2, 7, 30)
        self.assertFalse(should_send_scheduled_report('daily', utc(2026, 3, 2, 5, 0), now)[0])
        self.assertTrue(should_send_scheduled_report('daily', '2026-03-01T05:00:00+00:00', now)[0])

    def test_weekly_on_monday_only(self):
        self.assertTrue(should_send_scheduled_report('weekly', None, utc(2026, 3, 2, 6, 0))[0])
        self.assertFalse(should_send_scheduled_report('weekly', None, utc(2026, 3, 3, 6, 0))[0])

    def test_monthly_on_first_covers_previous_month(self):
        self.assertEqual(should_send_scheduled_report('monthly', None, utc(2026, 3, 1, 6, 0)), (True, 'previous'))
        self.assertFalse(should_send_scheduled_report('monthly', None, utc(2026, 3, 2, 6, 0))[0])

    def test_unreadable_last_sent_is_ignored(self):
        self.assertTrue(should_send_scheduled_report('daily', 'not a date', utc(2026, 3, 2, 6, 0))[0])


class AdminReportTests(TestCase):
    """Test the admin financial report figures"""

    def setUp(self):
        self.shop = TestDataFactory.create_department(name='Electronics')
        self.other = TestDataFactory.create_department(name='Hardware')
        self.user = TestDataFactory.create_user(department=self.shop)
        product = TestDataFactory.create_product(self.shop, price=Decimal('10000'), stock=50)
        items = [{'type': 'product', 'product_id': product.id, 'quantity': 3}]
        TestDataFactory.create_sale(self.user, self.shop, items=items)
        TestDataFactory.create_sale(self.user, self.shop, items=[dict(items[0], quantity=1)], payment_method='card',
                                    amount_paid=Decimal('10000'))
        voided = TestDataFactory.create_sale(self.user, self.shop, items=items)
        void_sale(voided, self.user, 'Test void')

        today = timezone.localdate()
        Expense.objects.create(department=self.shop, description='Rent', category='Rent',
                               amount=Decimal('4000'), expense_date=today, status='approved')
        Expense.objects.create(department=self.shop, description='Lunch', category='Meals',
                               amount=Decimal('9000'), expense_date=today, status='rejected')
        Credit.objects.create(department=self.shop, transaction_type='external_in', amount=Decimal('20000'),
                              purpose='Supplier advance', status='approved')
        Credit.objects.create(department=self.shop, transaction_type='interdepartmental',
                              from_department=self.shop, to_department=self.other,
                              amount=Decimal('5000'), purpose='Float')

    def test_summary_excludes_voided_sales_and_rejected_expenses(self):
        report = build_admin_report('current')
        summary = report['summary']
        self.assertEqual(summary['total_revenue'], 40000.0)
        self.assertEqual(summary['transactions'], 2)
        self.assertEqual(summary['total_expenses'], 4000.0)
        self.assertEqual(summary['gross_profit'], 16000.0)
        self.assertEqual(summary['net_income'], 12000.0)
        self.assertEqual(summary['gross_margin'], 40.0)

    def test_income_statement(self):
        statement = build_admin_report('current')['income_statement']
        self.assertEqual(statement['cash_sales'], 30000.0)
        self.assertEqual(statement['card_sales'], 10000.0)
        self.assertEqual(statement['cogs'], 24000.0)
        self.assertEqual(statement['expenses_by_category'], {'Rent': 4000.0})

    def test_balance_sheet_and_cash_flow(self):
        report = build_admin_report('current')
        self.assertEqual(report['balance_sheet']['credits_payable'], 20000.0)
        self.assertEqual(report['balance_sheet']['credits_receivable'], 5000.0)
        self.assertEqual(report['balance_sheet']['digital_receipts'], 10000.0)
        self.assertEqual(report['cash_flow']['operating'], 26000.0)
        self.assertEqual(report['cash_flow']['financing'], -15000.0)

    def test_departments_without_activity_are_left_out(self):
        departments = build_admin_report('current')['departments']
        self.assertEqual([d['name'] for d in departments], ['Electronics'])
        self.assertEqual(departments[0]['type'], 'Regular')
        self.assertEqual(departments[0]['sales_count'], 2)
        self.assertEqual(departments[0]['top_items'][0]['quantity'], 4)

    def test_subject(self):
        report = build_admin_report('current')
        subject = report_subject(report, 'UGX', test_mode=True)
        self.assertTrue(subject.startswith('[TEST] Financial Reports - '))
        self.assertIn('Revenue: UGX 40,000', subject)
        self.assertIn('Net Income: UGX 12,000', subject)


class SendAdminReportTests(TestCase):
    """Test report delivery"""

    def setUp(self):
        self.department = TestDataFactory.create_department()
        self.user = TestDataFactory.create_user(department=self.department)
        TestDataFactory.create_sale(self.user, self.department)

    def _settings(self, **fields):
        fields.setdefault('admin_report_email', 'owner@test.com')
        fields.setdefault('report_email_enabled', True)
        return TestDataFactory.create_business_settings(**fields)

    def test_disabled(self):
        self._settings(report_email_enabled=False)
        result = send_admin_report()
        self.assertEqual(result, {'sent': False, 'message': 'Email reports are disabled'})
        self.assertEqual(len(mail.outbox), 0)

    def test_no_recipient(self):
        self._settings(admin_report_email=None)
        result = send_admin_report()
        self.assertEqual(result['message'], 'No admin report email configured. Please set it in Settings.')

    def test_falls_back_to_admin_email(self):
        self._settings(admin_report_email=None, admin_email='boss@test.com')
        result = send_admin_report()
        self.assertTrue(result['sent'])
        self.assertEqual(mail.outbox[0].to, ['boss@test.com'])

    def test_test_mode_ignores_disabled_flag(self):
        self._settings(report_email_enabled=False)
        result = send_admin_report(test_mode=True)
        self.assertTrue(result['sent'])
        self.assertEqual(result['message'], 'Financial reports sent successfully')
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertTrue(message.subject.startswith('[TEST] Financial Reports - '))
        self.assertEqual(message.alternatives[0][1], 'text/html')
        self.assertNotIn('last_report_sent_at', BusinessSettings.get_global().settings_json)

    def test_scheduled_outside_window(self):
        self._settings()
        result = send_admin_report(scheduled=True, now=utc(2026, 3, 2, 12, 0))
        self.assertEqual(result, {'sent': False, 'message': 'Not scheduled to send. Frequency: daily'})

    def test_scheduled_sends_once_per_day(self):
        self._settings()
        now = utc(2026, 3, 2, 6, 0)
        result = send_admin_report(scheduled=True, now=now)
        self.assertTrue(result['sent'])
        self.assertEqual(BusinessSettings.get_global().settings_json['last_report_sent_at'], now.isoformat())

        result = send_admin_report(scheduled=True, now=utc(2026, 3, 2, 7, 0))
        self.assertFalse(result['sent'])
        self.assertEqual(len(mail.outbox), 1)

    def test_monthly_schedule_reports_previous_month(self):
        self._settings(report_email_frequency='monthly')
        result = send_admin_report(scheduled=True, now=utc(2026, 3, 1, 6, 0))
        self.assertTrue(result['sent'])
        self.assertEqual(result['period'], 'February 2026')

    def test_command(self):
        self._settings()
        out = StringIO()
        call_command('send_admin_report', test=True, stdout=out)
        self.assertIn('Financial reports sent successfully to owner@test.com', out.getvalue())
        self.assertEqual(len(mail.outbox), 1)

    def test_command_reports_skip(self):
        self._settings(report_email_enabled=False)
        out = StringIO()
        call_command('send_admin_report', stdout=out)
        self.assertIn('Email reports are disabled', out.getvalue())


class ReportEndpointTests(TestCase):
    """Test report endpoints"""

    def setUp(self):
        cache.clear()
        self.department = TestDataFactory.create_department(is_perfume_department=True)
        self.user = TestDataFactory.create_user(department=self.department)
        self.admin = TestDataFactory.create_admin()
        self.product = TestDataFactory.create_product(self.department, price=Decimal('5000'), stock=20)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _sell(self, quantity=1, payment_method='cash'):
        return TestDataFactory.create_sale(
            self.user, self.department,
            items=[{'type': 'product', 'product_id': self.product.id, 'quantity': quantity}],
            payment_method=payment_method,
        )

    def test_dashboard(self):
        self._sell(quantity=2)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['today_revenue'], 10000.0)
        self.assertEqual(response.data['today_sales_count'], 1)
        self.assertEqual(len(response.data['recent_sales']), 1)
        self.assertEqual(response.data['total_products'], 1)

    def test_user_without_department(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No department assigned')

    def test_sales_summary_excludes_voided(self):
        self._sell(quantity=2)
        void_sale(self._sell(quantity=1), self.user, 'Duplicate')
        response = self.client.get('/api/v1/reports/sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_sales'], 10000.0)
        self.assertEqual(response.data['summary']['total_items_sold'], 2)
        self.assertEqual(response.data['by_payment_method'][0]['payment_method'], 'cash')

    def test_sales_summary_rejects_bad_dates(self):
        response = self.client.get('/api/v1/reports/sales-summary/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_transactions(self):
        self._sell(payment_method='mobile_money')
        self._sell(payment_method='card')
        self._sell(payment_method='cash')
        response = self.client.get('/api/v1/reports/payment-transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total']['count'], 2)
        self.assertEqual(len(response.data['transactions']), 2)

    def test_perfume_revenue(self):
        TestDataFactory.create_scent(self.department, name='Oud', stock_ml=Decimal('300'))
        TestDataFactory.create_sale(self.user, self.department, items=[{
            'type': 'perfume_refill', 'quantity': 1, 'ml_amount': Decimal('30'), 'customer_type': 'retail',
            'selected_scents': [{'scent': 'Oud'}],
        }])
        response = self.client.get('/api/v1/reports/perfume-revenue/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_revenue'], 24000.0)
        self.assertEqual(response.data['total_ml_sold'], 30.0)
        self.assertEqual(response.data['bottle_costs'], 500.0)
        self.assertEqual(response.data['revenue_after_bottles'], 23500.0)
        self.assertEqual(response.data['retail']['count'], 1)
        self.assertEqual(response.data['wholesale']['count'], 0)

    def test_admin_report_is_admin_only(self):
        response = self.client.get('/api/v1/reports/admin-report/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_report(self):
        self._sell(quantity=2)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/admin-report/?period=current')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_revenue'], 10000.0)

        response = self.client.get('/api/v1/reports/admin-report/?period=fortnightly')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_report_preview(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/reports/admin-report/preview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/html'))

    def test_admin_report_send(self):
        TestDataFactory.create_business_settings(admin_report_email='owner@test.com')
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/reports/admin-report/send/', {'test_mode': True})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['sent'])
        self.assertEqual(len(mail.outbox), 1)
