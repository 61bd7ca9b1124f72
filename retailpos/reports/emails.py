"""Admin report rendering and delivery"""
import logging

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.core.mail.backends.base import BaseEmailBackend
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from retailpos.core.utils import create_audit_log
from retailpos.departments.models import BusinessSettings
from .financials import ReportError, build_admin_report, should_send_scheduled_report

logger = logging.getLogger('retailpos.reports')


class ResendEmailBackend(BaseEmailBackend):
    """Deliver mail through the Resend HTTP API (``EMAIL_BACKEND`` selects it)"""

    def __init__(self, fail_silently=False, api_key=None, api_url=None, timeout=15, **kwargs):
        super().__init__(fail_silently=fail_silently, **kwargs)
        self.api_key = api_key or settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.timeout = timeout

    def send_messages(self, email_messages):
        sent = 0
        for message in email_messages:
            try:
                self._send(message)
                sent += 1
            except requests.RequestException as e:
                logger.error(f"Resend delivery to {', '.join(message.to)} failed: {e}")
                if not self.fail_silently:
                    raise
        return sent

    def _send(self, message):
        payload = {
            'from': message.from_email,
            'to': list(message.to),
            'subject': message.subject,
            'text': message.body,
        }
        for content, mimetype in getattr(message, 'alternatives', []):
            if mimetype == 'text/html':
                payload['html'] = content
        if message.cc:
            payload['cc'] = list(message.cc)
        if message.bcc:
            payload['bcc'] = list(message.bcc)

        response = requests.post(
            self.api_url,
            json=payload,
            headers={'Authorization': f'Bearer {self.api_key}'},
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info(f"Resend accepted message {response.json().get('id')}")


def format_currency(value, currency='UGX'):
    return f"{currency} {value:,.0f}"


def render_admin_report_html(report, business=None):
    business = business or BusinessSettings.get_global() or BusinessSettings()
    return render_to_string('reports/admin_report.html', {
        'report': report,
        'business_name': business.business_name or 'Your Business',
        'currency': business.currency or 'UGX',
    })


def report_subject(report, currency='UGX', test_mode=False):
    summary = report['summary']
    subject = (f"Financial Reports - {report['period_label']} | "
               f"Revenue: {format_currency(summary['total_revenue'], currency)} | "
               f"Net Income: {format_currency(summary['net_income'], currency)}")
    return f"[TEST] {subject}" if test_mode else subject


def send_admin_report(period=None, test_mode=False, force=False, scheduled=False, now=None):
    """
    Build and email the admin financial report.

    Returns a dict with ``sent`` and ``message``. Disabled reporting, a
    missing recipient or a scheduled run outside its slot are reported in
    the message rather than raised. Delivery failures raise ReportError.
    """
    now = now or timezone.now()
    business = BusinessSettings.get_global() or BusinessSettings()

    if not test_mode and not force and not business.report_email_enabled:
        logger.info("Admin report skipped: email reports are disabled")
        return {'sent': False, 'message': 'Email reports are disabled'}

    recipient = business.report_recipient
    if not recipient:
        logger.info("Admin report skipped: no recipient configured")
        return {'sent': False, 'message': 'No admin report email configured. Please set it in Settings.'}

    frequency = business.report_email_frequency or 'daily'
    if scheduled and not force and not test_mode:
        last_sent_at = (business.settings_json or {}).get('last_report_sent_at')
        should_send, scheduled_period = should_send_scheduled_report(frequency, last_sent_at, now)
        if not should_send:
            return {'sent': False, 'message': f'Not scheduled to send. Frequency: {frequency}'}
        period = scheduled_period

    report = build_admin_report(period or 'current', today=timezone.localdate(now))
    currency = business.currency or 'UGX'
    html = render_admin_report_html(report, business)
    email = EmailMultiAlternatives(
        subject=report_subject(report, currency, test_mode),
        body=strip_tags(html),
        from_email=f"{business.business_name or 'Business'} <{_address_of(settings.REPORT_FROM_EMAIL)}>",
        to=[recipient],
    )
    email.attach_alternative(html, 'text/html')
    try:
        email.send()
    except Exception as e:
        logger.error(f"Admin report delivery to {recipient} failed: {e}")
        raise ReportError(f"Failed to send report: {e}")

    if scheduled or force:
        business.settings_json = dict(business.settings_json or {},
                                      last_report_sent_at=now.isoformat(),
                                      last_report_period=report['period_label'])
        business.save()

    logger.info(f"Admin report for {report['period_label']} sent to {recipient}")
    create_audit_log(action='report_sent', model_name='BusinessSettings', object_id=business.pk or 'global',
                     object_name=report['period_label'], changes={'recipient': recipient, 'test_mode': test_mode})
    return {
        'sent': True,
        'message': 'Financial reports sent successfully',
        'recipient': recipient,
        'period': report['period_label'],
        'scheduled': scheduled,
        'frequency': frequency,
        'summary': report['summary'],
    }


def _address_of(from_email):
    """'Reports <reports@x.com>' -> 'reports@x.com'"""
    if '<' in from_email and '>' in from_email:
        return from_email.split('<', 1)[1].split('>', 1)[0]
    return from_email
