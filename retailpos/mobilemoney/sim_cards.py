"""Printable SIM cards handed to customers after a registration"""
from django.template.loader import render_to_string
from django.utils import timezone

from retailpos.departments.models import BusinessSettings
from retailpos.pos.receipts import whatsapp_qr_data_url
from .models import SimCardSettings, default_help_codes, default_internet_settings, default_sim_warnings

PROVIDERS = ('Airtel', 'MTN')
HELP_CODE_LABELS = {
    'check_balance': 'Check balance',
    'mobile_money': 'Mobile money',
    'customer_care': 'Customer care',
    'check_number': 'Check your number',
    'data_balance': 'Data balance',
}


def normalize_provider(value):
    """Case-insensitive provider match, Airtel when unknown"""
    for provider in PROVIDERS:
        if (value or '').strip().lower() == provider.lower():
            return provider
    return PROVIDERS[0]


def card_settings_for(department_id):
    """Saved settings, or unsaved defaults"""
    return (SimCardSettings.objects.filter(department_id=department_id).first()
            or SimCardSettings(department_id=department_id))


def build_card(registration, provider, business, card_settings, qr_code_url):
    help_codes = card_settings.help_codes or default_help_codes()
    return {
        'customer_name': registration.customer_name,
        'phone_number': registration.customer_phone,
        'registration_date': timezone.localtime(registration.created_at).strftime('%d %B %Y'),
        'service_type': registration.service_type_label,
        'provider': provider,
        'id_type': registration.get_customer_id_type_display(),
        'id_number': registration.customer_id_number or '',
        'business_name': business.business_name,
        'business_phone': business.business_phone or '',
        'whatsapp_number': business.whatsapp_number or '',
        'logo_url': card_settings.logo_url or business.logo_url or '',
        'help_codes': [(HELP_CODE_LABELS.get(key, key.replace('_', ' ').capitalize()), value)
                       for key, value in help_codes.items()],
        'internet_settings': card_settings.internet_settings or default_internet_settings(),
        'warnings': card_settings.sim_warnings or default_sim_warnings(),
        'qr_code_url': qr_code_url,
    }


def render_sim_cards(registrations, provider, department_id):
    """One HTML page holding a card per registration"""
    provider = normalize_provider(provider)
    business = BusinessSettings.for_department(department_id)
    card_settings = card_settings_for(department_id)
    qr_code_url = whatsapp_qr_data_url(business.whatsapp_number)
    cards = [build_card(r, provider, business, card_settings, qr_code_url) for r in registrations]
    return render_to_string('mobilemoney/sim_cards.html', {'cards': cards, 'provider': provider})
