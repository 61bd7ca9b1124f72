"""
Realtime invalidation signals.

Each watched model feeds one or more topics. A committed save or delete
bumps the generation of those topics: cached queries keyed on them are
dropped, and clients polling ``realtime/versions/`` learn what to refetch.
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import bump_generation, get_generations

logger = logging.getLogger(__name__)

SALES_TOPICS = ('sales', 'today-sales', 'recent-sales', 'dashboard', 'reports', 'mobile-money-sales')
INVENTORY_TOPICS = ('products', 'low-stock', 'total-products', 'dashboard')
FINANCIAL_TOPICS = ('reports', 'dashboard')

# app_label.ModelName -> topics it feeds
MODEL_TOPICS = {
    'pos.Sale': SALES_TOPICS,
    'pos.SaleItem': ('sales', 'reports', 'perfume-revenue', 'scent-popularity'),
    'catalog.Product': INVENTORY_TOPICS,
    'catalog.ProductVariant': INVENTORY_TOPICS,
    'catalog.Service': ('services',),
    'inventory.InternalStockUsage': ('internal-usage',) + INVENTORY_TOPICS,
    'perfume.Scent': ('perfume-stock', 'perfume-scents'),
    'perfume.PerfumePricingConfig': ('perfume-pricing',),
    'parties.Customer': ('customers', 'total-customers', 'dashboard'),
    'finance.Expense': ('expenses',) + FINANCIAL_TOPICS,
    'finance.Credit': ('credits',) + FINANCIAL_TOPICS,
    'finance.Reconciliation': ('reconciliations',) + FINANCIAL_TOPICS,
    'finance.SuspendedRevenue': ('suspended-revenue',),
    'finance.CashDrawerShift': ('cash-drawer',),
    'mobilemoney.ServiceRegistration': ('registrations', 'mobile-money-dashboard'),
}

ALL_TOPICS = tuple(sorted({topic for topics in MODEL_TOPICS.values() for topic in topics}))

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_realtime_signals(topics=()):
    """
    Temporarily suspend invalidation signals for bulk operations.
    The given topics are bumped once when the block exits.
    """
    previous = is_suspended()
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous
        if topics and not previous:
            invalidate_topics(topics)


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_topics(topics):
    for topic in topics:
        try:
            bump_generation(topic)
        except Exception as e:
            logger.warning(f"Could not bump cache generation for {topic}: {e}")
    logger.debug(f"Invalidated topics: {', '.join(topics)}")


def current_versions(topics=None):
    return get_generations(topics or ALL_TOPICS)


@receiver([post_save, post_delete])
def invalidate_on_change(sender, instance, **kwargs):
    """Bump the topics a model feeds once the surrounding transaction commits"""
    if is_suspended():
        return

    topics = MODEL_TOPICS.get(sender._meta.label)
    if not topics:
        return

    transaction.on_commit(lambda: invalidate_topics(topics))
