"""Scent lookups shared by the perfume views, checkout and stock operations"""
from django.db.models import Q

from .models import Scent, PerfumePricingConfig
from .pricing import PricingConfig


def scents_for_department(department_id, active_only=True):
    """Department scents plus the shared ones"""
    queryset = Scent.objects.all()
    if department_id is not None:
        queryset = queryset.filter(Q(department_id=department_id) | Q(department__isnull=True))
    if active_only:
        queryset = queryset.filter(is_active=True)
    return queryset


def find_scent(department_id, scent_id=None, name=None, for_update=False):
    """
    Resolve a scent by id, falling back to a case-insensitive name match
    within the department (or the shared scents).
    """
    queryset = scents_for_department(department_id, active_only=False)
    if for_update:
        queryset = queryset.select_for_update()
    if scent_id:
        scent = queryset.filter(pk=scent_id).first()
        if scent:
            return scent
    if name:
        matches = list(queryset.filter(name__iexact=name.strip()))
        # Prefer the department's own scent over a shared one
        matches.sort(key=lambda s: s.department_id is None)
        return matches[0] if matches else None
    return None


def pricing_config_for(department_id):
    config = PerfumePricingConfig.objects.filter(department_id=department_id).first() if department_id else None
    return PricingConfig.from_model(config)
