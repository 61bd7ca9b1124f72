"""
URL configuration for the retail POS project.

Every app mounts its routes under the versioned API prefix.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Retail POS Admin Panel"
admin.site.site_title = "Retail POS Admin Portal"
admin.site.index_title = "Welcome to the Retail POS Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('retailpos.core.urls')),
    path('api/v1/', include('retailpos.departments.urls')),
    path('api/v1/', include('retailpos.catalog.urls')),
    path('api/v1/', include('retailpos.parties.urls')),
    path('api/v1/', include('retailpos.inventory.urls')),
    path('api/v1/', include('retailpos.perfume.urls')),
    path('api/v1/', include('retailpos.pos.urls')),
    path('api/v1/', include('retailpos.mobilemoney.urls')),
    path('api/v1/', include('retailpos.finance.urls')),
    path('api/v1/', include('retailpos.reports.urls')),
]
