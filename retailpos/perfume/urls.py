from django.urls import path
from . import views

urlpatterns = [
    path('perfume/scents/', views.scent_list_create, name='scent-list-create'),
    path('perfume/scents/overview/', views.scent_overview, name='scent-overview'),
    path('perfume/scents/popularity/', views.scent_popularity, name='scent-popularity'),
    path('perfume/scents/<int:pk>/', views.scent_detail, name='scent-detail'),
    path('perfume/scents/<int:pk>/weigh/', views.scent_weigh, name='scent-weigh'),
    path('perfume/refill-quote/', views.refill_quote, name='refill-quote'),
    path('perfume/pricing/', views.pricing_config, name='perfume-pricing'),
    path('perfume/preferences/<int:customer_id>/', views.customer_preferences, name='customer-preferences'),
]
