from django.urls import path
from . import views

urlpatterns = [
    path('mobile-money/registrations/', views.registration_list_create, name='registration-list-create'),
    path('mobile-money/registrations/cards/', views.registration_cards_batch, name='registration-cards-batch'),
    path('mobile-money/registrations/<int:pk>/', views.registration_detail, name='registration-detail'),
    path('mobile-money/registrations/<int:pk>/card/', views.registration_card, name='registration-card'),
    path('mobile-money/data-packages/', views.data_package_list_create, name='data-package-list-create'),
    path('mobile-money/data-packages/<int:pk>/', views.data_package_detail, name='data-package-detail'),
    path('mobile-money/sim-card-settings/', views.sim_card_settings, name='sim-card-settings'),
    path('mobile-money/dashboard/', views.mobile_money_dashboard, name='mobile-money-dashboard'),
]
