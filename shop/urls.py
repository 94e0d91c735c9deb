from django.urls import path
from . import views

app_name = 'shop'

urlpatterns = [
    path('', views.home, name='home'),
    path('shop/', views.shop_index, name='shop'),
    path('shop/all-cards/', views.all_cards, name='all_cards'),
    path('shop/featured/', views.featured, name='featured'),
    path('shop/sets/<path:set_name>/', views.set_detail, name='set_detail'),
    path('shop/cards/<int:card_id>/', views.card_detail, name='card_detail'),
]
