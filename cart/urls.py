from django.urls import path
from . import views

app_name = 'cart'

urlpatterns = [
    path('', views.view_cart, name='cart'),
    path('add/<int:card_id>/', views.add_to_cart, name='add_to_cart'),
    path('update/<int:card_id>/', views.update_cart_quantity, name='update_cart_quantity'),
    path('remove/<int:card_id>/', views.remove_from_cart, name='remove_from_cart'),
    path('clear/', views.clear, name='clear'),
    path('checkout/', views.checkout, name='checkout'),
    path('thank-you/', views.thank_you, name='thank_you'),

    # Stripe
    path('stripe/checkout/<int:order_id>/', views.stripe_checkout, name='stripe_checkout'),
    path('stripe/webhook/', views.stripe_webhook, name='stripe_webhook'),
]
