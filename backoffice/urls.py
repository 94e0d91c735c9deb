from django.urls import path
from . import views

app_name = "backoffice"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),

    path("cards/", views.cards_list, name="cards_list"),
    path("cards/add/", views.card_add, name="card_add"),
    path("cards/import/", views.card_import, name="card_import"),
    path("cards/<int:card_id>/edit/", views.card_edit, name="card_edit"),
    path("cards/<int:card_id>/variant/", views.card_add_variant, name="card_add_variant"),
    path("cards/<int:card_id>/delete/", views.card_delete, name="card_delete"),
    path("cards/<int:card_id>/delete-all/", views.card_delete_all, name="card_delete_all"),

    path("users/", views.users_list, name="users_list"),
    path("users/<int:user_id>/toggle-admin/", views.user_toggle_admin, name="user_toggle_admin"),

    path("orders/", views.orders_list, name="orders_list"),
    path("orders/export.csv", views.orders_export_csv, name="orders_export_csv"),
    path("orders/<int:order_id>/", views.order_detail, name="order_detail"),
]
