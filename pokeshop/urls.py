"""
URL configuration for the pokeshop project.

Public pages live in `shop`, the catalog-only pages in `browse`, the back
office under /admin/ and Django's own admin under /django-admin/.
"""
from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import path, include

from backoffice import api as backoffice_api

urlpatterns = [
    path('django-admin/', admin.site.urls),

    path('accounts/', include('accounts.urls', namespace='accounts')),
    path('profile/', include('userprofile.urls', namespace='userprofile')),
    path('cart/', include('cart.urls', namespace='cart')),
    path('orders/', include('orders.urls', namespace='orders')),
    path('admin/', include('backoffice.urls', namespace='backoffice')),
    path('api/admin/set-admin', backoffice_api.set_admin, name='api_set_admin'),
    path('', include('browse.urls', namespace='browse')),
    path('', include('shop.urls', namespace='shop')),

    path('password_change/', auth_views.PasswordChangeView.as_view(template_name='accounts/password_change.html'), name='password_change'),
    path('password_change/done/', auth_views.PasswordChangeDoneView.as_view(template_name='accounts/password_change_done.html'), name='password_change_done'),
    path('password_reset/', auth_views.PasswordResetView.as_view(
        template_name='accounts/password_reset_form.html',
        email_template_name='accounts/password_reset_email.txt',
        subject_template_name='accounts/password_reset_subject.txt',
    ), name='password_reset'),
    path('password_reset/done/', auth_views.PasswordResetDoneView.as_view(template_name='accounts/password_reset_done.html'), name='password_reset_done'),
    path('reset/<uidb64>/<token>/', auth_views.PasswordResetConfirmView.as_view(template_name='accounts/password_reset_confirm.html'), name='password_reset_confirm'),
    path('reset/done/', auth_views.PasswordResetCompleteView.as_view(template_name='accounts/password_reset_complete.html'), name='password_reset_complete'),
]

handler404 = 'pokeshop.views.page_not_found'
handler500 = 'pokeshop.views.server_error'
