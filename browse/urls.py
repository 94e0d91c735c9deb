from django.urls import path
from . import views

app_name = 'browse'

urlpatterns = [
    path('browse/', views.browse, name='browse'),
    path('tracker/', views.tracker, name='tracker'),
]
