"""
URL configuration for notifications app.
"""

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('delivery/webhook/', views.delivery_webhook, name='delivery_webhook'),
    path('cron/daily-check/', views.daily_check, name='daily_check'),
]
