"""
URL configuration for reminders app.
"""

from django.urls import path
from . import views

app_name = 'reminders'

urlpatterns = [
    path('', views.reminder_list, name='reminder_list'),
    path('stats/', views.reminder_stats, name='reminder_stats'),
    path('manual/', views.manual_reminder, name='manual_reminder'),
    path('task/<int:task_id>/', views.task_reminders, name='task_reminders'),
    path('<int:pk>/response/', views.reminder_response, name='reminder_response'),
]
