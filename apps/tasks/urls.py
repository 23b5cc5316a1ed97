"""
URL configuration for tasks app.

Includes:
- Task list / create
- Task detail / update / delete
"""

from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    path('', views.task_list, name='task_list'),
    path('<int:pk>/', views.task_detail, name='task_detail'),
]
