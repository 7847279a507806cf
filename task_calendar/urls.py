"""
URL configuration for task_calendar project.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('planning.urls')),
]
