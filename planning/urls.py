"""
URL routing for the planning API.
"""

from django.urls import path
from .views import (
    PeriodicityValidateView,
    PeriodicityMatchView,
    PeriodicityOccurrencesView,
    ScheduleExpandView,
    CandidateSlotsView,
    DayOverviewView,
)

urlpatterns = [
    path('periodicity/validate/', PeriodicityValidateView.as_view(), name='periodicity-validate'),
    path('periodicity/matches/', PeriodicityMatchView.as_view(), name='periodicity-matches'),
    path('periodicity/occurrences/', PeriodicityOccurrencesView.as_view(), name='periodicity-occurrences'),
    path('schedules/expand/', ScheduleExpandView.as_view(), name='schedule-expand'),
    path('schedules/slots/', CandidateSlotsView.as_view(), name='schedule-slots'),
    path('schedules/day-overview/', DayOverviewView.as_view(), name='schedule-day-overview'),
]
