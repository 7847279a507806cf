"""
API tests for the planning endpoints.
"""

from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APISimpleTestCase

from .factories import template_payload

TUESDAYS = {
    'rep_unit': 'day',
    'rep_per_unit': 1,
    'constraints': {'day': {'type': 'SpecificDaysWeek', 'values': [1]}},
}

HOME = {
    'name': 'Home',
    'city': 'New York',
    'country': 'United States',
    'geoloc': {'latitude': 40.7128, 'longitude': -74.006},
}


class PeriodicityAPITests(APISimpleTestCase):
    """Test the periodicity endpoints."""

    def setUp(self):
        self.client = APIClient()

    def test_validate_periodicity(self):
        response = self.client.post('/api/periodicity/validate/', TUESDAYS, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'valid': True,
            'rep_unit': 'day',
            'rep_per_unit': 1,
            'is_special': False,
        })

    def test_validate_special_pattern(self):
        data = {'special_pattern': {'type': 'unique', 'date': '2026-06-01T10:00:00Z'}}
        response = self.client.post('/api/periodicity/validate/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_special'])
        self.assertIsNone(response.data['rep_per_unit'])

    def test_invalid_periodicity_reports_kind(self):
        """Test validation failures come back as 400 with the error code."""
        data = {'rep_unit': 'day'}
        response = self.client.post('/api/periodicity/validate/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], ['missing_required'])
        self.assertIn('rep_per_unit', response.data['non_field_errors'][0])

    def test_unknown_constraint_type(self):
        data = {**TUESDAYS, 'constraints': {'day': {'type': 'EveryFortnight'}}}
        response = self.client.post('/api/periodicity/validate/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('constraints', response.data)

    def test_match_keeps_offset(self):
        data = {'periodicity': TUESDAYS, 'date': '2026-01-13T09:00:00+01:00'}
        response = self.client.post('/api/periodicity/matches/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['date'], '2026-01-13T09:00:00+01:00')
        self.assertTrue(response.data['matches_constraints'])
        self.assertTrue(response.data['within_timeframe'])
        self.assertTrue(response.data['active'])

    def test_match_wrong_day(self):
        data = {'periodicity': TUESDAYS, 'date': '2026-01-14T09:00:00Z'}
        response = self.client.post('/api/periodicity/matches/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['matches_constraints'])
        self.assertFalse(response.data['active'])

    def test_occurrences(self):
        data = {
            'periodicity': TUESDAYS,
            'start': '2026-01-01T00:00:00Z',
            'end': '2026-02-01T00:00:00Z',
        }
        response = self.client.post('/api/periodicity/occurrences/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 4)
        self.assertEqual(response.data['occurrences'][0], '2026-01-06T00:00:00Z')

    @override_settings(SCHEDULING={'MAX_RANGE_DAYS': 31})
    def test_occurrence_window_too_long(self):
        data = {
            'periodicity': TUESDAYS,
            'start': '2026-01-01T00:00:00Z',
            'end': '2026-03-01T00:00:00Z',
        }
        response = self.client.post('/api/periodicity/occurrences/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('31 days', response.data['non_field_errors'][0])

    def test_occurrence_window_reversed(self):
        data = {
            'periodicity': TUESDAYS,
            'start': '2026-02-01T00:00:00Z',
            'end': '2026-01-01T00:00:00Z',
        }
        response = self.client.post('/api/periodicity/occurrences/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(SCHEDULING={})
class ScheduleAPITests(APISimpleTestCase):
    """Test the schedule endpoints with a Tuesday of the office week."""

    def setUp(self):
        self.client = APIClient()
        self.range = {
            'template': template_payload(),
            'start': '2026-01-13T00:00:00+01:00',
            'end': '2026-01-14T00:00:00+01:00',
        }

    def test_expand(self):
        response = self.client.post('/api/schedules/expand/', self.range, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['template'], 'Office week')

        blocks = response.data['blocks']
        self.assertEqual([b['label'] for b in blocks], ['Work', 'Lunch', 'Work'])
        self.assertEqual(blocks[0]['start'], '2026-01-13T09:00:00+01:00')
        self.assertEqual(blocks[0]['duration_minutes'], 180)
        self.assertEqual(blocks[0]['availability']['kind'], 'busy_but_flexible')
        self.assertEqual(blocks[0]['capabilities']['hands'], 'full')
        self.assertEqual(blocks[0]['location_constraint']['rule'], 'any')
        self.assertEqual(blocks[1]['priority'], 10)

    def test_expand_rejects_blank_template_name(self):
        payload = {**self.range, 'template': {**template_payload(), 'name': '   '}}
        response = self.client.post('/api/schedules/expand/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('template', response.data)

    def test_expand_rejects_invalid_rule(self):
        template = template_payload()
        template['rules'][0]['days'] = []
        response = self.client.post(
            '/api/schedules/expand/', {**self.range, 'template': template}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_slots_for_long_task(self):
        """Test a 30-minute task only fits the lunch break."""
        data = {**self.range, 'task': {'title': 'Call bank', 'duration_minutes': 30}}
        response = self.client.post('/api/schedules/slots/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['task'], 'Call bank')
        self.assertEqual(response.data['slots'], [{
            'start': '2026-01-13T12:00:00+01:00',
            'end': '2026-01-13T13:00:00+01:00',
            'label': 'Lunch',
        }])

    def test_slots_duration_from_periodicity(self):
        """Test a 10-minute periodic task also fits the busy work blocks."""
        periodicity = {**TUESDAYS, 'occurrence_settings': {'duration': 10}}
        data = {**self.range, 'task': {'title': 'Stretch', 'periodicity': periodicity}}
        response = self.client.post('/api/schedules/slots/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['label'] for s in response.data['slots']], ['Work', 'Lunch', 'Work'])

    def test_slots_with_current_location(self):
        task = {'title': 'Water plants', 'duration_minutes': 30, 'requires_location': True}

        response = self.client.post(
            '/api/schedules/slots/', {**self.range, 'task': task}, format='json'
        )
        self.assertEqual(response.data['slots'], [])

        response = self.client.post(
            '/api/schedules/slots/',
            {**self.range, 'task': task, 'current_location': HOME},
            format='json',
        )
        self.assertEqual(len(response.data['slots']), 1)

    def test_slots_rejects_unknown_level(self):
        data = {**self.range, 'task': {'title': 'Draw', 'duration_minutes': 5, 'hands': 'lots'}}
        response = self.client.post('/api/schedules/slots/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('task', response.data)

    def test_day_overview(self):
        data = {
            'template': template_payload(),
            'date': '2026-01-13T00:00:00+01:00',
            'tasks': [
                {'title': 'Call bank', 'duration_minutes': 30},
                {'title': 'Marathon', 'duration_minutes': 600},
            ],
        }
        response = self.client.post('/api/schedules/day-overview/', data, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['date'], '2026-01-13T00:00:00+01:00')
        self.assertEqual(len(response.data['time_blocks']), 3)

        suggestions = response.data['suggestions']
        self.assertEqual([s['task_title'] for s in suggestions], ['Call bank'])
        slot = suggestions[0]['slots'][0]
        self.assertEqual(slot['score'], 100)
        self.assertEqual(slot['reason'], 'Available slot at 12:00')
        self.assertEqual(slot['time_block']['label'], 'Lunch')
