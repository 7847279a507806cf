"""
Tests for reading the SCHEDULING settings.
"""

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from planning.config import SchedulingConfig
from planning.expansion import GapPolicy
from planning.schedule import AvailabilityLevel, DeviceAccess


class SchedulingConfigTests(SimpleTestCase):

    @override_settings(SCHEDULING={})
    def test_defaults(self):
        config = SchedulingConfig.from_settings()
        self.assertEqual(config, SchedulingConfig())
        self.assertEqual(config.busy_flex_max_minutes, 15)
        self.assertEqual(config.busy_flex_max_hands, AvailabilityLevel.LIMITED)
        self.assertEqual(config.busy_flex_max_device, DeviceAccess.PHONE_ONLY)
        self.assertEqual(config.task_default_duration_minutes, 30)
        self.assertEqual(config.max_suggestions_per_task, 5)
        self.assertEqual(config.gap_policy, GapPolicy.OMIT)
        self.assertEqual(config.max_range_days, 366)

    @override_settings(SCHEDULING={
        'BUSY_FLEX_MAX_MINUTES': '20',
        'GAP_POLICY': 'available',
        'MAX_SUGGESTIONS_PER_TASK': 3,
    })
    def test_overrides_merge_with_defaults(self):
        """Test string numbers are accepted and unset keys keep defaults."""
        config = SchedulingConfig.from_settings()
        self.assertEqual(config.busy_flex_max_minutes, 20)
        self.assertEqual(config.gap_policy, GapPolicy.AVAILABLE)
        self.assertEqual(config.max_suggestions_per_task, 3)
        self.assertEqual(config.task_default_duration_minutes, 30)

    @override_settings(SCHEDULING={
        'BUSY_FLEX_MAX_HANDS_LEVEL': 5,
        'BUSY_FLEX_MAX_EYES_LEVEL': -1,
        'BUSY_FLEX_MAX_DEVICE_LEVEL': 2,
    })
    def test_levels_are_clamped(self):
        config = SchedulingConfig.from_settings()
        self.assertEqual(config.busy_flex_max_hands, AvailabilityLevel.FULL)
        self.assertEqual(config.busy_flex_max_eyes, AvailabilityLevel.NONE)
        self.assertEqual(config.busy_flex_max_device, DeviceAccess.COMPUTER)

    def test_invalid_values(self):
        """Test unusable settings raise ImproperlyConfigured."""
        bad_settings = [
            {'GAP_POLICY': 'sometimes'},
            {'BUSY_FLEX_MAX_MINUTES': 'soon'},
            {'MAX_RANGE_DAYS': 0},
            {'TASK_DEFAULT_DURATION_MINUTES': None},
        ]
        for scheduling in bad_settings:
            with self.subTest(scheduling=scheduling):
                with override_settings(SCHEDULING=scheduling):
                    with self.assertRaises(ImproperlyConfigured):
                        SchedulingConfig.from_settings()
