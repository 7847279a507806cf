"""
Management command to print the time blocks of a schedule template.

The template file uses the same JSON shape as the
``/api/schedules/expand/`` endpoint's ``template`` field.
"""

import json
from dataclasses import replace
from datetime import datetime, time, timedelta

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from planning import services
from planning.config import SchedulingConfig
from planning.expansion import GapPolicy
from planning.serializers import ScheduleTemplateSerializer


class Command(BaseCommand):
    help = 'Expand a schedule template file into concrete time blocks'

    def add_arguments(self, parser):
        parser.add_argument(
            '--template',
            required=True,
            help='Path to a JSON schedule template'
        )
        parser.add_argument(
            '--start',
            required=True,
            help='Start date (YYYY-MM-DD) or ISO datetime with offset'
        )
        parser.add_argument(
            '--days',
            type=int,
            default=7,
            help='Number of days to expand (default: 7)'
        )
        parser.add_argument(
            '--gap-policy',
            choices=GapPolicy.values,
            help='Override SCHEDULING["GAP_POLICY"] for this run'
        )

    def handle(self, *args, **options):
        template = self._load_template(options['template'])
        start = self._parse_start(options['start'])
        if options['days'] < 1:
            raise CommandError('--days must be at least 1')
        end = start + timedelta(days=options['days'])

        try:
            config = SchedulingConfig.from_settings()
        except ImproperlyConfigured as exc:
            raise CommandError(str(exc))
        if options['gap_policy']:
            config = replace(config, gap_policy=GapPolicy(options['gap_policy']))

        self.stdout.write(
            f'Expanding "{template.name}" for {options["days"]} day(s) from {start:%Y-%m-%d %H:%M}...'
        )

        try:
            blocks = services.expand_schedule(template, start, end, config)
        except ValueError as exc:
            raise CommandError(str(exc))

        for block in blocks:
            self.stdout.write(
                f'{block.start:%Y-%m-%d %H:%M} - {block.end:%Y-%m-%d %H:%M}  '
                f'{block.availability}  {block.label or "-"}  (priority {block.priority})'
            )

        self.stdout.write(
            self.style.SUCCESS(f'Successfully expanded {len(blocks)} time block(s)')
        )

    def _load_template(self, path):
        try:
            with open(path, encoding='utf-8') as handle:
                payload = json.load(handle)
        except OSError as exc:
            raise CommandError(f'Cannot read template file: {exc}')
        except json.JSONDecodeError as exc:
            raise CommandError(f'Template file is not valid JSON: {exc}')

        serializer = ScheduleTemplateSerializer(data=payload)
        if not serializer.is_valid():
            raise CommandError(f'Invalid template: {serializer.errors}')
        return serializer.validated_data

    def _parse_start(self, value):
        moment = parse_datetime(value)
        if moment is None:
            day = parse_date(value)
            if day is None:
                raise CommandError(f'Invalid --start value: {value}')
            moment = datetime.combine(day, time.min)
        if timezone.is_naive(moment):
            moment = timezone.make_aware(moment)
        return moment
