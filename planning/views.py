"""Views for the planning API."""

from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .matchers import PeriodicityMatcher
from .serializers import (
    CandidateSlotsSerializer,
    DayOverviewQuerySerializer,
    DayOverviewSerializer,
    OccurrenceQuerySerializer,
    OffsetDateTimeField,
    PeriodicityMatchSerializer,
    PeriodicitySerializer,
    ScheduleRangeSerializer,
    TimeBlockSerializer,
)


def _run_service(func, *args, **kwargs):
    """Call a service, answering caller misuse (ValueError) with HTTP 400."""
    try:
        return func(*args, **kwargs)
    except ValueError as exc:
        raise ValidationError({'non_field_errors': [str(exc)]})


class PeriodicityValidateView(APIView):
    """
    Validate a periodicity.

    POST /api/periodicity/validate/
    """

    def post(self, request):
        serializer = PeriodicitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        periodicity = serializer.validated_data
        return Response({
            'valid': True,
            'rep_unit': periodicity.rep_unit,
            'rep_per_unit': periodicity.rep_per_unit,
            'is_special': periodicity.is_special,
        })


class PeriodicityMatchView(APIView):
    """
    Check one date against a periodicity.

    POST /api/periodicity/matches/
    """

    def post(self, request):
        serializer = PeriodicityMatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        matcher = PeriodicityMatcher(data['periodicity'], data['week_start'])
        when = data['date']
        matches = matcher.matches_constraints(when)
        within = matcher.is_within_timeframe(when)

        return Response({
            'date': OffsetDateTimeField().to_representation(when),
            'matches_constraints': matches,
            'within_timeframe': within,
            'active': matches and within,
        })


class PeriodicityOccurrencesView(APIView):
    """
    List the active dates of a periodicity in a window.

    POST /api/periodicity/occurrences/
    """

    def post(self, request):
        serializer = OccurrenceQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        occurrences = _run_service(
            services.occurrence_dates_between,
            data['periodicity'],
            data['start'],
            data['end'],
            week_start=data['week_start']
        )

        field = OffsetDateTimeField()
        return Response({
            'count': len(occurrences),
            'occurrences': [field.to_representation(o) for o in occurrences],
        })


class ScheduleExpandView(APIView):
    """
    Expand a schedule template into time blocks.

    POST /api/schedules/expand/
    """

    def post(self, request):
        serializer = ScheduleRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        blocks = _run_service(
            services.expand_schedule,
            data['template'],
            data['start'],
            data['end']
        )

        return Response({
            'template': data['template'].name,
            'blocks': TimeBlockSerializer(blocks, many=True).data,
        })


class CandidateSlotsView(APIView):
    """
    Find the blocks of an expanded template a task fits in.

    POST /api/schedules/slots/
    """

    def post(self, request):
        serializer = CandidateSlotsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        blocks = _run_service(
            services.find_slots,
            data['template'],
            data['task'],
            data['start'],
            data['end'],
            current_location=data.get('current_location')
        )

        field = OffsetDateTimeField()
        return Response({
            'task': data['task'].title,
            'slots': [
                {
                    'start': field.to_representation(block.start),
                    'end': field.to_representation(block.end),
                    'label': block.label,
                }
                for block in blocks
            ],
        })


class DayOverviewView(APIView):
    """
    Expand one day and suggest slots for each task.

    POST /api/schedules/day-overview/
    """

    def post(self, request):
        serializer = DayOverviewQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        overview = _run_service(
            services.get_day_overview,
            data['template'],
            data['date'],
            data['tasks'],
            current_location=data.get('current_location')
        )

        return Response(DayOverviewSerializer(overview).data)
