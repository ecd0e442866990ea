from rest_framework import serializers

from .constants import DateStatus


class OrderWindowStatusSerializer(serializers.Serializer):
    """Serializer for the current order window"""
    now = serializers.DateTimeField()
    timezone = serializers.CharField()
    cutoff_hour = serializers.IntegerField()
    active_service_day = serializers.DateField()
    active_service_day_label = serializers.CharField()
    weekday = serializers.CharField()
    is_today = serializers.BooleanField()


class CalendarEntrySerializer(serializers.Serializer):
    date = serializers.DateField()
    status = serializers.ChoiceField(choices=DateStatus.choices)
    label = serializers.CharField()
    is_orderable = serializers.BooleanField()
    is_service_day = serializers.BooleanField()


class CalendarQuerySerializer(serializers.Serializer):
    """Validates query params for the calendar endpoint"""
    days = serializers.IntegerField(required=False, min_value=1, max_value=90)
