from django.db import models


class DateStatus(models.TextChoices):
    """Classification of a calendar date relative to the current instant."""

    PAST = 'PAST', 'Past'
    TODAY_CLOSED = 'TODAY_CLOSED', 'Today (closed)'
    WEEKEND = 'WEEKEND', 'Weekend'
    ACTIVE = 'ACTIVE', 'Active'
    PREVIEW = 'PREVIEW', 'Preview'


WEEKDAY_NAMES = (
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
    'sunday',
)
