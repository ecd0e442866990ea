from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    CalendarEntrySerializer,
    CalendarQuerySerializer,
    OrderWindowStatusSerializer,
)
from .services import AvailabilityService


class OrderWindowStatusView(APIView):
    """Get the service day currently taking orders"""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        service = AvailabilityService.from_settings()
        serializer = OrderWindowStatusSerializer(service.active_order_info())
        return Response(serializer.data)


class ServiceCalendarView(APIView):
    """Get the classified calendar window"""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        """
        List every date from today through the horizon with its status

        Query params:
        - days: horizon in days (defaults to ORDER_WINDOW['CALENDAR_HORIZON_DAYS'])
        """
        query = CalendarQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {"error": "Invalid days parameter", "details": query.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        service = AvailabilityService.from_settings()
        now = service.clock.now()
        entries = service.calendar(query.validated_data.get('days'), now=now)

        return Response({
            'active_service_day': service.active_service_day(now),
            'timezone': service.config.timezone,
            'dates': CalendarEntrySerializer(entries, many=True).data,
        })
