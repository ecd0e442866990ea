from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from availability.services import AvailabilityService

from .serializers import DayMenuSerializer, MenuQuerySerializer
from .services import MenuService


class DayMenuView(APIView):
    """Get the menu served on a given day"""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        """
        Get a day's menu together with the day's order status

        Query params:
        - date: YYYY-MM-DD format (defaults to the active service day)
        """
        query = MenuQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {"error": "Invalid date format. Use YYYY-MM-DD"},
                status=status.HTTP_400_BAD_REQUEST
            )

        availability = AvailabilityService.from_settings()
        now = availability.clock.now()
        service_day = query.validated_data.get("date") or availability.active_service_day(now)
        day_status = availability.status_of(service_day, now=now)
        day_menu = MenuService.menu_for(service_day)

        return Response({
            "date": service_day.isoformat(),
            "label": availability.display_date(service_day),
            "status": day_status.value,
            "is_orderable": availability.is_orderable(day_status),
            "menu": DayMenuSerializer(day_menu).data if day_menu else None,
        })
