"""
Cart API views for customer-facing cart operations.

Carts are keyed by the guest id stored in the Django session.
"""

from rest_framework import viewsets, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
import logging

from .exceptions import InvalidCustomizationError
from .models import Cart, CartItem
from .serializers import (
    AddToCartSerializer,
    CartSerializer,
    UpdateCartItemSerializer,
)
from .services import CartService, CartSessionService

logger = logging.getLogger(__name__)


class CartViewSet(viewsets.ViewSet):
    """
    ViewSet for cart operations.

    Endpoints:
    - GET /api/cart/ - Retrieve current cart
    - POST /api/cart/add-item/ - Add one unit of a dish for a service date
    - PATCH /api/cart/update-item/{item_id}/ - Change a line's quantity by a delta
    - DELETE /api/cart/remove-item/{item_id}/ - Remove a line
    - DELETE /api/cart/clear/ - Clear all lines
    """

    permission_classes = [AllowAny]

    def get_service(self):
        return CartService()

    def _get_or_create_cart(self, request) -> Cart:
        session_id = CartSessionService.get_or_create_guest_id(request)
        return CartService.get_or_create_cart(session_id)

    def _cart_response(self, service, cart, status_code=status.HTTP_200_OK):
        cart.refresh_from_db()
        serializer = CartSerializer(cart, context={'notice': service.get_notice(cart)})
        return Response(serializer.data, status=status_code)

    def retrieve(self, request):
        """
        GET /api/cart/

        Retrieve the current cart with all lines and totals.
        """
        cart = self._get_or_create_cart(request)
        return self._cart_response(self.get_service(), cart)

    def add_item(self, request):
        """
        POST /api/cart/add-item/

        Request body:
        {
            "menu_item_code": "m-med-chicken",
            "service_date": "2024-03-04",
            "customization": {"base": "Brown rice"}
        }

        A past service date answers 400 with the cart and its notice.
        """
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = self._get_or_create_cart(request)
        service = self.get_service()

        try:
            line = service.add_item(
                cart=cart,
                menu_item=serializer.validated_data['menu_item_code'],
                service_date=serializer.validated_data['service_date'],
                customization=serializer.validated_data['customization'],
            )
        except InvalidCustomizationError as e:
            return Response(
                {"error": str(e), "details": e.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        if line is None:
            return self._cart_response(service, cart, status.HTTP_400_BAD_REQUEST)
        return self._cart_response(service, cart, status.HTTP_201_CREATED)

    def update_item(self, request, item_id=None):
        """
        PATCH /api/cart/update-item/{item_id}/

        Request body:
        {
            "delta": 1
        }

        A resulting quantity of 0 removes the line.
        """
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = self._get_or_create_cart(request)
        line = get_object_or_404(CartItem.objects.select_related('menu_item', 'cart'), id=item_id, cart=cart)

        service = self.get_service()
        service.update_line_quantity(line, serializer.validated_data['delta'])
        return self._cart_response(service, cart)

    def remove_item(self, request, item_id=None):
        """
        DELETE /api/cart/remove-item/{item_id}/

        Remove a line from the cart.
        """
        cart = self._get_or_create_cart(request)
        line = get_object_or_404(CartItem.objects.select_related('menu_item', 'cart'), id=item_id, cart=cart)

        service = self.get_service()
        service.remove_line(line)
        return self._cart_response(service, cart)

    def clear(self, request):
        """
        DELETE /api/cart/clear/

        Remove all lines from the cart.
        """
        cart = self._get_or_create_cart(request)
        service = self.get_service()
        service.clear(cart)
        return self._cart_response(service, cart)
