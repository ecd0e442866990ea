"""
URL configuration for cart app.
"""

from django.urls import path
from .views import CartViewSet

app_name = 'cart'

# Cart endpoints
urlpatterns = [
    # GET /api/cart/ - Retrieve current cart
    path('', CartViewSet.as_view({'get': 'retrieve'}), name='cart-detail'),

    # POST /api/cart/add-item/ - Add a dish for a service date
    path('add-item/', CartViewSet.as_view({'post': 'add_item'}), name='cart-add-item'),

    # PATCH /api/cart/update-item/{item_id}/ - Change quantity by a delta
    path('update-item/<uuid:item_id>/', CartViewSet.as_view({'patch': 'update_item'}), name='cart-update-item'),

    # DELETE /api/cart/remove-item/{item_id}/ - Remove a line
    path('remove-item/<uuid:item_id>/', CartViewSet.as_view({'delete': 'remove_item'}), name='cart-remove-item'),

    # DELETE /api/cart/clear/ - Clear all lines
    path('clear/', CartViewSet.as_view({'delete': 'clear'}), name='cart-clear'),
]
