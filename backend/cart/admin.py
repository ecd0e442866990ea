from django.contrib import admin

from .models import Cart, CartItem, CartSyncIntent


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ('customization_key', 'remote_item_key', 'added_at')


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('id', 'session_id', 'is_syncing', 'last_synced_at', 'last_activity')
    list_filter = ('is_syncing',)
    search_fields = ('session_id',)
    readonly_fields = ('remote_cart_token', 'sync_started_at', 'last_synced_at', 'created_at', 'updated_at')
    inlines = [CartItemInline]


@admin.register(CartSyncIntent)
class CartSyncIntentAdmin(admin.ModelAdmin):
    list_display = ('id', 'cart', 'action', 'status', 'remote_product_id', 'quantity', 'created_at', 'processed_at')
    list_filter = ('action', 'status')
    search_fields = ('cart__session_id', 'remote_item_key')
    readonly_fields = ('created_at', 'processed_at')
