from django.contrib import admin

from .models import GuestProfile


@admin.register(GuestProfile)
class GuestProfileAdmin(admin.ModelAdmin):
    list_display = ('email', 'phone', 'zip_code', 'session_id', 'updated_at')
    search_fields = ('email', 'phone', 'session_id')
    readonly_fields = ('created_at', 'updated_at')
