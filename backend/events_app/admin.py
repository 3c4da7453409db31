from django.contrib import admin
from .models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'date_time', 'venue', 'series_index', 'is_recurring_parent', 'is_cancelled', 'created_at']
    list_filter = ['is_recurring_parent', 'recurrence_pattern', 'is_cancelled', 'created_at']
    search_fields = ['title', 'description', 'venue']
    readonly_fields = ['created_at', 'parent_event', 'series_index']
    ordering = ['-created_at']
