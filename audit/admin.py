# audit/admin.py
from django.contrib import admin

from .models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ('id', 'timestamp', 'actor_type', 'actor_id', 'action', 'target_user_id', 'status')
    list_filter = ('action', 'actor_type', 'status')
    search_fields = ('action', 'entity_type', 'entity_id', 'ip_address')
    readonly_fields = (
        'timestamp', 'actor_id', 'actor_type', 'action', 'entity_type',
        'entity_id', 'target_user_id', 'status', 'metadata',
        'ip_address', 'user_agent'
    )
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
