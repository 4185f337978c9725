# consent/admin.py
from django.contrib import admin

from .models import ConsentRecord, ConsentScope


class ConsentScopeInline(admin.TabularInline):
    model = ConsentScope
    extra = 0
    can_delete = False
    readonly_fields = ('data_type', 'can_view', 'can_edit')


@admin.register(ConsentRecord)
class ConsentRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'granted_to_type', 'granted_to_id', 'consent_type', 'status', 'expires_at')
    list_filter = ('status', 'consent_type', 'granted_to_type')
    search_fields = ('patient__username', 'patient__email')
    readonly_fields = (
        'patient', 'granted_to_type', 'granted_to_id', 'consent_type', 'status',
        'expires_at', 'consent_method', 'ip_address', 'signature_data',
        'created_at', 'updated_at', 'revoked_at', 'revoked_reason'
    )
    inlines = [ConsentScopeInline]
    date_hierarchy = 'created_at'

    def has_delete_permission(self, request, obj=None):
        return False
