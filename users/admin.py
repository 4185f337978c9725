# users/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _
from .models import CustomUser, LawFirmProfile, MedicalProviderProfile


class CustomUserAdmin(UserAdmin):
    """Admin configuration for the CustomUser model"""
    list_display = ('username', 'email', 'first_name', 'last_name', 'user_type', 'is_staff')
    list_filter = ('user_type', 'is_staff', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')

    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        (_('Personal info'), {'fields': ('first_name', 'last_name', 'email', 'phone_number', 'date_of_birth')}),
        (_('Account type'), {'fields': ('user_type',)}),
        (_('Permissions'), {'fields': ('is_active', 'is_staff', 'is_superuser')}),
        (_('Important dates'), {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'email', 'password1', 'password2', 'user_type', 'is_staff', 'is_active'),
        }),
    )

    readonly_fields = ('last_login', 'date_joined')


admin.site.register(CustomUser, CustomUserAdmin)


@admin.register(LawFirmProfile)
class LawFirmProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'firm_name', 'firm_code')
    search_fields = ('firm_name', 'firm_code', 'user__email')


@admin.register(MedicalProviderProfile)
class MedicalProviderProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'provider_name', 'npi_number')
    search_fields = ('provider_name', 'npi_number', 'user__email')
