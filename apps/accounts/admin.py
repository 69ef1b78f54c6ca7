"""
Admin configuration for User model.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserCreationForm as DjangoUserCreationForm, UserChangeForm as DjangoUserChangeForm
from .models import User


class CustomUserCreationForm(DjangoUserCreationForm):
    class Meta(DjangoUserCreationForm.Meta):
        model = User
        fields = (
            'username', 'email', 'role', 'phone_number', 'ic_number', 'department', 'is_staff', 'is_active'
        )

    def clean(self):
        cleaned = super().clean()
        role = cleaned.get('role')
        if cleaned.get('ic_number') and role != User.ROLE_CUSTOMER:
            self.add_error('ic_number', 'Only customers carry an identity card number.')
        if cleaned.get('department') and role != User.ROLE_TECHNICIAN:
            self.add_error('department', 'Only technicians belong to a department.')
        return cleaned


class CustomUserChangeForm(DjangoUserChangeForm):
    class Meta(DjangoUserChangeForm.Meta):
        model = User
        fields = '__all__'


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = [
        'username', 'email', 'get_full_name', 'role', 'department', 'is_active', 'created_at'
    ]
    list_filter = [
        'role', 'is_active', 'is_staff', 'created_at'
    ]
    search_fields = ['username', 'email', 'first_name', 'last_name', 'ic_number', 'phone_number']
    ordering = ['-created_at']
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Role', {
            'fields': ('role', 'department')
        }),
        ('Additional Information', {
            'fields': ('phone_number', 'ic_number')
        }),
        ('Important Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'username', 'email', 'password1', 'password2',
                'role', 'phone_number', 'ic_number', 'department', 'is_staff', 'is_active'
            ),
        }),
    )

    readonly_fields = ['created_at', 'updated_at']

    actions = ['activate_users', 'deactivate_users']

    def activate_users(self, request, queryset):
        """Activate selected users."""
        count = queryset.update(is_active=True)
        self.message_user(request, f'{count} user(s) activated.')
    activate_users.short_description = 'Activate selected users'

    def deactivate_users(self, request, queryset):
        """Deactivate selected users. Their complaints stay assigned until an admin forwards them."""
        count = queryset.update(is_active=False)
        self.message_user(request, f'{count} user(s) deactivated.')
    deactivate_users.short_description = 'Deactivate selected users'
