from django.contrib import admin

from .models import Complaint, ForwardRecord, Remark


class RemarkInline(admin.TabularInline):
    model = Remark
    extra = 0
    fields = ('created_at', 'author', 'author_role', 'status', 'transport_note', 'checking_note', 'remark')
    readonly_fields = fields
    can_delete = False


class ForwardRecordInline(admin.TabularInline):
    model = ForwardRecord
    extra = 0
    fields = ('created_at', 'previous_assignee', 'new_assignee', 'forwarded_by')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    """Read-mostly view; lifecycle changes go through the API so rules and notifications apply."""

    list_display = ['report_number', 'customer', 'category', 'brand', 'status', 'assigned_to', 'created_at']
    list_filter = ['status', 'warranty_status', 'category', 'state', 'created_at']
    search_fields = ['report_number', 'customer__username', 'customer__first_name', 'customer__last_name', 'model_no']
    raw_id_fields = ['customer', 'assigned_to']
    inlines = [ForwardRecordInline, RemarkInline]
    readonly_fields = [
        'report_number', 'status', 'assigned_to', 'warranty_file', 'receipt_file',
        'created_at', 'updated_at', 'created_by', 'updated_by',
    ]

    fieldsets = (
        ('Complaint', {
            'fields': ('report_number', 'customer', 'status', 'assigned_to')
        }),
        ('Product', {
            'fields': ('category', 'subcategory', 'brand', 'model_no', 'state')
        }),
        ('Warranty', {
            'fields': ('warranty_status', 'warranty_file', 'receipt_file')
        }),
        ('Details', {
            'fields': ('details',)
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
