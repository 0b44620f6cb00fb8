from django.contrib import admin
from .models import ProcurementRequest


@admin.register(ProcurementRequest)
class ProcurementRequestAdmin(admin.ModelAdmin):
    list_display = ['item_description', 'vendor', 'total_cost', 'currency', 'status', 'purchase_status',
                    'requested_by', 'created_at']
    list_filter = ['status', 'purchase_status', 'cc', 'currency']
    search_fields = ['item_name', 'item_description', 'vendor', 'requested_by__email']
    ordering = ['-created_at']
    readonly_fields = ['total_cost', 'created_at', 'updated_at']
