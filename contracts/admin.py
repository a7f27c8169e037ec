from django.contrib import admin
from .models import Contract, Allowance, ContractAmendment, ContractAudit


class AllowanceInline(admin.TabularInline):
    model = Allowance
    extra = 1


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ('contract_id', 'employee_name', 'contract_type', 'start_date',
                    'end_date', 'status', 'base_salary', 'work_mode')
    list_filter = ('status', 'contract_type', 'pay_frequency', 'work_mode')
    search_fields = ('contract_id', 'employee_name', 'job_title')
    readonly_fields = ('created_at', 'updated_at', 'created_by')
    fieldsets = (
        ('Identification', {
            'fields': ('contract_id', 'employee_name', 'job_title')
        }),
        ('Contract Details', {
            'fields': ('contract_type', 'status', 'start_date', 'end_date')
        }),
        ('Compensation', {
            'fields': ('base_salary', 'currency', 'pay_frequency')
        }),
        ('Working Terms', {
            'fields': ('work_mode', 'probation_period_days', 'notice_period_days', 'working_hours_per_week')
        }),
        ('Audit Info', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
    inlines = [AllowanceInline]


@admin.register(ContractAmendment)
class ContractAmendmentAdmin(admin.ModelAdmin):
    """Read-mostly view; status only moves through the amendment API."""
    list_display = ('contract', 'amendment_number', 'amendment_type', 'title',
                    'status', 'effective_date', 'created_at')
    list_filter = ('status', 'amendment_type')
    search_fields = ('title', 'contract__contract_id', 'contract__employee_name')
    readonly_fields = ('contract', 'amendment_number', 'amendment_type', 'status',
                       'previous_value', 'new_value', 'requested_by', 'approved_by',
                       'approval_date', 'rejection_reason', 'applied_at',
                       'created_at', 'updated_at')

    # Only the descriptive fields are written back; status and decision
    # columns belong to the lifecycle service
    editable_fields = ('title', 'description', 'notes', 'effective_date')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        obj.save(update_fields=[*self.editable_fields, 'updated_at'])


@admin.register(ContractAudit)
class ContractAuditAdmin(admin.ModelAdmin):
    list_display = ('contract', 'action', 'performed_by', 'timestamp')
    list_filter = ('action',)
    readonly_fields = ('contract', 'action', 'performed_by', 'timestamp', 'metadata', 'details')
