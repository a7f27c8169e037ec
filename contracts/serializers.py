from rest_framework import serializers

from .models import Allowance, Contract, ContractAmendment


# The public API historically used camelCase bodies
CAMEL_CASE_ALIASES = {
    'amendmentType': 'amendment_type',
    'effectiveDate': 'effective_date',
    'previousValue': 'previous_value',
    'newValue': 'new_value',
    'rejectionReason': 'rejection_reason',
}


def normalize_input_keys(data):
    """Map camelCase request keys onto their snake_case field names."""
    if not hasattr(data, 'items'):
        return data
    normalized = {}
    for key, value in data.items():
        target = CAMEL_CASE_ALIASES.get(key, key)
        # Explicit snake_case wins when both spellings are sent
        if target in normalized and key != target:
            continue
        normalized[target] = value
    return normalized


class AllowanceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Allowance
        fields = ('id', 'name', 'type', 'amount')


class ContractSerializer(serializers.ModelSerializer):
    allowances = AllowanceSerializer(many=True, read_only=True)
    gross_salary = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Contract
        fields = (
            'id', 'contract_id', 'employee_name', 'job_title', 'contract_type', 'status',
            'start_date', 'end_date', 'base_salary', 'currency', 'pay_frequency', 'work_mode',
            'probation_period_days', 'notice_period_days', 'working_hours_per_week',
            'allowances', 'gross_salary', 'created_at', 'updated_at',
        )
        read_only_fields = fields


class ContractAmendmentSerializer(serializers.ModelSerializer):
    contract_number = serializers.CharField(source='contract.contract_id', read_only=True)

    class Meta:
        model = ContractAmendment
        fields = (
            'id', 'contract', 'contract_number', 'amendment_number', 'amendment_type',
            'title', 'description', 'previous_value', 'new_value', 'effective_date',
            'status', 'requested_by', 'approved_by', 'approval_date', 'rejection_reason',
            'applied_at', 'notes', 'created_at', 'updated_at',
        )
        read_only_fields = fields


class ContractAmendmentInputSerializer(serializers.Serializer):
    """Request body for creating an amendment"""

    amendment_type = serializers.ChoiceField(choices=ContractAmendment.AMENDMENT_TYPE_CHOICES)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    effective_date = serializers.DateField(
        input_formats=['iso-8601', '%Y-%m-%dT%H:%M:%SZ', '%Y-%m-%dT%H:%M:%S.%fZ']
    )
    previous_value = serializers.JSONField(required=False, allow_null=True)
    new_value = serializers.JSONField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_input_keys(data))

    def validate_previous_value(self, value):
        return self._validate_payload_container(value)

    def validate_new_value(self, value):
        return self._validate_payload_container(value)

    def _validate_payload_container(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError('Must be a JSON object.')
        return value


class ContractAmendmentRejectSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_input_keys(data))
