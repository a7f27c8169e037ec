"""
Typed before/after payloads for contract amendments.

Each amendment type declares the shape of its ``previous_value`` and
``new_value`` with a serializer; the same serializer parses a stored
``new_value`` back into Python values when the amendment is applied.
"""
from collections.abc import Mapping
from decimal import Decimal

from rest_framework import serializers

from .exceptions import AmendmentApplyError, AmendmentValidationError
from .models import Allowance, Contract, ContractAmendment


class StrictKeysSerializer(serializers.Serializer):
    """Rejects keys that are not declared fields."""

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError({key: ['Unknown field.'] for key in unknown})
        return super().to_internal_value(data)


class AmendmentPayloadSerializer(StrictKeysSerializer):
    """Base for per-type payloads; an empty payload is refused."""

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Payload must contain at least one field.')
        return attrs


class CompensationPayloadSerializer(AmendmentPayloadSerializer):
    base_salary = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'), required=False)
    currency = serializers.RegexField(r'^[A-Za-z]{3}$', required=False)
    pay_frequency = serializers.ChoiceField(choices=Contract.PAY_FREQUENCY_CHOICES, required=False)

    def validate_currency(self, value):
        return value.upper()


class AllowanceEntrySerializer(StrictKeysSerializer):
    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=Allowance.TYPE_CHOICES, default='FIXED')
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class AllowancePayloadSerializer(AmendmentPayloadSerializer):
    allowances = AllowanceEntrySerializer(many=True, allow_empty=True)

    def validate_allowances(self, value):
        seen = set()
        for entry in value:
            key = entry['name'].strip().lower()
            if key in seen:
                raise serializers.ValidationError(f"Duplicate allowance: {entry['name']}.")
            seen.add(key)
        return value


class WorkModePayloadSerializer(AmendmentPayloadSerializer):
    work_mode = serializers.ChoiceField(choices=Contract.WORK_MODE_CHOICES)


class TermsPayloadSerializer(AmendmentPayloadSerializer):
    probation_period_days = serializers.IntegerField(min_value=0, required=False)
    notice_period_days = serializers.IntegerField(min_value=0, required=False)
    working_hours_per_week = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=168, required=False
    )


class PositionPayloadSerializer(AmendmentPayloadSerializer):
    job_title = serializers.CharField(max_length=255)


class TermExtensionPayloadSerializer(AmendmentPayloadSerializer):
    end_date = serializers.DateField()

    def validate_end_date(self, value):
        contract = self.context.get('contract')
        if contract is not None and contract.is_permanent:
            raise serializers.ValidationError('Permanent contracts have no end date to extend.')
        if contract is not None and contract.start_date and value <= contract.start_date:
            raise serializers.ValidationError('End date must be after the contract start date.')
        return value


PAYLOAD_SERIALIZERS = {
    ContractAmendment.TYPE_COMPENSATION: CompensationPayloadSerializer,
    ContractAmendment.TYPE_ALLOWANCE: AllowancePayloadSerializer,
    ContractAmendment.TYPE_WORK_MODE: WorkModePayloadSerializer,
    ContractAmendment.TYPE_TERMS: TermsPayloadSerializer,
    ContractAmendment.TYPE_POSITION: PositionPayloadSerializer,
    ContractAmendment.TYPE_TERM_EXTENSION: TermExtensionPayloadSerializer,
}

# Contract columns written directly from a validated payload
CONTRACT_FIELDS_BY_TYPE = {
    ContractAmendment.TYPE_COMPENSATION: ('base_salary', 'currency', 'pay_frequency'),
    ContractAmendment.TYPE_WORK_MODE: ('work_mode',),
    ContractAmendment.TYPE_TERMS: ('probation_period_days', 'notice_period_days', 'working_hours_per_week'),
    ContractAmendment.TYPE_POSITION: ('job_title',),
    ContractAmendment.TYPE_TERM_EXTENSION: ('end_date',),
}


def _payload_serializer(amendment_type, value, contract=None):
    serializer_class = PAYLOAD_SERIALIZERS.get(amendment_type)
    if serializer_class is None:
        raise AmendmentValidationError(
            f"Unknown amendment type: {amendment_type}.",
            errors={'amendment_type': ['Unknown amendment type.']},
        )
    return serializer_class(data=value, context={'contract': contract})


def validate_payload(amendment_type, value, field_name='new_value', contract=None):
    """
    Validate a before/after payload against the shape for ``amendment_type``.
    Returns a JSON-safe dict, or None when no payload was given.
    """
    if value is None:
        return None
    serializer = _payload_serializer(amendment_type, value, contract=contract)
    if not serializer.is_valid():
        raise AmendmentValidationError(
            f"Invalid {field_name} for {amendment_type} amendment.",
            errors={field_name: serializer.errors},
        )
    return dict(serializer.data)


def apply_payload_to_contract(contract, amendment_type, new_value, db_alias='default'):
    """
    Write an amendment's new_value onto its contract.
    Returns the list of contract fields that changed.
    """
    if not new_value:
        return []

    serializer = _payload_serializer(amendment_type, new_value, contract=contract)
    if not serializer.is_valid():
        raise AmendmentApplyError(
            f"Stored new_value conflicts with the current terms of contract {contract.contract_id}.",
            errors={'new_value': serializer.errors},
        )
    data = serializer.validated_data

    if amendment_type == ContractAmendment.TYPE_ALLOWANCE:
        Allowance.objects.using(db_alias).filter(contract=contract).delete()
        Allowance.objects.using(db_alias).bulk_create([
            Allowance(contract=contract, name=entry['name'], type=entry['type'], amount=entry['amount'])
            for entry in data['allowances']
        ])
        contract.save(using=db_alias, update_fields=['updated_at'])
        return ['allowances']

    changed = [name for name in CONTRACT_FIELDS_BY_TYPE.get(amendment_type, ()) if name in data]
    for name in changed:
        setattr(contract, name, data[name])
    if changed:
        contract.save(using=db_alias, update_fields=changed + ['updated_at'])
    return changed
