"""
Contract amendment lifecycle: create, approve, reject, apply, history.

Status changes are compare-and-swap updates (``UPDATE ... WHERE status = X``);
an update that touches no rows is a lost race or an illegal transition,
never a success.
"""
import logging
import uuid
from datetime import date, datetime

from django.db import transaction
from django.db.models import Max
from django.utils import timezone
from django.utils.dateparse import parse_date

from .amendment_payloads import apply_payload_to_contract, validate_payload
from .exceptions import (
    AmendmentApplyError,
    AmendmentNotFound,
    AmendmentValidationError,
    InvalidStateTransition,
)
from .models import Contract, ContractAmendment

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("amendment_type", "title", "description")


def _as_uuid(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _coerce_effective_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            parsed = parse_date(value.strip())
        except ValueError:
            parsed = None
        if parsed is None:
            # Accept full ISO timestamps ("2025-01-01T00:00:00Z")
            try:
                parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
            except ValueError:
                parsed = None
        return parsed
    return None


def _validate_create_input(*, amendment_type, title, description, effective_date):
    errors = {}
    values = {"amendment_type": amendment_type, "title": title, "description": description}
    for field in REQUIRED_TEXT_FIELDS:
        value = values[field]
        if not isinstance(value, str) or not value.strip():
            errors[field] = ["This field is required."]

    valid_types = {choice for choice, _ in ContractAmendment.AMENDMENT_TYPE_CHOICES}
    if "amendment_type" not in errors and amendment_type not in valid_types:
        errors["amendment_type"] = [f"Must be one of: {', '.join(sorted(valid_types))}."]

    parsed_date = None
    if effective_date in (None, ""):
        errors["effective_date"] = ["This field is required."]
    else:
        parsed_date = _coerce_effective_date(effective_date)
        if parsed_date is None:
            errors["effective_date"] = ["Enter a valid date (YYYY-MM-DD)."]

    if errors:
        raise AmendmentValidationError(
            "amendment_type, title, description, and effective_date are required",
            errors=errors,
        )
    return parsed_date


def create_amendment(
    *,
    contract,
    amendment_type,
    title,
    description,
    effective_date,
    requested_by,
    previous_value=None,
    new_value=None,
    notes=None,
    db_alias="default",
):
    """
    Create a PENDING amendment for ``contract``.
    Validation runs before any write; nothing is stored on failure.
    """
    parsed_date = _validate_create_input(
        amendment_type=amendment_type,
        title=title,
        description=description,
        effective_date=effective_date,
    )
    previous_value = validate_payload(amendment_type, previous_value, "previous_value")
    new_value = validate_payload(amendment_type, new_value, "new_value", contract=contract)

    with transaction.atomic(using=db_alias):
        # Serialize amendment numbering per contract
        Contract.objects.using(db_alias).select_for_update().filter(pk=contract.pk).first()
        max_num = (
            ContractAmendment.objects.using(db_alias)
            .filter(contract_id=contract.pk)
            .aggregate(Max("amendment_number"))["amendment_number__max"]
        )
        amendment = ContractAmendment.objects.using(db_alias).create(
            contract=contract,
            amendment_number=(max_num or 0) + 1,
            amendment_type=amendment_type,
            title=title.strip(),
            description=description.strip(),
            previous_value=previous_value,
            new_value=new_value,
            effective_date=parsed_date,
            status=ContractAmendment.STATUS_PENDING,
            requested_by=requested_by,
            notes=notes or None,
        )
        contract.log_action(
            requested_by,
            "AMENDMENT_CREATED",
            metadata={
                "amendment_id": str(amendment.id),
                "amendment_number": amendment.amendment_number,
                "amendment_type": amendment_type,
            },
        )

    logger.info(
        "Amendment %s (#%s, %s) created for contract %s by user %s",
        amendment.id, amendment.amendment_number, amendment_type, contract.contract_id, requested_by,
    )
    return amendment


def _transition(amendment_id, *, from_status, to_status, db_alias, **changes):
    """
    Move an amendment from ``from_status`` to ``to_status`` in one conditional
    update. Raises AmendmentNotFound or InvalidStateTransition when no row
    matched.
    """
    if not ContractAmendment.can_transition(from_status, to_status):
        raise InvalidStateTransition(from_status, to_status)

    amendment_id = _as_uuid(amendment_id)
    if amendment_id is None:
        raise AmendmentNotFound()

    now = timezone.now()
    updated = (
        ContractAmendment.objects.using(db_alias)
        .filter(pk=amendment_id, status=from_status)
        .update(status=to_status, updated_at=now, **changes)
    )
    if updated:
        return ContractAmendment.objects.using(db_alias).select_related("contract").get(pk=amendment_id)

    current = (
        ContractAmendment.objects.using(db_alias)
        .filter(pk=amendment_id)
        .values_list("status", flat=True)
        .first()
    )
    if current is None:
        raise AmendmentNotFound()
    logger.warning(
        "Rejected %s -> %s for amendment %s: current status is %s",
        from_status, to_status, amendment_id, current,
    )
    raise InvalidStateTransition(current, to_status)


def approve_amendment(amendment_id, *, actor_id, db_alias="default"):
    """PENDING -> APPROVED, stamping the approving user."""
    with transaction.atomic(using=db_alias):
        amendment = _transition(
            amendment_id,
            from_status=ContractAmendment.STATUS_PENDING,
            to_status=ContractAmendment.STATUS_APPROVED,
            db_alias=db_alias,
            approved_by=actor_id,
            approval_date=timezone.now(),
        )
        amendment.contract.log_action(
            actor_id,
            "AMENDMENT_APPROVED",
            metadata={"amendment_id": str(amendment.id), "amendment_number": amendment.amendment_number},
        )
    logger.info("Amendment %s approved by user %s", amendment.id, actor_id)
    return amendment


def reject_amendment(amendment_id, *, actor_id, rejection_reason=None, db_alias="default"):
    """PENDING -> REJECTED. A missing reason is logged, not refused."""
    reason = rejection_reason.strip() if isinstance(rejection_reason, str) else None
    reason = reason or None

    with transaction.atomic(using=db_alias):
        amendment = _transition(
            amendment_id,
            from_status=ContractAmendment.STATUS_PENDING,
            to_status=ContractAmendment.STATUS_REJECTED,
            db_alias=db_alias,
            approved_by=actor_id,
            approval_date=timezone.now(),
            rejection_reason=reason,
        )
        amendment.contract.log_action(
            actor_id,
            "AMENDMENT_REJECTED",
            metadata={"amendment_id": str(amendment.id), "reason": reason},
        )
    if reason is None:
        logger.warning("Amendment %s rejected by user %s without a reason", amendment.id, actor_id)
    logger.info("Amendment %s rejected by user %s", amendment.id, actor_id)
    return amendment


def apply_amendment(amendment_id, *, actor_id=None, db_alias="default"):
    """
    APPROVED -> APPLIED, then write new_value onto the contract.
    Both happen in one transaction: if the contract update fails the
    amendment stays APPROVED.
    """
    with transaction.atomic(using=db_alias):
        amendment = _transition(
            amendment_id,
            from_status=ContractAmendment.STATUS_APPROVED,
            to_status=ContractAmendment.STATUS_APPLIED,
            db_alias=db_alias,
            applied_at=timezone.now(),
        )
        contract = Contract.objects.using(db_alias).select_for_update().get(pk=amendment.contract_id)
        try:
            changed_fields = apply_payload_to_contract(
                contract, amendment.amendment_type, amendment.new_value, db_alias=db_alias
            )
        except AmendmentApplyError as exc:
            logger.error(
                "Amendment %s could not be applied to contract %s: %s",
                amendment.id, contract.contract_id, exc.errors,
            )
            raise
        contract.log_action(
            actor_id,
            "AMENDMENT_APPLIED",
            metadata={
                "amendment_id": str(amendment.id),
                "amendment_type": amendment.amendment_type,
                "changed_fields": changed_fields,
            },
        )
        amendment.contract = contract

    logger.info(
        "Amendment %s applied to contract %s (changed: %s)",
        amendment.id, contract.contract_id, ", ".join(changed_fields) or "none",
    )
    return amendment


def get_amendment(amendment_id, db_alias="default"):
    amendment_id = _as_uuid(amendment_id)
    if amendment_id is None:
        raise AmendmentNotFound()
    amendment = (
        ContractAmendment.objects.using(db_alias)
        .select_related("contract")
        .filter(pk=amendment_id)
        .first()
    )
    if amendment is None:
        raise AmendmentNotFound()
    return amendment


def get_amendment_history(contract_id, db_alias="default"):
    """All amendments for a contract in creation order; empty list when none."""
    contract_id = _as_uuid(contract_id)
    if contract_id is None:
        return []
    return list(
        ContractAmendment.objects.using(db_alias)
        .select_related("contract")
        .filter(contract_id=contract_id)
        .order_by("created_at", "amendment_number")
    )
