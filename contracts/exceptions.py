"""Errors raised by the amendment lifecycle service."""
from rest_framework import status
from rest_framework.exceptions import APIException


class AmendmentError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Amendment operation failed.'
    default_code = 'INTERNAL_ERROR'


class AmendmentValidationError(AmendmentError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid amendment data.'
    default_code = 'VALIDATION_ERROR'

    def __init__(self, detail=None, errors=None):
        super().__init__(detail)
        self.errors = errors or {}


class AmendmentNotFound(AmendmentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Amendment not found.'
    default_code = 'NOT_FOUND'


class InvalidStateTransition(AmendmentError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Amendment cannot change to the requested status.'
    default_code = 'INVALID_STATE_TRANSITION'

    def __init__(self, current_status=None, target_status=None, detail=None):
        self.current_status = current_status
        self.target_status = target_status
        if detail is None and current_status and target_status:
            detail = f"Cannot move amendment from {current_status} to {target_status}."
        super().__init__(detail)


class AmendmentApplyError(AmendmentError):
    """An approved amendment's new_value could not be written to its contract."""
    default_detail = 'Amendment could not be applied to the contract.'

    def __init__(self, detail=None, errors=None):
        super().__init__(detail)
        self.errors = errors or {}
