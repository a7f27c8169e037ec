import logging

from rest_framework import viewsets, permissions, status
from rest_framework.decorators import action

from accounts.rbac import AmendmentAction, can_perform, get_user_role
from accounts.utils import api_response
from . import services
from .exceptions import AmendmentError
from .models import Contract
from .serializers import (
    ContractAmendmentInputSerializer,
    ContractAmendmentRejectSerializer,
    ContractAmendmentSerializer,
)

logger = logging.getLogger(__name__)


class ContractAmendmentViewSet(viewsets.ViewSet):
    """
    API endpoint for contract amendments.
    Nested routes: /api/contracts/{contract_pk}/amendments/
    Transitions:   /api/amendments/{pk}/approve|reject|apply/
    """
    permission_classes = [permissions.IsAuthenticated]

    def _forbidden_unless_allowed(self, request, amendment_action):
        """Capability check; returns a 403 response when the role is not allowed."""
        role = get_user_role(request.user)
        if can_perform(role, amendment_action):
            return None
        logger.warning(
            "User %s with role %s denied amendment action '%s'",
            request.user.id, role, amendment_action,
        )
        return api_response(
            success=False,
            message=f'Only HR and MANAGEMENT can {amendment_action} amendments',
            error='FORBIDDEN',
            status=status.HTTP_403_FORBIDDEN
        )

    def _amendment_error_response(self, exc):
        return api_response(
            success=False,
            message=str(exc.detail),
            errors=getattr(exc, 'errors', None),
            error=exc.default_code,
            status=exc.status_code
        )

    def _internal_error_response(self, exc, fallback_message):
        return api_response(
            success=False,
            message=str(exc) or fallback_message,
            error='INTERNAL_ERROR',
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    def list(self, request, contract_pk=None):
        """Amendment history for a contract, oldest first"""
        try:
            amendments = services.get_amendment_history(contract_pk)
        except Exception as exc:
            logger.exception("Error fetching amendments for contract %s", contract_pk)
            return self._internal_error_response(exc, 'Failed to retrieve amendments')

        return api_response(
            success=True,
            message='Amendments retrieved successfully',
            data=ContractAmendmentSerializer(amendments, many=True).data,
            status=status.HTTP_200_OK
        )

    def create(self, request, contract_pk=None):
        denied = self._forbidden_unless_allowed(request, AmendmentAction.CREATE)
        if denied:
            return denied

        serializer = ContractAmendmentInputSerializer(data=request.data)
        if not serializer.is_valid():
            return api_response(
                success=False,
                message='amendmentType, title, description, and effectiveDate are required',
                errors=serializer.errors,
                error='VALIDATION_ERROR',
                status=status.HTTP_400_BAD_REQUEST
            )

        contract = Contract.objects.filter(pk=contract_pk).first()
        if contract is None:
            return api_response(
                success=False,
                message='Contract not found.',
                error='NOT_FOUND',
                status=status.HTTP_404_NOT_FOUND
            )

        data = serializer.validated_data
        try:
            amendment = services.create_amendment(
                contract=contract,
                amendment_type=data['amendment_type'],
                title=data['title'],
                description=data['description'],
                effective_date=data['effective_date'],
                previous_value=data.get('previous_value'),
                new_value=data.get('new_value'),
                notes=data.get('notes'),
                requested_by=request.user.id,
            )
        except AmendmentError as exc:
            return self._amendment_error_response(exc)
        except Exception as exc:
            logger.exception("Error creating amendment for contract %s", contract_pk)
            return self._internal_error_response(exc, 'Failed to create amendment')

        return api_response(
            success=True,
            message='Amendment created successfully',
            data=ContractAmendmentSerializer(amendment).data,
            status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        try:
            amendment = services.get_amendment(pk)
        except AmendmentError as exc:
            return self._amendment_error_response(exc)
        except Exception as exc:
            logger.exception("Error fetching amendment %s", pk)
            return self._internal_error_response(exc, 'Failed to retrieve amendment')

        return api_response(
            success=True,
            message='Amendment retrieved successfully',
            data=ContractAmendmentSerializer(amendment).data,
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], url_path='approve')
    def approve(self, request, pk=None):
        denied = self._forbidden_unless_allowed(request, AmendmentAction.APPROVE)
        if denied:
            return denied

        try:
            amendment = services.approve_amendment(pk, actor_id=request.user.id)
        except AmendmentError as exc:
            return self._amendment_error_response(exc)
        except Exception as exc:
            logger.exception("Error approving amendment %s", pk)
            return self._internal_error_response(exc, 'Failed to approve amendment')

        return api_response(
            success=True,
            message='Amendment approved successfully',
            data=ContractAmendmentSerializer(amendment).data,
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], url_path='reject')
    def reject(self, request, pk=None):
        denied = self._forbidden_unless_allowed(request, AmendmentAction.REJECT)
        if denied:
            return denied

        serializer = ContractAmendmentRejectSerializer(data=request.data)
        if not serializer.is_valid():
            return api_response(
                success=False,
                message='Invalid rejection data.',
                errors=serializer.errors,
                error='VALIDATION_ERROR',
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            amendment = services.reject_amendment(
                pk,
                actor_id=request.user.id,
                rejection_reason=serializer.validated_data.get('rejection_reason'),
            )
        except AmendmentError as exc:
            return self._amendment_error_response(exc)
        except Exception as exc:
            logger.exception("Error rejecting amendment %s", pk)
            return self._internal_error_response(exc, 'Failed to reject amendment')

        return api_response(
            success=True,
            message='Amendment rejected',
            data=ContractAmendmentSerializer(amendment).data,
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], url_path='apply')
    def apply(self, request, pk=None):
        denied = self._forbidden_unless_allowed(request, AmendmentAction.APPLY)
        if denied:
            return denied

        try:
            amendment = services.apply_amendment(pk, actor_id=request.user.id)
        except AmendmentError as exc:
            return self._amendment_error_response(exc)
        except Exception as exc:
            logger.exception("Error applying amendment %s", pk)
            return self._internal_error_response(exc, 'Failed to apply amendment')

        return api_response(
            success=True,
            message='Amendment applied successfully',
            data=ContractAmendmentSerializer(amendment).data,
            status=status.HTTP_200_OK
        )
