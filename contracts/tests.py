import uuid
from datetime import date
from decimal import Decimal

from django.contrib.admin.sites import AdminSite
from django.test import RequestFactory, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from contracts.amendment_payloads import validate_payload
from contracts.admin import ContractAmendmentAdmin
from contracts.exceptions import (
    AmendmentApplyError,
    AmendmentNotFound,
    AmendmentValidationError,
    InvalidStateTransition,
)
from contracts.models import Allowance, Contract, ContractAmendment, ContractAudit
from contracts import services


def create_contract(**overrides):
    """Helper to build a minimally valid fixed-term contract"""
    data = {
        'employee_name': 'Jane Doe',
        'job_title': 'Engineer',
        'contract_type': 'FIXED_TERM',
        'status': 'ACTIVE',
        'start_date': date(2024, 1, 1),
        'end_date': date(2024, 12, 31),
        'base_salary': Decimal('500000.00'),
    }
    data.update(overrides)
    return Contract.objects.create(**data)


class AmendmentServiceTests(TestCase):
    def setUp(self):
        self.hr_user = User.objects.create_user(email='hr@example.com', password='pass', role=User.ROLE_HR)
        self.manager = User.objects.create_user(
            email='manager@example.com', password='pass', role=User.ROLE_MANAGEMENT
        )
        self.contract = create_contract()

    def _create(self, **overrides):
        data = {
            'contract': self.contract,
            'amendment_type': ContractAmendment.TYPE_COMPENSATION,
            'title': 'Raise',
            'description': 'Annual raise',
            'effective_date': '2025-01-01',
            'requested_by': self.hr_user.id,
        }
        data.update(overrides)
        return services.create_amendment(**data)

    def test_create_starts_pending_with_requester(self):
        amendment = self._create(notes='Budgeted in Q4')
        self.assertEqual(amendment.status, ContractAmendment.STATUS_PENDING)
        self.assertEqual(amendment.requested_by, self.hr_user.id)
        self.assertEqual(amendment.effective_date, date(2025, 1, 1))
        self.assertEqual(amendment.amendment_number, 1)
        self.assertEqual(amendment.notes, 'Budgeted in Q4')
        self.assertIsNone(amendment.approved_by)
        self.assertIsNone(amendment.rejection_reason)
        self.assertTrue(
            ContractAudit.objects.filter(contract=self.contract, action='AMENDMENT_CREATED').exists()
        )

    def test_amendment_numbers_increase_per_contract(self):
        first = self._create()
        second = self._create(title='Second raise')
        other = self._create(contract=create_contract(employee_name='John Roe'))
        self.assertEqual(first.amendment_number, 1)
        self.assertEqual(second.amendment_number, 2)
        self.assertEqual(other.amendment_number, 1)

    def test_create_with_missing_required_field_creates_nothing(self):
        for field in ('amendment_type', 'title', 'description', 'effective_date'):
            with self.subTest(field=field):
                with self.assertRaises(AmendmentValidationError) as ctx:
                    self._create(**{field: ''})
                self.assertIn(field, ctx.exception.errors)
                self.assertEqual(ctx.exception.default_code, 'VALIDATION_ERROR')
        self.assertEqual(ContractAmendment.objects.count(), 0)

    def test_create_rejects_unparseable_date_and_unknown_type(self):
        with self.assertRaises(AmendmentValidationError) as ctx:
            self._create(effective_date='2025-13-45')
        self.assertIn('effective_date', ctx.exception.errors)

        with self.assertRaises(AmendmentValidationError) as ctx:
            self._create(amendment_type='BONUS')
        self.assertIn('amendment_type', ctx.exception.errors)
        self.assertEqual(ContractAmendment.objects.count(), 0)

    def test_create_accepts_iso_timestamp_effective_date(self):
        amendment = self._create(effective_date='2025-03-01T00:00:00Z')
        self.assertEqual(amendment.effective_date, date(2025, 3, 1))

    def test_create_validates_payload_shape_for_type(self):
        with self.assertRaises(AmendmentValidationError) as ctx:
            self._create(new_value={'work_mode': 'REMOTE'})
        self.assertIn('new_value', ctx.exception.errors)

        with self.assertRaises(AmendmentValidationError):
            self._create(new_value={'base_salary': '-10'})
        self.assertEqual(ContractAmendment.objects.count(), 0)

        amendment = self._create(
            previous_value={'base_salary': '500000'},
            new_value={'base_salary': '550000', 'currency': 'xaf'},
        )
        self.assertEqual(amendment.previous_value, {'base_salary': '500000.00'})
        self.assertEqual(amendment.new_value, {'base_salary': '550000.00', 'currency': 'XAF'})

    def test_full_lifecycle_approve_then_apply(self):
        amendment = self._create(new_value={'base_salary': '550000'})

        approved = services.approve_amendment(amendment.id, actor_id=self.manager.id)
        self.assertEqual(approved.status, ContractAmendment.STATUS_APPROVED)
        self.assertEqual(approved.approved_by, self.manager.id)
        self.assertIsNotNone(approved.approval_date)

        applied = services.apply_amendment(amendment.id, actor_id=self.manager.id)
        self.assertEqual(applied.status, ContractAmendment.STATUS_APPLIED)
        self.assertIsNotNone(applied.applied_at)
        self.assertEqual(applied.approved_by, self.manager.id)
        self.assertGreaterEqual(applied.updated_at, applied.created_at)

        self.contract.refresh_from_db()
        self.assertEqual(self.contract.base_salary, Decimal('550000.00'))

    def test_terminal_states_refuse_further_transitions(self):
        amendment = self._create()
        services.approve_amendment(amendment.id, actor_id=self.manager.id)
        services.apply_amendment(amendment.id)

        with self.assertRaises(InvalidStateTransition) as ctx:
            services.reject_amendment(amendment.id, actor_id=self.manager.id, rejection_reason='Too late')
        self.assertEqual(ctx.exception.current_status, ContractAmendment.STATUS_APPLIED)
        with self.assertRaises(InvalidStateTransition):
            services.approve_amendment(amendment.id, actor_id=self.manager.id)
        with self.assertRaises(InvalidStateTransition):
            services.apply_amendment(amendment.id)

        amendment.refresh_from_db()
        self.assertEqual(amendment.status, ContractAmendment.STATUS_APPLIED)
        self.assertIsNone(amendment.rejection_reason)

    def test_rejected_amendment_keeps_decision(self):
        amendment = self._create()
        rejected = services.reject_amendment(
            amendment.id, actor_id=self.manager.id, rejection_reason='Over budget'
        )
        self.assertEqual(rejected.status, ContractAmendment.STATUS_REJECTED)
        self.assertEqual(rejected.approved_by, self.manager.id)
        self.assertEqual(rejected.rejection_reason, 'Over budget')

        with self.assertRaises(InvalidStateTransition):
            services.approve_amendment(amendment.id, actor_id=self.hr_user.id)
        with self.assertRaises(InvalidStateTransition):
            services.reject_amendment(amendment.id, actor_id=self.hr_user.id, rejection_reason='Again')
        with self.assertRaises(InvalidStateTransition):
            services.apply_amendment(amendment.id)

        amendment.refresh_from_db()
        self.assertEqual(amendment.approved_by, self.manager.id)
        self.assertEqual(amendment.rejection_reason, 'Over budget')

    def test_reject_without_reason_is_allowed(self):
        amendment = self._create()
        with self.assertLogs('contracts.services', level='WARNING'):
            rejected = services.reject_amendment(amendment.id, actor_id=self.manager.id, rejection_reason='  ')
        self.assertEqual(rejected.status, ContractAmendment.STATUS_REJECTED)
        self.assertIsNone(rejected.rejection_reason)

    def test_apply_requires_approval(self):
        amendment = self._create(new_value={'base_salary': '900000'})
        with self.assertRaises(InvalidStateTransition):
            services.apply_amendment(amendment.id)
        amendment.refresh_from_db()
        self.assertEqual(amendment.status, ContractAmendment.STATUS_PENDING)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.base_salary, Decimal('500000.00'))

    def test_transitions_on_unknown_id_raise_not_found(self):
        missing = uuid.uuid4()
        with self.assertRaises(AmendmentNotFound):
            services.approve_amendment(missing, actor_id=self.manager.id)
        with self.assertRaises(AmendmentNotFound):
            services.reject_amendment(missing, actor_id=self.manager.id)
        with self.assertRaises(AmendmentNotFound):
            services.apply_amendment(missing)
        with self.assertRaises(AmendmentNotFound):
            services.approve_amendment('not-a-uuid', actor_id=self.manager.id)

    def test_concurrent_approvals_only_one_wins(self):
        amendment = self._create()
        # Both requests read the record while it is still PENDING
        stale_a = ContractAmendment.objects.get(pk=amendment.pk)
        stale_b = ContractAmendment.objects.get(pk=amendment.pk)
        self.assertEqual(stale_a.status, ContractAmendment.STATUS_PENDING)
        self.assertEqual(stale_b.status, ContractAmendment.STATUS_PENDING)

        services.approve_amendment(stale_a.pk, actor_id=self.manager.id)
        with self.assertRaises(InvalidStateTransition):
            services.approve_amendment(stale_b.pk, actor_id=self.hr_user.id)

        amendment.refresh_from_db()
        self.assertEqual(amendment.approved_by, self.manager.id)

    def test_approve_and_reject_race_keeps_first_decision(self):
        amendment = self._create()
        services.reject_amendment(amendment.pk, actor_id=self.hr_user.id, rejection_reason='No')
        with self.assertRaises(InvalidStateTransition):
            services.approve_amendment(amendment.pk, actor_id=self.manager.id)
        amendment.refresh_from_db()
        self.assertEqual(amendment.status, ContractAmendment.STATUS_REJECTED)
        self.assertEqual(amendment.approved_by, self.hr_user.id)

    def test_conditional_update_matches_once(self):
        amendment = self._create()
        pending = ContractAmendment.objects.filter(pk=amendment.pk, status=ContractAmendment.STATUS_PENDING)
        first = pending.update(status=ContractAmendment.STATUS_APPROVED)
        second = pending.update(status=ContractAmendment.STATUS_APPROVED)
        self.assertEqual((first, second), (1, 0))

    def test_failed_contract_update_rolls_back_apply(self):
        amendment = self._create(
            amendment_type=ContractAmendment.TYPE_TERM_EXTENSION,
            new_value={'end_date': '2025-06-30'},
        )
        services.approve_amendment(amendment.id, actor_id=self.manager.id)
        # Contract moved since the request was filed; extension no longer valid
        Contract.objects.filter(pk=self.contract.pk).update(start_date=date(2025, 7, 1))

        with self.assertLogs('contracts.services', level='ERROR'):
            with self.assertRaises(AmendmentApplyError) as ctx:
                services.apply_amendment(amendment.id, actor_id=self.manager.id)
        self.assertEqual(ctx.exception.default_code, 'INTERNAL_ERROR')
        self.assertIn('new_value', ctx.exception.errors)

        amendment.refresh_from_db()
        self.assertEqual(amendment.status, ContractAmendment.STATUS_APPROVED)
        self.assertIsNone(amendment.applied_at)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.end_date, date(2024, 12, 31))

    def test_history_in_creation_order(self):
        first = self._create(title='First')
        second = self._create(title='Second')
        services.approve_amendment(first.id, actor_id=self.manager.id)

        history = services.get_amendment_history(self.contract.id)
        self.assertEqual([a.id for a in history], [first.id, second.id])

    def test_history_empty_for_contract_without_amendments(self):
        self.assertEqual(services.get_amendment_history(self.contract.id), [])
        self.assertEqual(services.get_amendment_history(uuid.uuid4()), [])
        self.assertEqual(services.get_amendment_history('garbage'), [])


class AmendmentPayloadApplyTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(
            email='apply@example.com', password='pass', role=User.ROLE_MANAGEMENT
        )
        self.contract = create_contract()

    def _approve_and_apply(self, amendment_type, new_value):
        amendment = services.create_amendment(
            contract=self.contract,
            amendment_type=amendment_type,
            title='Change',
            description='Contract change',
            effective_date=date(2025, 1, 1),
            requested_by=self.manager.id,
            new_value=new_value,
        )
        services.approve_amendment(amendment.id, actor_id=self.manager.id)
        applied = services.apply_amendment(amendment.id, actor_id=self.manager.id)
        self.contract.refresh_from_db()
        return applied

    def test_work_mode_change(self):
        self._approve_and_apply(ContractAmendment.TYPE_WORK_MODE, {'work_mode': 'REMOTE'})
        self.assertEqual(self.contract.work_mode, 'REMOTE')

    def test_terms_change_updates_only_given_fields(self):
        self.contract.notice_period_days = 30
        self.contract.save()
        self._approve_and_apply(ContractAmendment.TYPE_TERMS, {'probation_period_days': 90})
        self.assertEqual(self.contract.probation_period_days, 90)
        self.assertEqual(self.contract.notice_period_days, 30)

    def test_position_change(self):
        self._approve_and_apply(ContractAmendment.TYPE_POSITION, {'job_title': 'Senior Engineer'})
        self.assertEqual(self.contract.job_title, 'Senior Engineer')

    def test_term_extension(self):
        self._approve_and_apply(ContractAmendment.TYPE_TERM_EXTENSION, {'end_date': '2025-12-31'})
        self.assertEqual(self.contract.end_date, date(2025, 12, 31))

    def test_allowance_change_replaces_allowances(self):
        Allowance.objects.create(contract=self.contract, name='Housing', type='FIXED', amount=Decimal('20000'))
        applied = self._approve_and_apply(ContractAmendment.TYPE_ALLOWANCE, {
            'allowances': [
                {'name': 'Transport', 'type': 'FIXED', 'amount': '15000'},
                {'name': 'Seniority', 'type': 'PERCENTAGE', 'amount': '10'},
            ]
        })
        names = list(self.contract.allowances.values_list('name', flat=True))
        self.assertEqual(sorted(names), ['Seniority', 'Transport'])
        self.assertEqual(self.contract.gross_salary, Decimal('565000.00'))
        audit = ContractAudit.objects.filter(contract=self.contract, action='AMENDMENT_APPLIED').first()
        self.assertEqual(audit.metadata['amendment_id'], str(applied.id))
        self.assertEqual(audit.metadata['changed_fields'], ['allowances'])

    def test_apply_without_new_value_changes_nothing(self):
        applied = self._approve_and_apply(ContractAmendment.TYPE_COMPENSATION, None)
        self.assertEqual(applied.status, ContractAmendment.STATUS_APPLIED)
        self.assertEqual(self.contract.base_salary, Decimal('500000.00'))

    def test_payload_rejects_unknown_keys_and_duplicates(self):
        with self.assertRaises(AmendmentValidationError):
            validate_payload(ContractAmendment.TYPE_POSITION, {'job_title': 'Lead', 'salary': 1})
        with self.assertRaises(AmendmentValidationError):
            validate_payload(ContractAmendment.TYPE_TERMS, {})
        with self.assertRaises(AmendmentValidationError):
            validate_payload(ContractAmendment.TYPE_ALLOWANCE, {
                'allowances': [
                    {'name': 'Housing', 'amount': '1'},
                    {'name': 'housing', 'amount': '2'},
                ]
            })
        with self.assertRaises(AmendmentValidationError) as ctx:
            validate_payload(ContractAmendment.TYPE_ALLOWANCE, {
                'allowances': [{'name': 'Housing', 'amount': '1', 'taxable': True}]
            })
        self.assertIn('taxable', ctx.exception.errors['new_value']['allowances'][0])
        self.assertIsNone(validate_payload(ContractAmendment.TYPE_POSITION, None))

    def test_term_extension_refused_for_permanent_contract(self):
        permanent = create_contract(contract_type='PERMANENT', end_date=None)
        with self.assertRaises(AmendmentValidationError):
            validate_payload(
                ContractAmendment.TYPE_TERM_EXTENSION, {'end_date': '2030-01-01'}, contract=permanent
            )


class AmendmentStateMachineTests(TestCase):
    def test_allowed_edges(self):
        allowed = {
            (ContractAmendment.STATUS_PENDING, ContractAmendment.STATUS_APPROVED),
            (ContractAmendment.STATUS_PENDING, ContractAmendment.STATUS_REJECTED),
            (ContractAmendment.STATUS_APPROVED, ContractAmendment.STATUS_APPLIED),
        }
        statuses = [choice for choice, _ in ContractAmendment.STATUS_CHOICES]
        for from_status in statuses:
            for to_status in statuses:
                with self.subTest(from_status=from_status, to_status=to_status):
                    self.assertEqual(
                        ContractAmendment.can_transition(from_status, to_status),
                        (from_status, to_status) in allowed,
                    )


class AmendmentAdminTests(TestCase):
    def setUp(self):
        self.superuser = User.objects.create_superuser(email='admin@example.com', password='pass')
        self.manager = User.objects.create_user(
            email='admin-mgmt@example.com', password='pass', role=User.ROLE_MANAGEMENT
        )
        self.model_admin = ContractAmendmentAdmin(ContractAmendment, AdminSite())
        self.amendment = services.create_amendment(
            contract=create_contract(),
            amendment_type=ContractAmendment.TYPE_POSITION,
            title='Promotion',
            description='Move to senior role',
            effective_date='2025-01-01',
            requested_by=self.manager.id,
        )

    def test_admin_edit_does_not_overwrite_decision(self):
        # Admin form loaded while the amendment was still pending
        stale = ContractAmendment.objects.get(pk=self.amendment.pk)
        services.approve_amendment(self.amendment.pk, actor_id=self.manager.id)

        stale.title = 'Promotion to senior engineer'
        request = RequestFactory().post('/admin/')
        request.user = self.superuser
        self.model_admin.save_model(request, stale, None, True)

        self.amendment.refresh_from_db()
        self.assertEqual(self.amendment.title, 'Promotion to senior engineer')
        self.assertEqual(self.amendment.status, ContractAmendment.STATUS_APPROVED)
        self.assertEqual(self.amendment.approved_by, self.manager.id)
        self.assertIsNotNone(self.amendment.approval_date)


class AmendmentEndpointsTests(APITestCase):
    def setUp(self):
        self.hr_user = User.objects.create_user(email='hr-api@example.com', password='pass', role=User.ROLE_HR)
        self.manager = User.objects.create_user(
            email='mgmt-api@example.com', password='pass', role=User.ROLE_MANAGEMENT
        )
        self.employee = User.objects.create_user(
            email='emp-api@example.com', password='pass', role=User.ROLE_EMPLOYEE
        )
        self.contract = create_contract()
        self.list_url = reverse('contracts:contract-amendments-list', kwargs={'contract_pk': self.contract.id})

    def _payload(self, **overrides):
        data = {
            'amendmentType': 'COMPENSATION',
            'title': 'Raise',
            'description': 'Annual raise',
            'effectiveDate': '2025-01-01',
        }
        data.update(overrides)
        return data

    def _create_as(self, user, **overrides):
        self.client.force_authenticate(user=user)
        return self.client.post(self.list_url, self._payload(**overrides), format='json')

    def _transition_url(self, name, amendment_id):
        return reverse(f'amendments:amendment-{name}', kwargs={'pk': amendment_id})

    def test_create_approve_apply_then_reject_is_invalid(self):
        response = self._create_as(self.hr_user)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['status'], 'PENDING')
        self.assertEqual(response.data['data']['requested_by'], self.hr_user.id)
        amendment_id = response.data['data']['id']

        self.client.force_authenticate(user=self.manager)
        response = self.client.post(self._transition_url('approve', amendment_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'APPROVED')
        self.assertEqual(response.data['data']['approved_by'], self.manager.id)

        response = self.client.post(self._transition_url('apply', amendment_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'APPLIED')

        response = self.client.post(self._transition_url('reject', amendment_id), {'rejectionReason': 'No'})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'INVALID_STATE_TRANSITION')

    def test_employee_cannot_reject(self):
        response = self._create_as(self.hr_user)
        amendment_id = response.data['data']['id']

        self.client.force_authenticate(user=self.employee)
        response = self.client.post(self._transition_url('reject', amendment_id), {'rejection_reason': 'No'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'FORBIDDEN')

        amendment = ContractAmendment.objects.get(pk=amendment_id)
        self.assertEqual(amendment.status, ContractAmendment.STATUS_PENDING)
        self.assertIsNone(amendment.approved_by)

    def test_non_hr_roles_are_forbidden_everywhere(self):
        amendment = services.create_amendment(
            contract=self.contract,
            amendment_type='COMPENSATION',
            title='Raise',
            description='Annual raise',
            effective_date='2025-01-01',
            requested_by=self.hr_user.id,
        )
        finance = User.objects.create_user(email='fin@example.com', password='pass', role=User.ROLE_FINANCE)
        for user in (self.employee, finance):
            with self.subTest(role=user.role):
                response = self._create_as(user)
                self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
                for name in ('approve', 'reject', 'apply'):
                    response = self.client.post(self._transition_url(name, amendment.id))
                    self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.assertEqual(ContractAmendment.objects.count(), 1)
        amendment.refresh_from_db()
        self.assertEqual(amendment.status, ContractAmendment.STATUS_PENDING)

    def test_forbidden_is_checked_before_validation(self):
        response = self._create_as(self.employee, title='')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_with_missing_fields_returns_validation_error(self):
        for field in ('amendmentType', 'title', 'description', 'effectiveDate'):
            with self.subTest(field=field):
                payload = self._payload()
                payload.pop(field)
                self.client.force_authenticate(user=self.hr_user)
                response = self.client.post(self.list_url, payload, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['error'], 'VALIDATION_ERROR')
        self.assertEqual(ContractAmendment.objects.count(), 0)

    def test_create_with_invalid_payload_shape_returns_validation_error(self):
        response = self._create_as(self.hr_user, newValue={'job_title': 'Lead'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'VALIDATION_ERROR')
        self.assertIn('new_value', response.data['errors'])
        self.assertEqual(ContractAmendment.objects.count(), 0)

    def test_create_for_unknown_contract_returns_not_found(self):
        self.client.force_authenticate(user=self.hr_user)
        url = reverse('contracts:contract-amendments-list', kwargs={'contract_pk': uuid.uuid4()})
        response = self.client.post(url, self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'NOT_FOUND')

    def test_transition_on_unknown_amendment_returns_not_found(self):
        self.client.force_authenticate(user=self.manager)
        for name in ('approve', 'reject', 'apply'):
            with self.subTest(action=name):
                response = self.client.post(self._transition_url(name, uuid.uuid4()))
                self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
                self.assertEqual(response.data['error'], 'NOT_FOUND')

    def test_duplicate_approve_returns_invalid_state(self):
        amendment_id = self._create_as(self.hr_user).data['data']['id']
        self.client.force_authenticate(user=self.manager)
        first = self.client.post(self._transition_url('approve', amendment_id))
        second = self.client.post(self._transition_url('approve', amendment_id))
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['error'], 'INVALID_STATE_TRANSITION')

    def test_reject_stores_reason(self):
        amendment_id = self._create_as(self.hr_user, notes='Q1 review').data['data']['id']
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(
            self._transition_url('reject', amendment_id), {'rejectionReason': 'Budget freeze'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'REJECTED')
        self.assertEqual(response.data['data']['rejection_reason'], 'Budget freeze')
        self.assertEqual(response.data['data']['notes'], 'Q1 review')

    def test_apply_updates_contract_salary(self):
        amendment_id = self._create_as(
            self.hr_user,
            previousValue={'base_salary': '500000'},
            newValue={'base_salary': '550000'},
        ).data['data']['id']
        self.client.force_authenticate(user=self.manager)
        self.client.post(self._transition_url('approve', amendment_id))
        response = self.client.post(self._transition_url('apply', amendment_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.contract.refresh_from_db()
        self.assertEqual(self.contract.base_salary, Decimal('550000.00'))

    def test_apply_conflicting_with_contract_is_internal_error(self):
        amendment_id = self._create_as(
            self.hr_user, amendmentType='TERM_EXTENSION', newValue={'end_date': '2025-06-30'}
        ).data['data']['id']
        self.client.force_authenticate(user=self.manager)
        self.client.post(self._transition_url('approve', amendment_id))
        Contract.objects.filter(pk=self.contract.pk).update(start_date=date(2025, 7, 1))

        response = self.client.post(self._transition_url('apply', amendment_id))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'INTERNAL_ERROR')
        self.assertEqual(ContractAmendment.objects.get(pk=amendment_id).status, ContractAmendment.STATUS_APPROVED)

    def test_list_history(self):
        self._create_as(self.hr_user, title='First')
        self._create_as(self.hr_user, title='Second')
        self.client.force_authenticate(user=self.employee)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['title'] for item in response.data['data']], ['First', 'Second'])
        self.assertEqual(response.data['data'][0]['contract_number'], self.contract.contract_id)

    def test_list_history_empty(self):
        self.client.force_authenticate(user=self.hr_user)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data'], [])

    def test_retrieve_amendment(self):
        amendment_id = self._create_as(self.hr_user).data['data']['id']
        response = self.client.get(reverse('amendments:amendment-detail', kwargs={'pk': amendment_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['id'], amendment_id)

        response = self.client.get(reverse('amendments:amendment-detail', kwargs={'pk': uuid.uuid4()}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unauthenticated_requests_are_rejected(self):
        response = self.client.post(self.list_url, self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(ContractAmendment.objects.count(), 0)
