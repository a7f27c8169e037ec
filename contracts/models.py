from django.db import models
import uuid
from decimal import Decimal


class Contract(models.Model):
    """Employment contract whose terms amendments can change"""

    CONTRACT_TYPE_CHOICES = [
        ('PERMANENT', 'Permanent'),
        ('FIXED_TERM', 'Fixed-Term'),
        ('INTERNSHIP', 'Internship'),
        ('CONSULTANT', 'Consultant'),
        ('PART_TIME', 'Part-Time'),
    ]

    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('ACTIVE', 'Active'),
        ('EXPIRED', 'Expired'),
        ('TERMINATED', 'Terminated'),
        ('CANCELLED', 'Cancelled'),
    ]

    PAY_FREQUENCY_CHOICES = [
        ('MONTHLY', 'Monthly'),
        ('BI_WEEKLY', 'Bi-Weekly'),
        ('WEEKLY', 'Weekly'),
        ('DAILY', 'Daily'),
    ]

    WORK_MODE_CHOICES = [
        ('ONSITE', 'On-site'),
        ('REMOTE', 'Remote'),
        ('HYBRID', 'Hybrid'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    contract_id = models.CharField(
        max_length=50,
        unique=True,
        help_text='Unique contract identifier (auto-generated or manual)'
    )

    employee_name = models.CharField(
        max_length=255,
        help_text='Name of the employee this contract belongs to'
    )

    job_title = models.CharField(max_length=255, blank=True, default='')

    contract_type = models.CharField(
        max_length=20,
        choices=CONTRACT_TYPE_CHOICES,
        help_text='Type of employment contract'
    )

    start_date = models.DateField(help_text='Contract start date')

    end_date = models.DateField(
        null=True,
        blank=True,
        help_text='Contract end date (nullable for permanent contracts)'
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='DRAFT',
        help_text='Current status of the contract'
    )

    # Compensation details
    base_salary = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Base salary amount'
    )

    currency = models.CharField(
        max_length=3,
        default='XAF',
        help_text='Currency code (e.g., XAF, USD, EUR)'
    )

    pay_frequency = models.CharField(
        max_length=20,
        choices=PAY_FREQUENCY_CHOICES,
        default='MONTHLY',
        help_text='Payment frequency'
    )

    # Working terms
    work_mode = models.CharField(
        max_length=20,
        choices=WORK_MODE_CHOICES,
        default='ONSITE'
    )

    probation_period_days = models.PositiveIntegerField(null=True, blank=True)
    notice_period_days = models.PositiveIntegerField(null=True, blank=True)
    working_hours_per_week = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    # Audit fields
    created_by = models.IntegerField(
        null=True,
        blank=True,
        db_index=True,
        help_text='ID of the user who created this contract'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contracts'
        verbose_name = 'Contract'
        verbose_name_plural = 'Contracts'
        indexes = [
            models.Index(fields=['status'], name='contracts_status_4f1b2a_idx'),
            models.Index(fields=['start_date', 'end_date'], name='contracts_start_d_9c3e7d_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.contract_id} - {self.employee_name or 'Unknown'}"

    @property
    def is_active(self):
        """Check if contract is currently active"""
        return self.status == 'ACTIVE'

    @property
    def is_permanent(self):
        """Check if this is a permanent contract"""
        return self.contract_type == 'PERMANENT'

    def save(self, *args, **kwargs):
        """Auto-generate the contract ID when one was not supplied"""
        # Ensure permanent contracts don't have an end date
        if self.contract_type == 'PERMANENT' and self.end_date:
            self.end_date = None

        if not self.contract_id:
            self.contract_id = f"CNT-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def gross_salary(self):
        """
        Calculate gross salary: Base Salary + Allowances
        Handle Fixed and Percentage allowances.
        """
        total = self.base_salary

        for allowance in self.allowances.all():
            if allowance.type == 'FIXED':
                total += allowance.amount
            elif allowance.type == 'PERCENTAGE':
                # amount is percentage (e.g., 5.0 for 5%)
                total += self.base_salary * (allowance.amount / Decimal('100.0'))

        return total.quantize(Decimal('0.01'))

    def log_action(self, user_id, action, metadata=None):
        """Helper to log status changes and other actions"""
        db_alias = self._state.db or 'default'

        details = ""
        if metadata:
            if 'reason' in metadata and len(metadata) == 1:
                details = metadata['reason'] or ''
            else:
                details = ", ".join([f"{k}: {v}" for k, v in metadata.items()])

        return ContractAudit.objects.using(db_alias).create(
            contract=self,
            action=action,
            performed_by=user_id,
            metadata=metadata or {},
            details=details
        )


class Allowance(models.Model):
    """Recurring allowance attached to a contract"""

    TYPE_CHOICES = [
        ('FIXED', 'Fixed Amount'),
        ('PERCENTAGE', 'Percentage of Base'),
    ]

    contract = models.ForeignKey(
        Contract,
        on_delete=models.CASCADE,
        related_name='allowances'
    )
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='FIXED')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Fixed amount or percentage value depending on type'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'contract_allowances'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.name} ({self.get_type_display()}: {self.amount})"


class ContractAudit(models.Model):
    """Audit log for contract and amendment actions"""
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='audit_logs')
    action = models.CharField(max_length=50)
    performed_by = models.IntegerField(
        null=True,
        blank=True,
        help_text='ID of the user who performed the action'
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    metadata = models.JSONField(default=dict, blank=True, null=True, help_text='JSON metadata for the action')
    details = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['-timestamp']
        db_table = 'contract_audits'

    def __str__(self):
        return f"{self.action} - {self.contract_id}"


class ContractAmendment(models.Model):
    """
    A requested change to an existing contract's terms.

    Moves PENDING -> APPROVED -> APPLIED, or PENDING -> REJECTED. The status
    column is written only by the conditional updates in contracts.services.
    """

    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_APPLIED = 'APPLIED'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_APPLIED, 'Applied'),
    ]

    TERMINAL_STATUSES = frozenset({STATUS_REJECTED, STATUS_APPLIED})

    TRANSITIONS = {
        STATUS_PENDING: frozenset({STATUS_APPROVED, STATUS_REJECTED}),
        STATUS_APPROVED: frozenset({STATUS_APPLIED}),
    }

    TYPE_COMPENSATION = 'COMPENSATION'
    TYPE_ALLOWANCE = 'ALLOWANCE'
    TYPE_WORK_MODE = 'WORK_MODE'
    TYPE_TERMS = 'TERMS'
    TYPE_POSITION = 'POSITION'
    TYPE_TERM_EXTENSION = 'TERM_EXTENSION'

    AMENDMENT_TYPE_CHOICES = [
        (TYPE_COMPENSATION, 'Compensation Change'),
        (TYPE_ALLOWANCE, 'Allowance Change'),
        (TYPE_WORK_MODE, 'Work Mode Change'),
        (TYPE_TERMS, 'Terms Change'),
        (TYPE_POSITION, 'Position Change'),
        (TYPE_TERM_EXTENSION, 'Term Extension'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    contract = models.ForeignKey(
        Contract,
        on_delete=models.PROTECT,
        related_name='amendments',
        help_text='Contract being amended'
    )

    amendment_number = models.PositiveIntegerField(
        help_text='Sequential number of the amendment (1, 2, 3...)'
    )

    amendment_type = models.CharField(max_length=30, choices=AMENDMENT_TYPE_CHOICES)
    title = models.CharField(max_length=255)
    description = models.TextField()

    previous_value = models.JSONField(
        null=True,
        blank=True,
        help_text='Terms before the change, shaped by amendment_type'
    )
    new_value = models.JSONField(
        null=True,
        blank=True,
        help_text='Terms after the change, shaped by amendment_type (e.g., {"base_salary": "550000.00"})'
    )

    effective_date = models.DateField(help_text='Date when this amendment takes effect')

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True
    )

    requested_by = models.IntegerField(
        null=True,
        blank=True,
        db_index=True,
        help_text='ID of the user who requested the amendment'
    )
    approved_by = models.IntegerField(
        null=True,
        blank=True,
        help_text='ID of the user who approved or rejected the amendment'
    )
    approval_date = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    applied_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_amendments'
        verbose_name = 'Contract Amendment'
        verbose_name_plural = 'Contract Amendments'
        ordering = ['created_at', 'amendment_number']
        unique_together = [['contract', 'amendment_number']]
        indexes = [
            models.Index(fields=['contract', 'status'], name='contract_am_contrac_5a8d31_idx'),
        ]

    def __str__(self):
        return f"Amendment #{self.amendment_number} - {self.contract.contract_id}"

    @classmethod
    def can_transition(cls, from_status, to_status):
        return to_status in cls.TRANSITIONS.get(from_status, frozenset())

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES
