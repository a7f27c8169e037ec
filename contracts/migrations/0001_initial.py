import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Contract",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "contract_id",
                    models.CharField(
                        help_text="Unique contract identifier (auto-generated or manual)",
                        max_length=50,
                        unique=True,
                    ),
                ),
                (
                    "employee_name",
                    models.CharField(help_text="Name of the employee this contract belongs to", max_length=255),
                ),
                ("job_title", models.CharField(blank=True, default="", max_length=255)),
                (
                    "contract_type",
                    models.CharField(
                        choices=[
                            ("PERMANENT", "Permanent"),
                            ("FIXED_TERM", "Fixed-Term"),
                            ("INTERNSHIP", "Internship"),
                            ("CONSULTANT", "Consultant"),
                            ("PART_TIME", "Part-Time"),
                        ],
                        help_text="Type of employment contract",
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateField(help_text="Contract start date")),
                (
                    "end_date",
                    models.DateField(
                        blank=True,
                        help_text="Contract end date (nullable for permanent contracts)",
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("ACTIVE", "Active"),
                            ("EXPIRED", "Expired"),
                            ("TERMINATED", "Terminated"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="DRAFT",
                        help_text="Current status of the contract",
                        max_length=20,
                    ),
                ),
                (
                    "base_salary",
                    models.DecimalField(decimal_places=2, help_text="Base salary amount", max_digits=12),
                ),
                (
                    "currency",
                    models.CharField(default="XAF", help_text="Currency code (e.g., XAF, USD, EUR)", max_length=3),
                ),
                (
                    "pay_frequency",
                    models.CharField(
                        choices=[
                            ("MONTHLY", "Monthly"),
                            ("BI_WEEKLY", "Bi-Weekly"),
                            ("WEEKLY", "Weekly"),
                            ("DAILY", "Daily"),
                        ],
                        default="MONTHLY",
                        help_text="Payment frequency",
                        max_length=20,
                    ),
                ),
                (
                    "work_mode",
                    models.CharField(
                        choices=[("ONSITE", "On-site"), ("REMOTE", "Remote"), ("HYBRID", "Hybrid")],
                        default="ONSITE",
                        max_length=20,
                    ),
                ),
                ("probation_period_days", models.PositiveIntegerField(blank=True, null=True)),
                ("notice_period_days", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "working_hours_per_week",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True),
                ),
                (
                    "created_by",
                    models.IntegerField(
                        blank=True,
                        db_index=True,
                        help_text="ID of the user who created this contract",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Contract",
                "verbose_name_plural": "Contracts",
                "db_table": "contracts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="contracts_status_4f1b2a_idx"),
                    models.Index(fields=["start_date", "end_date"], name="contracts_start_d_9c3e7d_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Allowance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "type",
                    models.CharField(
                        choices=[("FIXED", "Fixed Amount"), ("PERCENTAGE", "Percentage of Base")],
                        default="FIXED",
                        max_length=20,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Fixed amount or percentage value depending on type",
                        max_digits=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "contract",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allowances",
                        to="contracts.contract",
                    ),
                ),
            ],
            options={
                "db_table": "contract_allowances",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ContractAudit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                (
                    "performed_by",
                    models.IntegerField(blank=True, help_text="ID of the user who performed the action", null=True),
                ),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "metadata",
                    models.JSONField(blank=True, default=dict, help_text="JSON metadata for the action", null=True),
                ),
                ("details", models.TextField(blank=True, null=True)),
                (
                    "contract",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_logs",
                        to="contracts.contract",
                    ),
                ),
            ],
            options={
                "db_table": "contract_audits",
                "ordering": ["-timestamp"],
            },
        ),
        migrations.CreateModel(
            name="ContractAmendment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "amendment_number",
                    models.PositiveIntegerField(help_text="Sequential number of the amendment (1, 2, 3...)"),
                ),
                (
                    "amendment_type",
                    models.CharField(
                        choices=[
                            ("COMPENSATION", "Compensation Change"),
                            ("ALLOWANCE", "Allowance Change"),
                            ("WORK_MODE", "Work Mode Change"),
                            ("TERMS", "Terms Change"),
                            ("POSITION", "Position Change"),
                            ("TERM_EXTENSION", "Term Extension"),
                        ],
                        max_length=30,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                (
                    "previous_value",
                    models.JSONField(
                        blank=True,
                        help_text="Terms before the change, shaped by amendment_type",
                        null=True,
                    ),
                ),
                (
                    "new_value",
                    models.JSONField(
                        blank=True,
                        help_text='Terms after the change, shaped by amendment_type (e.g., {"base_salary": "550000.00"})',
                        null=True,
                    ),
                ),
                ("effective_date", models.DateField(help_text="Date when this amendment takes effect")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("APPLIED", "Applied"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "requested_by",
                    models.IntegerField(
                        blank=True,
                        db_index=True,
                        help_text="ID of the user who requested the amendment",
                        null=True,
                    ),
                ),
                (
                    "approved_by",
                    models.IntegerField(
                        blank=True,
                        help_text="ID of the user who approved or rejected the amendment",
                        null=True,
                    ),
                ),
                ("approval_date", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("applied_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "contract",
                    models.ForeignKey(
                        help_text="Contract being amended",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="amendments",
                        to="contracts.contract",
                    ),
                ),
            ],
            options={
                "verbose_name": "Contract Amendment",
                "verbose_name_plural": "Contract Amendments",
                "db_table": "contract_amendments",
                "ordering": ["created_at", "amendment_number"],
                "unique_together": {("contract", "amendment_number")},
                "indexes": [
                    models.Index(fields=["contract", "status"], name="contract_am_contrac_5a8d31_idx"),
                ],
            },
        ),
    ]
