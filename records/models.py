"""
Database models for the Medford records backend.

These models hold the registration, billing and clinical drawing data
used by the OPD/IPD lists and by the document export pipeline.  Field
names mirror the keys written by the bedside drawing client so that
the stored JSON can be consumed as-is.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a role.

    ``staff`` users can browse lists and export single records; ``admin``
    and ``super`` may additionally run bulk backups and deliver reports.
    """
    ROLE_CHOICES = [
        ('staff', 'Staff'),
        ('admin', 'Administrator'),
        ('super', 'Super Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='staff')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class PatientDetail(models.Model):
    patient_id = models.AutoField(primary_key=True)
    uhid = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    # 手机号只保存数字，使用文本类型以保留前导零
    number = models.CharField(max_length=20, blank=True, db_index=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    age_unit = models.CharField(max_length=10, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    address = models.TextField(blank=True)
    dob = models.DateField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.uhid})"


class BedManagement(models.Model):
    room_type = models.CharField(max_length=50, db_index=True)
    bed_number = models.CharField(max_length=20)
    bed_type = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, default='available')

    def __str__(self) -> str:
        return f"{self.room_type} #{self.bed_number}"


class IPDRegistration(models.Model):
    """An in-patient admission.

    ``payment_detail`` is the list of payment entries recorded by the
    billing desk; each entry carries ``amount`` and some of ``type``,
    ``amountType``, ``paymentType`` and ``transactionType``.
    """
    ipd_id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        PatientDetail, to_field='uhid', db_column='uhid',
        on_delete=models.PROTECT, related_name='ipd_registrations',
    )
    bed = models.ForeignKey(BedManagement, null=True, blank=True, on_delete=models.SET_NULL, related_name='registrations')
    payment_detail = models.JSONField(default=list, blank=True)
    tpa = models.BooleanField(null=True, blank=True)
    under_care_of_doctor = models.CharField(max_length=255, blank=True)
    admission_date = models.DateField(null=True, blank=True)
    # 出院日期为空表示仍在院；批量备份按该字段的日期范围过滤
    discharge_date = models.DateField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    @property
    def uhid(self) -> str:
        return self.patient_id

    def __str__(self) -> str:
        return f"IPD {self.ipd_id} ({self.patient_id})"


class DischargeSummary(models.Model):
    registration = models.ForeignKey(IPDRegistration, on_delete=models.CASCADE, related_name='discharge_summaries')
    discharge_type = models.CharField(max_length=50, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self) -> str:
        return f"{self.registration_id}: {self.discharge_type}"


class OPDRegistration(models.Model):
    """An out-patient appointment with its services and payment."""
    opd_id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        PatientDetail, to_field='uhid', db_column='uhid',
        on_delete=models.PROTECT, related_name='opd_registrations',
    )
    date = models.DateTimeField(db_index=True)
    refer_by = models.CharField(max_length=255, blank=True)
    additional_notes = models.TextField(blank=True)
    service_info = models.JSONField(default=list, blank=True)
    payment_info = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"OPD {self.opd_id} ({self.patient_id})"


class UserHealthDetail(models.Model):
    """Legacy per-admission clinical store.

    Each built-in drawing group is a JSON list of pages in its own
    column; user defined groups live in ``custom_groups_data``.  The
    column for a group name is looked up through
    ``records.services.pages.GROUP_COLUMNS``.
    """
    registration = models.OneToOneField(
        IPDRegistration, db_column='ipd_registration_id',
        on_delete=models.CASCADE, related_name='health_detail',
    )
    patient_uhid = models.CharField(max_length=32, db_index=True)

    indoor_patient_progress_digital_data = models.JSONField(default=list, blank=True)
    daily_drug_chart_data = models.JSONField(default=list, blank=True)
    dr_visit_form_data = models.JSONField(default=list, blank=True)
    patient_charges_form_data = models.JSONField(default=list, blank=True)
    glucose_monitoring_sheet_data = models.JSONField(default=list, blank=True)
    pt_admission_assessment_nursing_data = models.JSONField(default=list, blank=True)
    clinical_notes_data = models.JSONField(default=list, blank=True)
    investigation_sheet_data = models.JSONField(default=list, blank=True)
    progress_notes_data = models.JSONField(default=list, blank=True)
    consent_data = models.JSONField(default=list, blank=True)
    ot_data = models.JSONField(default=list, blank=True)
    nursing_notes_data = models.JSONField(default=list, blank=True)
    tpr_intake_output_data = models.JSONField(default=list, blank=True)
    discharge_dama_data = models.JSONField(default=list, blank=True)
    casualty_note_data = models.JSONField(default=list, blank=True)
    indoor_patient_file_data = models.JSONField(default=list, blank=True)
    icu_chart_data = models.JSONField(default=list, blank=True)
    transfer_summary_data = models.JSONField(default=list, blank=True)
    prescription_sheet_data = models.JSONField(default=list, blank=True)
    billing_consent_data = models.JSONField(default=list, blank=True)

    custom_groups_data = models.JSONField(default=list, blank=True)
    discharge_summary_written = models.JSONField(null=True, blank=True, db_column='dischare_summary_written')

    def __str__(self) -> str:
        return f"Health detail for IPD {self.registration_id}"


class IPDPage(models.Model):
    """A single drawing page stored row-per-page ("granular" source)."""
    registration = models.ForeignKey(
        IPDRegistration, db_column='ipd_id', on_delete=models.CASCADE, related_name='pages',
    )
    uhid = models.CharField(max_length=32, db_index=True)
    page_number = models.IntegerField(default=0)
    page_name = models.CharField(max_length=255, blank=True)
    group_name = models.CharField(max_length=255, blank=True, db_index=True)
    template_image_url = models.CharField(max_length=500, blank=True)
    location_tag = models.CharField(max_length=255, blank=True)
    canvas_data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['registration', 'uhid'], name='records_ipd_ipd_id_6c1f0e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.group_name} p{self.page_number} (IPD {self.registration_id})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='records_aud_action_3f2a1b_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='records_aud_object__9d4c2e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
