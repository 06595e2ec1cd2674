"""
Django admin registrations for the records models.
"""

from django.contrib import admin

from .models import (
    User,
    PatientDetail,
    BedManagement,
    IPDRegistration,
    DischargeSummary,
    OPDRegistration,
    UserHealthDetail,
    IPDPage,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


@admin.register(PatientDetail)
class PatientDetailAdmin(admin.ModelAdmin):
    list_display = ('uhid', 'name', 'number', 'age', 'gender')
    search_fields = ('uhid', 'name', 'number')


@admin.register(BedManagement)
class BedManagementAdmin(admin.ModelAdmin):
    list_display = ('id', 'room_type', 'bed_number', 'status')
    list_filter = ('room_type', 'status')


class DischargeSummaryInline(admin.TabularInline):
    model = DischargeSummary
    extra = 0


@admin.register(IPDRegistration)
class IPDRegistrationAdmin(admin.ModelAdmin):
    list_display = ('ipd_id', 'patient', 'bed', 'tpa', 'admission_date', 'discharge_date')
    list_filter = ('tpa', 'bed__room_type')
    search_fields = ('ipd_id', 'patient__uhid', 'patient__name', 'patient__number')
    inlines = [DischargeSummaryInline]


@admin.register(OPDRegistration)
class OPDRegistrationAdmin(admin.ModelAdmin):
    list_display = ('opd_id', 'patient', 'date', 'refer_by')
    search_fields = ('opd_id', 'patient__uhid', 'patient__name')


@admin.register(UserHealthDetail)
class UserHealthDetailAdmin(admin.ModelAdmin):
    list_display = ('registration', 'patient_uhid')
    search_fields = ('patient_uhid',)


@admin.register(IPDPage)
class IPDPageAdmin(admin.ModelAdmin):
    list_display = ('id', 'registration', 'group_name', 'page_number', 'page_name')
    list_filter = ('group_name',)
    search_fields = ('uhid', 'page_name')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
