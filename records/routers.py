"""
URL mappings for the records API.

Trailing slashes are deliberately omitted; the front end calls these
paths exactly as written.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.backup import ipd_backup
from .views.dashboard import billing_dashboard
from .views.dpr import send_dpr_view
from .views.exports import (
    record_pdf,
    record_groups,
    groups_pdf,
    record_preview,
    pages_pdf,
    discharge_summary_pdf,
)
from .views.ipd import active_admissions, discharged_admissions
from .views.opd import appointments, appointment_delete


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    # Dashboard
    path('api/billing/dashboard', billing_dashboard, name='billing_dashboard'),
    # IPD lists
    path('api/ipd/active', active_admissions, name='ipd_active'),
    path('api/ipd/discharged', discharged_admissions, name='ipd_discharged'),
    # OPD
    path('api/opd/appointments', appointments, name='opd_appointments'),
    path('api/opd/appointments/<int:opd_id>/delete', appointment_delete, name='opd_appointment_delete'),
    # 单个住院记录导出
    path('api/ipd/<int:ipd_id>/pdf', record_pdf, name='ipd_record_pdf'),
    path('api/ipd/<int:ipd_id>/groups', record_groups, name='ipd_record_groups'),
    path('api/ipd/<int:ipd_id>/pdf/groups', groups_pdf, name='ipd_groups_pdf'),
    path('api/ipd/<int:ipd_id>/preview', record_preview, name='ipd_record_preview'),
    path('api/ipd/<int:ipd_id>/pdf/pages', pages_pdf, name='ipd_pages_pdf'),
    path('api/ipd/<int:ipd_id>/discharge-summary', discharge_summary_pdf, name='ipd_discharge_summary'),
    # Bulk backup
    path('api/ipd/backup', ipd_backup, name='ipd_backup'),
    # DPR
    path('api/dpr/send', send_dpr_view, name='dpr_send'),
]
