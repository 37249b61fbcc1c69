"""
URL configuration for the riderapp console.

This module defines URL patterns for:
- Session endpoints (login, logout, refresh, password reset)
- Record CRUD proxied to the backend
- Dashboard, payments and salary reports
- Admin settings
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import auth_views, record_views, report_views, settings_views

# Create router for ViewSet-based views
router = DefaultRouter()
router.register(r'employees', record_views.EmployeeViewSet, basename='employee')
router.register(r'partners', record_views.PartnerViewSet, basename='partner')
router.register(r'wps-vendors', record_views.WPSVendorViewSet, basename='wps-vendor')
router.register(r'weekly-trips', record_views.WeeklyTripViewSet, basename='weekly-trip')
router.register(r'deductions', record_views.DeductionViewSet, basename='deduction')

app_name = 'riderapp'

urlpatterns = [
    # Session
    path('auth/login/', auth_views.LoginAPIView.as_view(), name='login'),
    path('auth/logout/', auth_views.LogoutAPIView.as_view(), name='logout'),
    path('auth/refresh/', auth_views.RefreshAPIView.as_view(), name='refresh'),
    path('auth/me/', auth_views.MeAPIView.as_view(), name='me'),
    path('auth/forgot-password/', auth_views.ForgotPasswordAPIView.as_view(), name='forgot-password'),
    path('auth/reset-password/', auth_views.ResetPasswordAPIView.as_view(), name='reset-password'),
    path('menu/', auth_views.MenuAPIView.as_view(), name='menu'),

    # Screens
    path('dashboard/', report_views.DashboardAPIView.as_view(), name='dashboard'),
    path('payments/', report_views.PaymentListAPIView.as_view(), name='payments'),
    path('payments/upload/', report_views.PaymentUploadAPIView.as_view(), name='payment-upload'),
    path('salary-reports/', report_views.SalaryReportListAPIView.as_view(), name='salary-reports'),
    path('salary-reports/generate/', report_views.SalaryReportGenerateAPIView.as_view(), name='salary-report-generate'),
    path('salary-reports/export/', report_views.SalaryReportExportAPIView.as_view(), name='salary-report-export'),

    # Admin settings
    path('settings/', settings_views.SettingsAPIView.as_view(), name='settings'),
    path('settings/users/', settings_views.ConsoleUserListAPIView.as_view(), name='console-users'),
    path('settings/users/<int:user_id>/', settings_views.ConsoleUserDetailAPIView.as_view(), name='console-user-detail'),

    # Router URLs for record CRUD:
    # - GET    /<collection>/                 -> list
    # - POST   /<collection>/                 -> create
    # - GET    /<collection>/<id>/            -> retrieve
    # - PUT    /<collection>/<id>/            -> update
    # - PATCH  /<collection>/<id>/            -> partial_update
    # - DELETE /<collection>/<id>/?confirm=true -> destroy
    # - GET    /deductions/by-employee/       -> grouped deductions
    # - GET    /partners/directory/           -> partners and vendors
    # - GET    /weekly-trips/employee/<id>/   -> trips of one employee
    path('', include(router.urls)),
]
