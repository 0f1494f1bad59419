"""Core App URLs - Authentication, Onboarding & Health.

Prefix: /api/
Routes:
    GET  /api/health/          - Health check (no auth)
    POST /api/auth/login/      - JWT token obtain with user/role info
    POST /api/auth/refresh/    - JWT token refresh
    GET  /api/auth/me/         - Current user info
    GET  /api/user-setup/      - Onboarding status
    POST /api/onboarding/      - Complete doctor profile
    GET  /api/roles/           - Role reference list
    GET  /api/document-types/  - Document type reference list
"""

from django.urls import path

from medpoc_backend.core.views import (
    health,
    DocumentTypeListView,
    LoginView,
    MeView,
    OnboardingView,
    RefreshView,
    RoleListView,
    UserSetupView,
)

app_name = 'core'

urlpatterns = [
    path('health/', health, name='health'),

    # JWT Authentication
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/refresh/', RefreshView.as_view(), name='refresh'),
    path('auth/me/', MeView.as_view(), name='me'),

    # Onboarding
    path('user-setup/', UserSetupView.as_view(), name='user_setup'),
    path('onboarding/', OnboardingView.as_view(), name='onboarding'),
    path('roles/', RoleListView.as_view(), name='roles'),
    path('document-types/', DocumentTypeListView.as_view(), name='document_types'),
]
