"""Core permissions.

Every practice endpoint requires an authenticated user whose doctor profile
has been completed (onboarding). Ownership of individual records is not a
permission-class concern here: the service layer verifies it against the
DoctorContext and raises AccessDenied / ResourceNotFound.
"""

from rest_framework.permissions import BasePermission

from .exceptions import OnboardingRequired


class IsOnboardedDoctor(BasePermission):
    """Permission: authenticated user with a completed doctor profile.

    - anonymous: False (DRF answers 401)
    - authenticated, not onboarded: raises OnboardingRequired (403)
    """

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        if not getattr(user, "is_onboarded", False):
            raise OnboardingRequired()

        return True


class DoctorContextMixin:
    """View mixin resolving the DoctorContext once per request."""

    permission_classes = [IsOnboardedDoctor]

    def get_doctor_context(self):
        from .context import resolve_doctor_context

        ctx = getattr(self, "_doctor_context", None)
        if ctx is None:
            ctx = resolve_doctor_context(self.request.user)
            self._doctor_context = ctx
        return ctx
