"""Doctor context: the resolved identity passed into every data-access call.

Views resolve the context once per request from ``request.user`` and hand it
to the service layer explicitly; services never read the request or any
global state to find out who is asking.
"""

from __future__ import annotations

from dataclasses import dataclass

from rest_framework.exceptions import NotAuthenticated

from .exceptions import OnboardingRequired


@dataclass(frozen=True)
class DoctorContext:
    doctor_id: int
    user: object = None

    def owns(self, obj, field: str = 'doctor_id') -> bool:
        return getattr(obj, field, None) == self.doctor_id


def resolve_doctor_context(user) -> DoctorContext:
    """Map an authenticated user onto a DoctorContext.

    Raises:
        NotAuthenticated: no valid session (401)
        OnboardingRequired: session valid, but the profile is incomplete (403)
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        raise NotAuthenticated()

    if not getattr(user, 'is_onboarded', False):
        raise OnboardingRequired()

    return DoctorContext(doctor_id=user.id, user=user)
