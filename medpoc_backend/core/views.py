"""Core app views.

Contains:
- health: Health check endpoint
- LoginView / RefreshView: JWT tokens
- MeView: current authenticated user
- UserSetupView / OnboardingView: doctor profile completion
- RoleListView / DocumentTypeListView: reference lists for the onboarding form
"""

from django.db import DatabaseError, connection
from django.http import JsonResponse

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from medpoc_backend.core.exceptions import InvalidPracticeData
from medpoc_backend.core.models import DocumentType, Role
from medpoc_backend.core.serializers import (
    DocumentTypeSerializer,
    LoginSerializer,
    OnboardingSerializer,
    RefreshSerializer,
    RoleSerializer,
    UserMeSerializer,
)
from medpoc_backend.core.utils import log_patient_action


def health(request):
    """Health check endpoint - no authentication required."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1;')
    except DatabaseError as exc:
        return JsonResponse({'status': 'error', 'detail': str(exc)}, status=503)

    return JsonResponse({'status': 'ok'})


class LoginView(APIView):
    """Obtain JWT access and refresh tokens.

    POST /api/auth/login/
    Body: {"username": "...", "password": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        refresh = RefreshToken.for_user(user)
        role = getattr(user, 'role', None)
        refresh['role'] = role.name if role else None

        return Response(
            {
                'success': True,
                'data': {
                    'user': UserMeSerializer(user).data,
                    'access': str(refresh.access_token),
                    'refresh': str(refresh),
                },
            },
            status=status.HTTP_200_OK,
        )


class RefreshView(APIView):
    """Refresh JWT access token.

    POST /api/auth/refresh/
    Body: {"refresh": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            refresh = RefreshToken(serializer.validated_data['refresh'])
        except TokenError as exc:
            raise InvalidPracticeData(str(exc), field='refresh') from exc

        return Response(
            {'success': True, 'data': {'access': str(refresh.access_token)}},
            status=status.HTTP_200_OK,
        )


class MeView(APIView):
    """GET /api/auth/me/"""

    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response({'success': True, 'data': UserMeSerializer(request.user).data})


class UserSetupView(APIView):
    """GET /api/user-setup/ -> {"success": true, "needsOnboarding": bool}"""

    permission_classes = [IsAuthenticated]
    failure_message = 'Failed to check onboarding status'

    def get(self, request, *args, **kwargs):
        return Response({'success': True, 'needsOnboarding': not request.user.is_onboarded})


class OnboardingView(APIView):
    """POST /api/onboarding/

    Completes the doctor profile of the authenticated user. Allowed for
    users that are not onboarded yet (and for re-submission afterwards).
    """

    permission_classes = [IsAuthenticated]
    failure_message = 'Failed to complete onboarding'

    def post(self, request, *args, **kwargs):
        serializer = OnboardingSerializer(instance=request.user, data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        log_patient_action(user, 'ONBOARDING_COMPLETED', meta={'specialty': user.specialty})

        return Response(
            {'success': True, 'data': UserMeSerializer(user).data},
            status=status.HTTP_200_OK,
        )


class _ReferenceListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({'success': True, 'data': serializer.data})


class RoleListView(_ReferenceListView):
    """GET /api/roles/"""

    serializer_class = RoleSerializer
    failure_message = 'Failed to fetch roles'

    def get_queryset(self):
        return Role.objects.using('default').all().order_by('name')


class DocumentTypeListView(_ReferenceListView):
    """GET /api/document-types/"""

    serializer_class = DocumentTypeSerializer
    failure_message = 'Failed to fetch document types'

    def get_queryset(self):
        return DocumentType.objects.using('default').all().order_by('name')
