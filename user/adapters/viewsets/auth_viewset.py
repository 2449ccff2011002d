import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError, transaction
from drf_spectacular.utils import extend_schema
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from rest_framework import status, viewsets
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from taskboard.jwt_auth import (
    CookieJWTAuthentication,
    clear_session_cookie,
    issue_session_token,
    set_session_cookie,
)
from ..serializers.user_serializers import GoogleLoginSerializer, UserListSerializer, UserSerializer
from ...models import UserProfile

logger = logging.getLogger(__name__)


def verify_google_id_token(token: str) -> dict:
    """
    Verify a Google ID token and return its claims.

    Raises ValueError when the token is malformed, expired, or issued for
    another audience.
    """
    client_id = settings.GOOGLE_CLIENT_ID
    if not client_id:
        raise ImproperlyConfigured("GOOGLE_CLIENT_ID is not set")
    return id_token.verify_oauth2_token(token, google_requests.Request(), audience=client_id)


def _bearer_token(request) -> str:
    header = request.META.get('HTTP_AUTHORIZATION', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return ''


def _find_profile(google_id):
    return (
        UserProfile.objects.select_for_update()
        .select_related('user')
        .filter(google_id=google_id)
        .first()
    )


@transaction.atomic
def _get_or_register_user(claims: dict):
    """Return (user, created) for the Google account described by ``claims``."""
    google_id = claims['sub']
    first_name = claims.get('given_name') or ''
    last_name = claims.get('family_name') or ''
    picture = claims.get('picture') or ''

    profile = _find_profile(google_id)
    if profile is None:
        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=f"google_{google_id}"[:150],
                    email=claims.get('email', ''),
                    first_name=first_name,
                    last_name=last_name,
                )
                UserProfile.objects.create(user=user, google_id=google_id, picture=picture)
            return user, True
        except IntegrityError:
            # A concurrent first login registered the same account
            profile = _find_profile(google_id)
            if profile is None:
                raise
            logger.info("Google account %s registered concurrently; reusing it", google_id)

    user = profile.user
    user.first_name = first_name or user.first_name
    user.last_name = last_name or user.last_name
    user.save(update_fields=['first_name', 'last_name'])
    if picture and picture != profile.picture:
        profile.picture = picture
        profile.save(update_fields=['picture', 'updated_at'])
    return user, False


class AuthViewSet(viewsets.ViewSet):
    # Login must work with a stale or missing session cookie
    authentication_classes = []
    permission_classes = [AllowAny]

    def get_authenticate_header(self, request):
        return 'Bearer'

    @extend_schema(request=GoogleLoginSerializer, responses={200: UserSerializer})
    def login_with_google(self, request):
        """
        Exchange a Google ID token for a session cookie.
        The token comes from `Authorization: Bearer <id_token>` or the
        `credential` body field posted by Google Identity Services.
        """
        serializer = GoogleLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        token = _bearer_token(request) or serializer.validated_data.get('credential', '')
        if not token:
            raise NotAuthenticated("No authentication token provided")

        try:
            claims = verify_google_id_token(token)
        except ValueError as e:
            logger.info("Rejected Google ID token: %s", e)
            raise AuthenticationFailed("Invalid Google identity token")
        except (google_exceptions.GoogleAuthError, ImproperlyConfigured):
            logger.exception("Google token verification failed")
            return Response(
                {"success": False, "message": "Internal server error"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if not claims.get('email_verified'):
            raise ValidationError({"email": "Email not verified with Google"})

        user, created = _get_or_register_user(claims)
        logger.info("Google login for user %s (new=%s)", user.id, created)

        response = Response(
            {
                "success": True,
                "message": (
                    'User registered and logged in successfully' if created
                    else 'User logged in successfully'
                ),
                "user": UserSerializer(user, context={'request': request}).data,
            },
            status=status.HTTP_200_OK,
        )
        set_session_cookie(response, issue_session_token(user))
        return response


class SessionViewSet(viewsets.ViewSet):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer})
    def profile(self, request):
        user = User.objects.select_related('profile').filter(pk=request.user.pk).first()
        if not user:
            raise NotFound("User not found")
        return Response(
            {
                "success": True,
                "user": UserSerializer(user, context={'request': request}).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=None, responses={200: None})
    def logout(self, request):
        """Clear the session cookie."""
        response = Response(
            {"success": True, "message": "Logged out successfully"},
            status=status.HTTP_200_OK,
        )
        clear_session_cookie(response)
        return response


class UserDirectoryViewSet(viewsets.GenericViewSet):
    authentication_classes = [CookieJWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = UserListSerializer

    def get_queryset(self):
        return User.objects.exclude(pk=self.request.user.pk).order_by('first_name', 'last_name', 'id')

    @extend_schema(
        summary="List every other user",
        description="Returns all users except the caller, with display fields only.",
        responses={200: UserListSerializer(many=True)},
    )
    def get_all(self, request):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(
            {
                "success": True,
                "message": 'Users fetched successfully',
                "users": serializer.data,
            },
            status=status.HTTP_200_OK,
        )
