"""
Session-token authentication that reads the signed token from the
``Authtoken`` cookie instead of the Authorization header.
"""

from django.conf import settings
from django.http import HttpRequest
from rest_framework import exceptions, status
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError, InvalidToken
from rest_framework_simplejwt.tokens import AccessToken
from typing import Tuple, Optional


class SessionTokenInvalid(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid or expired access token"
    default_code = "token_not_valid"


def issue_session_token(user) -> str:
    """
    Sign a session token for ``user``.

    The token carries the internal user id (``user_id``) and the Google
    subject id (``google_id``); lifetime comes from ``SIMPLE_JWT``.
    """
    token = AccessToken.for_user(user)
    profile = getattr(user, "profile", None)
    token["google_id"] = profile.google_id if profile else None
    return str(token)


def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=int(settings.SESSION_TOKEN_LIFETIME.total_seconds()),
        secure=settings.AUTH_COOKIE_SECURE,
        httponly=True,  # Not accessible from JavaScript
        samesite=settings.AUTH_COOKIE_SAMESITE,
        path="/",
        domain=settings.AUTH_COOKIE_DOMAIN,
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        path="/",
        domain=settings.AUTH_COOKIE_DOMAIN,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that reads the session token from the HttpOnly cookie.
    Falls back to the Authorization header (testing tools, scripts).

    A cookie that is present but fails verification is rejected with 403;
    a request with no credentials at all is left to the permission layer (401).
    """

    def authenticate(self, request: HttpRequest) -> Optional[Tuple]:
        access_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)

        if access_token is None:
            return super().authenticate(request)

        try:
            validated_token = self.get_validated_token(access_token)
            user = self.get_user(validated_token)
        except (InvalidToken, TokenError, exceptions.AuthenticationFailed):
            raise SessionTokenInvalid()

        return user, validated_token

    def authenticate_header(self, request: HttpRequest) -> str:
        """
        Value of the `WWW-Authenticate` header in a `401 Unauthenticated`
        response.
        """
        return 'Bearer'
