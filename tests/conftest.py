# tests/conftest.py

import itertools

import pytest
from django.conf import settings
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from taskboard.jwt_auth import issue_session_token
from task import services
from task.models import Priority
from user.models import UserProfile

_ids = itertools.count(1)


@pytest.fixture()
def make_user(db):
    """Factory for users that look like they signed in with Google."""

    def _make(first_name="Test", last_name="User", email=None):
        n = next(_ids)
        user = User.objects.create_user(
            username=f"google_sub-{n}",
            email=email or f"user{n}@example.com",
            first_name=first_name,
            last_name=last_name,
        )
        UserProfile.objects.create(user=user, google_id=f"sub-{n}")
        return user

    return _make


@pytest.fixture()
def owner(make_user):
    return make_user("Olive", "Owner")


@pytest.fixture()
def assignee(make_user):
    return make_user("Ada", "Assignee")


@pytest.fixture()
def stranger(make_user):
    return make_user("Sam", "Stranger")


@pytest.fixture()
def make_task(owner, assignee):
    def _make(**fields):
        fields.setdefault("title", "Write the report")
        fields.setdefault("description", "Quarterly numbers")
        fields.setdefault("priority", Priority.MEDIUM)
        fields.setdefault("assignee", assignee)
        task_owner = fields.pop("owner", owner)
        return services.create_task(task_owner, **fields)

    return _make


@pytest.fixture()
def api_client():
    return APIClient()


@pytest.fixture()
def client_for():
    """APIClient carrying a session cookie for the given user."""

    def _client(user):
        client = APIClient()
        client.cookies[settings.AUTH_COOKIE_NAME] = issue_session_token(user)
        return client

    return _client
