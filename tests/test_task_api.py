import pytest

from task import services
from task.models import Status, Task, TaskStatusHistory
from task.permission import OWNER_ONLY_MESSAGE, OWNER_OR_ASSIGNEE_MESSAGE

pytestmark = pytest.mark.django_db

BASE = "/api/v1/task"


def _payload(**overrides):
    body = {
        "title": "  Ship the release  ",
        "description": "Tag, build and publish",
        "priority": "High",
        "labels": [" release ", "", "ops", "release"],
        "due_date": "2026-11-01T12:00:00Z",
    }
    body.update(overrides)
    return body


def test_requires_session(api_client):
    response = api_client.get(f"{BASE}/get")

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_create_task(client_for, owner, assignee):
    response = client_for(owner).post(
        f"{BASE}/create", _payload(assignee=assignee.pk), format="json"
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    task = body["task"]
    assert task["title"] == "Ship the release"
    assert task["status"] == "Open"
    assert task["owner"]["id"] == owner.pk
    assert task["assignee"] == {"id": assignee.pk, "first_name": "Ada", "last_name": "Assignee"}
    assert task["labels"] == ["release", "ops"]
    assert len(task["status_history"]) == 1
    assert task["status_history"][0]["comment"] == "Task created"


def test_create_without_assignee(client_for, owner):
    response = client_for(owner).post(f"{BASE}/create", _payload(status="Review"), format="json")

    assert response.status_code == 201
    assert response.json()["task"]["assignee"] is None
    assert response.json()["task"]["status"] == "Review"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": "   "}, "Title is required"),
        ({"description": ""}, "Description is required"),
        ({"priority": "Urgent"}, "Invalid priority value"),
        ({"status": "Blocked"}, "Invalid status value"),
        ({"assignee": "not-an-id"}, "Invalid assignee ID"),
        ({"assignee": 987654}, "Assignee not found"),
        ({"due_date": "someday"}, "Invalid due date"),
        ({"labels": "ops"}, "Labels must be an array"),
        ({"labels": ["ops", 5]}, "Labels must be strings"),
    ],
)
def test_create_rejects_invalid_fields(client_for, owner, overrides, message):
    response = client_for(owner).post(f"{BASE}/create", _payload(**overrides), format="json")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == message
    assert Task.objects.count() == 0


def test_list_returns_every_task(client_for, make_task, owner, stranger):
    make_task(title="first")
    make_task(title="second")

    response = client_for(stranger).get(f"{BASE}/get")

    assert response.status_code == 200
    tasks = response.json()["tasks"]
    assert [t["title"] for t in tasks] == ["second", "first"]
    assert tasks[0]["assignee"]["first_name"] == "Ada"


def test_list_filters_by_status(client_for, make_task, owner):
    make_task(title="open one")
    make_task(title="in review", status=Status.REVIEW)

    response = client_for(owner).get(f"{BASE}/get", {"status": "Review"})

    assert [t["title"] for t in response.json()["tasks"]] == ["in review"]


def test_status_transition_scenario(client_for, make_task, owner, assignee):
    task = make_task()
    url = f"{BASE}/{task.pk}"

    response = client_for(assignee).patch(url, {"status": "Review"}, format="json")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["previous_status"] == "Open"
    assert data["new_status"] == "Review"
    assert len(data["task"]["status_history"]) == 2
    assert data["task"]["status_history"][-1]["changed_by"] == assignee.pk

    response = client_for(assignee).patch(url, {"status": "Done"}, format="json")
    assert response.status_code == 403
    assert response.json()["message"] == OWNER_ONLY_MESSAGE
    assert response.json()["code"] == "owner_only"
    assert TaskStatusHistory.objects.filter(task=task).count() == 2

    response = client_for(owner).patch(url, {"status": "Done", "comment": "shipped"}, format="json")
    assert response.status_code == 200
    history = response.json()["data"]["task"]["status_history"]
    assert len(history) == 3
    assert history[-1]["comment"] == "shipped"


def test_stranger_transition_denied(client_for, make_task, stranger):
    task = make_task()

    response = client_for(stranger).patch(f"{BASE}/{task.pk}", {"status": "In Progress"}, format="json")

    assert response.status_code == 403
    assert response.json()["message"] == OWNER_OR_ASSIGNEE_MESSAGE
    assert TaskStatusHistory.objects.filter(task=task).count() == 1


def test_transition_rejects_unknown_status(client_for, make_task, owner):
    task = make_task()

    response = client_for(owner).patch(f"{BASE}/{task.pk}", {"status": "Archived"}, format="json")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status value"


def test_malformed_and_missing_task_ids(client_for, owner):
    client = client_for(owner)

    for bad_id in ("abc", "%C2%B2", "-1"):
        response = client.patch(f"{BASE}/{bad_id}", {"status": "Review"}, format="json")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid task ID"

    response = client.put(f"{BASE}/%C2%B2", _payload(status="Open"), format="json")
    assert response.status_code == 400
    response = client.delete(f"{BASE}/%C2%B2")
    assert response.status_code == 400

    response = client.patch(f"{BASE}/424242", {"status": "Review"}, format="json")
    assert response.status_code == 404
    assert response.json()["message"] == "Task not found"


def test_status_checked_before_task_lookup(client_for, owner):
    response = client_for(owner).patch(f"{BASE}/424242", {"status": "Archived"}, format="json")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status value"


def test_full_replace(client_for, make_task, stranger):
    task = make_task()

    response = client_for(stranger).put(
        f"{BASE}/{task.pk}",
        _payload(title="Renamed", status="Open", labels=["a"]),
        format="json",
    )

    assert response.status_code == 200
    updated = response.json()["data"]["task"]
    assert updated["title"] == "Renamed"
    assert updated["assignee"] is None
    assert updated["labels"] == ["a"]
    assert updated["owner"]["id"] == task.owner_id
    assert len(updated["status_history"]) == 1


def test_full_replace_status_change_is_checked(client_for, make_task, owner, assignee):
    task = make_task()
    url = f"{BASE}/{task.pk}"

    response = client_for(assignee).put(url, _payload(status="Done", assignee=assignee.pk), format="json")
    assert response.status_code == 403
    assert response.json()["message"] == OWNER_ONLY_MESSAGE

    response = client_for(owner).put(url, _payload(status="Done", assignee=assignee.pk), format="json")
    assert response.status_code == 200
    history = response.json()["data"]["task"]["status_history"]
    assert [h["status"] for h in history] == ["Open", "Done"]


def test_full_replace_requires_status(client_for, make_task, owner):
    task = make_task()

    payload = _payload()
    response = client_for(owner).put(f"{BASE}/{task.pk}", payload, format="json")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid status value"


def test_delete_task(client_for, make_task, stranger):
    task = make_task()
    client = client_for(stranger)

    response = client.delete(f"{BASE}/{task.pk}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Task deleted successfully"}
    assert not Task.objects.filter(pk=task.pk).exists()

    response = client.delete(f"{BASE}/{task.pk}")
    assert response.status_code == 404


def test_unexpected_error_is_enveloped(client_for, make_task, owner, monkeypatch):
    task = make_task()

    def boom(*args, **kwargs):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(services, "delete_task", boom)

    response = client_for(owner).delete(f"{BASE}/{task.pk}")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_list_users_excludes_caller(client_for, owner, assignee, stranger):
    response = client_for(owner).get(f"{BASE}/users/getall")

    assert response.status_code == 200
    users = response.json()["users"]
    assert {u["id"] for u in users} == {assignee.pk, stranger.pk}
    assert set(users[0]) == {"id", "first_name", "last_name", "email"}
