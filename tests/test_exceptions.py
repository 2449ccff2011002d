from rest_framework.exceptions import ErrorDetail

from taskboard.exceptions import first_message


def test_first_message_walks_nested_details():
    detail = {
        "title": [ErrorDetail("Title is required", code="blank")],
        "priority": [ErrorDetail("Invalid priority value", code="invalid_choice")],
    }

    assert first_message(detail) == "Title is required"


def test_first_message_handles_lists_and_plain_strings():
    assert first_message([["deep"], "shallow"]) == "deep"
    assert first_message(ErrorDetail("Task not found", code="not_found")) == "Task not found"
    assert first_message({}) == ""
    assert first_message([]) == ""
