from rest_framework.exceptions import PermissionDenied

from task.models import Status


OWNER_ONLY_MESSAGE = 'Only the task owner can move tasks to Done status'
OWNER_OR_ASSIGNEE_MESSAGE = 'You must be either the owner or assignee to move this task'


class TransitionDenied(PermissionDenied):
    """403 raised when the status-transition rule rejects a move."""


def can_transition(acting_user_id, task, requested_status) -> bool:
    """
    Decide whether a user may move ``task`` to ``requested_status``.

    ``task`` is anything exposing ``owner_id`` and ``assignee_id`` (a model
    instance or a plain snapshot). The rule looks only at the destination:

    - Done: owner only
    - anything else: owner, or the assignee when one is set
    """
    is_owner = task.owner_id == acting_user_id
    if requested_status == Status.DONE:
        return is_owner

    is_assignee = task.assignee_id is not None and task.assignee_id == acting_user_id
    return is_owner or is_assignee


def denial_for(requested_status) -> TransitionDenied:
    if requested_status == Status.DONE:
        return TransitionDenied(OWNER_ONLY_MESSAGE, code='owner_only')
    return TransitionDenied(OWNER_OR_ASSIGNEE_MESSAGE, code='owner_or_assignee')


def ensure_can_transition(acting_user_id, task, requested_status) -> None:
    """Raise TransitionDenied with the matching message when the move is not allowed."""
    if not can_transition(acting_user_id, task, requested_status):
        raise denial_for(requested_status)
