"""
Task mutations. Each runs in one transaction on the given database alias so
a status change and its history record commit together.
"""
import logging

from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from task.models import Status, Task, TaskStatusHistory
from task.permission import TransitionDenied, ensure_can_transition

logger = logging.getLogger(__name__)

TASK_CREATED_COMMENT = 'Task created'

# Fields a full replace may overwrite; owner and history are not among them
MUTABLE_FIELDS = ('title', 'description', 'status', 'priority', 'assignee', 'labels', 'due_date')


def status_change_comment(previous_status, new_status) -> str:
    return f"Status changed from {previous_status} to {new_status}"


def _append_history(task, actor, new_status, comment, using):
    return TaskStatusHistory.objects.using(using).create(
        task=task,
        status=new_status,
        changed_by=actor,
        changed_at=timezone.now(),
        comment=comment or '',
    )


def create_task(owner, using=DEFAULT_DB_ALIAS, **fields):
    """Create a task owned by ``owner`` with its initial history entry."""
    fields.setdefault('status', Status.OPEN)
    with transaction.atomic(using=using):
        task = Task(owner=owner, **fields)
        task.save(using=using)
        _append_history(task, owner, task.status, TASK_CREATED_COMMENT, using)
    logger.info("Task %s created by user %s", task.pk, owner.pk)
    return task


def transition_status(task_id, actor, new_status, comment=None, using=DEFAULT_DB_ALIAS):
    """
    Move a task to ``new_status`` on behalf of ``actor``.

    Returns ``(task, previous_status)``. Raises ``Task.DoesNotExist`` or
    ``TransitionDenied``; nothing is written when either is raised.
    """
    with transaction.atomic(using=using):
        task = Task.objects.using(using).select_for_update().get(pk=task_id)
        try:
            ensure_can_transition(actor.pk, task, new_status)
        except TransitionDenied:
            logger.info(
                "User %s denied moving task %s from %s to %s",
                actor.pk, task.pk, task.status, new_status,
            )
            raise

        previous_status = task.status
        task.status = new_status
        _append_history(
            task, actor, new_status,
            comment or status_change_comment(previous_status, new_status),
            using,
        )
        task.save(using=using, update_fields=['status', 'updated_at'])

    logger.info("Task %s moved from %s to %s by user %s", task.pk, previous_status, new_status, actor.pk)
    return task, previous_status


def replace_task(task_id, actor, using=DEFAULT_DB_ALIAS, **fields):
    """
    Overwrite the mutable fields of a task.

    A changed status goes through the transition rule and is recorded in the
    history like any other status change.
    """
    unknown = set(fields) - set(MUTABLE_FIELDS)
    if unknown:
        raise TypeError(f"Cannot replace fields: {', '.join(sorted(unknown))}")

    with transaction.atomic(using=using):
        task = Task.objects.using(using).select_for_update().get(pk=task_id)
        previous_status = task.status
        new_status = fields.get('status', previous_status)

        if new_status != previous_status:
            ensure_can_transition(actor.pk, task, new_status)
            _append_history(
                task, actor, new_status,
                status_change_comment(previous_status, new_status),
                using,
            )

        for name, value in fields.items():
            setattr(task, name, value)
        task.save(using=using)

    logger.info("Task %s replaced by user %s", task.pk, actor.pk)
    return task


def delete_task(task_id, using=DEFAULT_DB_ALIAS):
    with transaction.atomic(using=using):
        task = Task.objects.using(using).select_for_update().get(pk=task_id)
        task.delete(using=using)
    logger.info("Task %s deleted", task_id)
