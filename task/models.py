from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


class Status(models.TextChoices):
    OPEN = 'Open', 'Open'
    IN_PROGRESS = 'In Progress', 'In Progress'
    REVIEW = 'Review', 'Review'
    DONE = 'Done', 'Done'


class Priority(models.TextChoices):
    LOW = 'Low', 'Low'
    MEDIUM = 'Medium', 'Medium'
    HIGH = 'High', 'High'


class Task(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OPEN)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    # Owner is fixed at creation
    owner = models.ForeignKey(User, on_delete=models.PROTECT, related_name='owned_tasks')
    assignee = models.ForeignKey(
        User, on_delete=models.SET_NULL, related_name='assigned_tasks', null=True, blank=True
    )
    labels = models.JSONField(default=list, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['owner', 'status'], name='task_owner_status_idx'),
            models.Index(fields=['assignee', 'status'], name='task_assignee_status_idx'),
            models.Index(fields=['-created_at'], name='task_created_at_idx'),
        ]


class TaskStatusHistory(models.Model):
    """Append-only audit record of a task status change."""
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=20, choices=Status.choices)
    changed_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='task_status_changes')
    changed_at = models.DateTimeField(default=timezone.now)
    comment = models.TextField(blank=True, default='')

    def __str__(self):
        return f"{self.task_id}: {self.status} by {self.changed_by_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Status history entries cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status history entries cannot be deleted")

    class Meta:
        verbose_name_plural = "Task status history"
        ordering = ['changed_at', 'id']
