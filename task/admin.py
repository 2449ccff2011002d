from django.contrib import admin
from django_summernote.admin import SummernoteModelAdmin

from .models import Task, TaskStatusHistory


class TaskStatusHistoryInline(admin.TabularInline):
    model = TaskStatusHistory
    extra = 0
    can_delete = False
    fields = ('status', 'changed_by', 'changed_at', 'comment')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Task)
class TaskAdmin(SummernoteModelAdmin):
    list_display = ('title', 'status', 'priority', 'owner', 'assignee', 'due_date')
    list_filter = ('status', 'priority')
    search_fields = ('title', 'description')
    summernote_fields = ('description',)
    # Status moves go through the API so the history stays complete
    readonly_fields = ('owner', 'status', 'created_at', 'updated_at')
    inlines = [TaskStatusHistoryInline]

    def has_add_permission(self, request):
        # Creation writes the initial history entry; use the API
        return False
