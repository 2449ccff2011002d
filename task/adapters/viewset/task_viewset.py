from drf_spectacular.utils import extend_schema
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, filters, status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from taskboard.jwt_auth import CookieJWTAuthentication
from task import services
from task.models import Task
from ..serializers.task_serializer import TaskSerializer, TaskStatusSerializer, TaskWriteSerializer


class TaskViewset(viewsets.ModelViewSet):
    """
    Task board API.

    Every authenticated user sees and may edit or delete every task; only
    status moves are restricted (see task.permission).
    """
    queryset = Task.objects.all()
    serializer_class = TaskSerializer
    permission_classes = [IsAuthenticated]
    authentication_classes = [CookieJWTAuthentication]
    pagination_class = None

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'priority', 'assignee', 'owner']
    search_fields = ['title', 'description']
    ordering_fields = ['due_date', 'created_at', 'updated_at', 'priority', 'title']
    ordering = ['-created_at', '-id']

    def get_queryset(self):
        return (
            Task.objects.select_related('owner', 'assignee')
            .prefetch_related('status_history')
            .order_by('-created_at', '-id')
        )

    def get_serializer_class(self):
        if self.action in ['create', 'update']:
            return TaskWriteSerializer
        if self.action == 'update_status':
            return TaskStatusSerializer
        return TaskSerializer

    def get_object(self):
        pk = str(self.kwargs.get('pk', ''))
        # ASCII digits only; isdigit() alone also accepts characters like '²'
        if not (pk.isascii() and pk.isdigit()):
            raise ValidationError({'id': 'Invalid task ID'})
        try:
            task = self.get_queryset().get(pk=int(pk))
        except Task.DoesNotExist:
            raise NotFound("Task not found")
        self.check_object_permissions(self.request, task)
        return task

    def _read(self, task):
        # Reload so the response carries the committed history
        return TaskSerializer(self.get_queryset().get(pk=task.pk)).data

    @extend_schema(
        request=TaskWriteSerializer,
        responses={201: TaskSerializer}
    )
    def create(self, request, *args, **kwargs):
        write_serializer = self.get_serializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        instance = write_serializer.save()

        return Response(
            {
                "success": True,
                "message": 'Task created successfully',
                "task": self._read(instance),
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses={200: TaskSerializer(many=True)})
    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response(
            {
                "success": True,
                "message": 'Tasks fetched successfully',
                "tasks": serializer.data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        request=TaskWriteSerializer,
        responses={200: TaskSerializer}
    )
    def update(self, request, *args, **kwargs):
        instance = self.get_object()

        write_serializer = self.get_serializer(instance, data=request.data)
        write_serializer.is_valid(raise_exception=True)
        try:
            instance = write_serializer.save()
        except Task.DoesNotExist:
            raise NotFound("Task not found")

        return Response(
            {
                "success": True,
                "message": 'Task updated successfully',
                "data": {"task": self._read(instance)},
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        request=TaskStatusSerializer,
        responses={200: TaskSerializer}
    )
    def update_status(self, request, *args, **kwargs):
        # Body first: a bad status is a 400 even when the task is missing
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        instance = self.get_object()

        try:
            task, previous_status = services.transition_status(
                instance.pk,
                request.user,
                new_status,
                comment=serializer.validated_data.get('comment'),
            )
        except Task.DoesNotExist:
            raise NotFound("Task not found")

        return Response(
            {
                "success": True,
                "message": 'Task status updated successfully',
                "data": {
                    "task": self._read(task),
                    "previous_status": previous_status,
                    "new_status": new_status,
                },
            },
            status=status.HTTP_200_OK,
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            services.delete_task(instance.pk)
        except Task.DoesNotExist:
            raise NotFound("Task not found")

        return Response(
            {"success": True, "message": 'Task deleted successfully'},
            status=status.HTTP_200_OK,
        )
