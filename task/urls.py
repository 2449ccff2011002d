from django.urls import path
from task.adapters.viewset.task_viewset import TaskViewset
from user.adapters.viewsets.auth_viewset import UserDirectoryViewSet

urlpatterns = [
    path('create', TaskViewset.as_view({'post': 'create'}), name='task_create'),
    path('get', TaskViewset.as_view({'get': 'list'}), name='task_list'),
    # Other users, for the assignee picker
    path('users/getall', UserDirectoryViewSet.as_view({'get': 'get_all'}), name='task_users'),
    path(
        '<str:pk>',
        TaskViewset.as_view({'patch': 'update_status', 'put': 'update', 'delete': 'destroy'}),
        name='task_detail',
    ),
]
