from rest_framework import serializers
from django.contrib.auth.models import User
from task.models import Priority, Status, Task, TaskStatusHistory
from task import services


class TaskUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'first_name', 'last_name')


class TaskStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskStatusHistory
        fields = ('status', 'changed_by', 'changed_at', 'comment')
        read_only_fields = fields


class TaskSerializer(serializers.ModelSerializer):
    owner = TaskUserSerializer(read_only=True)
    assignee = TaskUserSerializer(read_only=True)
    status_history = TaskStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = (
            'id',
            'title',
            'description',
            'status',
            'priority',
            'owner',
            'assignee',
            'labels',
            'due_date',
            'status_history',
            'created_at',
            'updated_at',
        )


class LabelField(serializers.CharField):
    """CharField that refuses numbers and other non-string values."""
    default_error_messages = {'invalid': 'Labels must be strings'}

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class TaskWriteSerializer(serializers.ModelSerializer):
    """
    Validates create and full-replace payloads. Status defaults to Open on
    create and is required on replace.
    """
    title = serializers.CharField(
        max_length=255,
        error_messages={'required': 'Title is required', 'blank': 'Title is required'},
    )
    description = serializers.CharField(
        error_messages={'required': 'Description is required', 'blank': 'Description is required'},
    )
    priority = serializers.ChoiceField(
        choices=Priority.choices,
        error_messages={'required': 'Invalid priority value', 'invalid_choice': 'Invalid priority value'},
    )
    status = serializers.ChoiceField(
        choices=Status.choices,
        required=False,
        error_messages={'invalid_choice': 'Invalid status value'},
    )
    assignee = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
        error_messages={
            'incorrect_type': 'Invalid assignee ID',
            'does_not_exist': 'Assignee not found',
        },
    )
    labels = serializers.ListField(
        child=LabelField(allow_blank=True, trim_whitespace=True),
        required=False,
        error_messages={'not_a_list': 'Labels must be an array'},
    )
    due_date = serializers.DateTimeField(
        required=False,
        allow_null=True,
        error_messages={'invalid': 'Invalid due date'},
    )

    class Meta:
        model = Task
        fields = (
            'title',
            'description',
            'priority',
            'status',
            'assignee',
            'labels',
            'due_date',
        )

    def validate_labels(self, value):
        # Trim, drop empties, keep the first occurrence of each label
        return list(dict.fromkeys(label for label in value if label))

    def validate(self, attrs):
        if self.instance is not None and 'status' not in attrs:
            raise serializers.ValidationError({'status': 'Invalid status value'})
        return attrs

    def create(self, validated_data):
        request = self.context['request']
        return services.create_task(request.user, **validated_data)

    def update(self, instance, validated_data):
        request = self.context['request']
        validated_data.setdefault('assignee', None)
        validated_data.setdefault('labels', [])
        validated_data.setdefault('due_date', None)
        return services.replace_task(instance.pk, request.user, **validated_data)


class TaskStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=Status.choices,
        error_messages={'required': 'Invalid status value', 'invalid_choice': 'Invalid status value'},
    )
    comment = serializers.CharField(required=False, allow_blank=True, max_length=1000)
