from rest_framework import serializers
from django.contrib.auth.models import User
from user.models import UserProfile


class GoogleLoginSerializer(serializers.Serializer):
    credential = serializers.CharField(required=False, allow_blank=True)


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserProfile
        fields = ('picture',)


class UserSerializer(serializers.ModelSerializer):
    """Caller-facing profile; never exposes the Google subject id."""
    profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'email', 'first_name', 'last_name', 'profile')

    def get_profile(self, obj):
        if hasattr(obj, 'profile') and obj.profile:
            return ProfileSerializer(obj.profile, context=self.context).data
        return None


class UserListSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'first_name', 'last_name', 'email')
