from django.contrib import admin

from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'google_id', 'created_at')
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'google_id')
    readonly_fields = ('google_id', 'created_at', 'updated_at')
