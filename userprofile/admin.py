from django.contrib import admin
from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "phone_number", "is_admin", "role")
    list_filter = ("is_admin", "role")
    search_fields = ("user__email", "user__username", "full_name")
