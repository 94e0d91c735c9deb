from django.contrib.auth.models import User
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver


class UserProfile(models.Model):
    ROLE_CHOICES = [
        ("user", "User"),
        ("admin", "Admin"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=150, blank=True)
    username = models.CharField(max_length=150, blank=True)
    shipping_address = models.CharField(max_length=500, blank=True)
    phone_number = models.CharField(max_length=30, blank=True)
    is_admin = models.BooleanField(default=False)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="user")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username}'s Profile"

    def set_admin(self, is_admin=True):
        """Flip the admin flag on the profile and the staff bit on the user together."""
        self.is_admin = is_admin
        self.role = "admin" if is_admin else "user"
        self.save(update_fields=["is_admin", "role", "updated_at"])
        if self.user.is_staff != is_admin:
            self.user.is_staff = is_admin
            self.user.save(update_fields=["is_staff"])


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    if created:
        UserProfile.objects.create(
            user=instance,
            username=instance.username,
            full_name=instance.get_full_name(),
            is_admin=instance.is_staff,
            role="admin" if instance.is_staff else "user",
        )


@receiver(post_save, sender=User)
def save_user_profile(sender, instance, created, **kwargs):
    profile = getattr(instance, 'profile', None)
    if not created and profile is not None and profile.username != instance.username:
        profile.username = instance.username
        profile.save(update_fields=["username"])
