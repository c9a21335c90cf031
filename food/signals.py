from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import UserProfile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """Ensure each user has an associated profile."""
    if created and not hasattr(instance, "profile"):
        role = UserProfile.ADMIN if instance.is_superuser else UserProfile.USER
        UserProfile.objects.create(user=instance, role=role)
