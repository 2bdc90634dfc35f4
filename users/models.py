"""
Holds the User model, its manager and the Follow relation.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from socialhub.querysets import SoftDeleteQuerySet


class UserManager(BaseUserManager.from_queryset(SoftDeleteQuerySet)):
    """
    Custom user manager where email is the login identifier
    """

    def create_user(self, username, email, password, **extra_fields):
        """
        Create and save a User with the given username, email and password.
        """
        if not email:
            raise ValueError(_("The Email must be set"))
        email = self.normalize_email(email).lower()
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save()
        return user

    def create_superuser(self, username, email, password, **extra_fields):
        """
        Create and save a SuperUser with the given username, email and password.
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError(_("Superuser must have is_staff=True."))
        if extra_fields.get("is_superuser") is not True:
            raise ValueError(_("Superuser must have is_superuser=True."))
        return self.create_user(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model with profile fields and denormalized follow counters.
    """

    email = models.EmailField(_("email address"), unique=True)
    full_name = models.CharField(max_length=100, blank=True, default="")
    bio = models.CharField(max_length=150, blank=True, default="")
    avatar = models.CharField(max_length=500, blank=True, default="")
    followers_count = models.PositiveIntegerField(default=0)
    following_count = models.PositiveIntegerField(default=0)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    class Meta:
        db_table = "user"

    def __str__(self):
        return self.username

    def soft_delete(self):
        """
        Tombstone the account. The handle and email are rewritten so they can
        be registered again, and the account is deactivated so its tokens no
        longer authenticate.
        """
        self.username = f"deleted_{self.pk}"
        self.email = f"deleted_{self.pk}@deleted.invalid"
        self.full_name = ""
        self.bio = ""
        self.avatar = ""
        self.is_active = False
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.set_unusable_password()
        self.save()


class Follow(models.Model):
    follower = models.ForeignKey(
        User, related_name="following_relations", on_delete=models.CASCADE
    )
    following = models.ForeignKey(
        User, related_name="follower_relations", on_delete=models.CASCADE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["follower", "following"], name="unique_follow"
            )
        ]
        indexes = [
            models.Index(fields=["following", "-created_at"], name="follow_following_idx"),
            models.Index(fields=["follower", "-created_at"], name="follow_follower_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.follower} follows {self.following}"
