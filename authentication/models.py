"""
Actor model for PropDesk Backend.

Every work-order action and every notification references a `User` by id.
Profiles are soft-deleted only; readers that resolve an actor id which no
longer maps to an active profile fall back to "Unknown User".
"""

from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin

from core.models import BaseModel


class UserRole:
    """
    Role constants.

    Roles are informational for the work-order core: every active actor may
    act on any work order.
    """
    ADMIN = 'admin'
    MANAGER = 'manager'
    STAFF = 'staff'
    TECHNICIAN = 'technician'

    CHOICES = [
        (ADMIN, 'Administrator'),
        (MANAGER, 'Property Manager'),
        (STAFF, 'Staff'),
        (TECHNICIAN, 'Technician'),
    ]


class UserManager(BaseUserManager):
    """Manager for `User`; hides soft-deleted profiles."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('User must have an email address')

        user = self.model(email=self.normalize_email(email), **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    An actor of the system: requests, performs and is notified about work.
    """

    email = models.EmailField(
        unique=True,
        help_text="Login identifier"
    )

    full_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Display name shown in history and notifications"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.CHOICES,
        default=UserRole.STAFF,
        db_index=True
    )

    is_staff = models.BooleanField(
        default=False,
        help_text="Designates whether user can access admin site"
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Designates whether user account is active"
    )

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'propdesk_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['full_name', 'email']

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        return self.full_name or self.email
