from django.contrib.auth.models import AbstractUser
from django.db import models

from EduPlatformApp.core.choices import UserRole, STAFF_ROLES

class User(AbstractUser):
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.STUDENT)
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    @property
    def is_director(self) -> bool:
        return self.role == UserRole.DIRECTOR

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_platform_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __str__(self) -> str:
        full = self.get_full_name()
        return full or self.email
