from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..managers import AgentManager
from .base import ValidatedModel, money_field

AGENT_STATUS_CHOICES = [
    ("Active", "Active"),
    ("Inactive", "Inactive"),
]

AGENT_PERMISSIONS = (
    "dashboard",
    "inventory",
    "customers",
    "invoices",
    "quotations",
    "accounting",
    "delivery",
    "reports",
    "agents",
)

MIN_PASSWORD_LENGTH = 6


class Agent(ValidatedModel):  # Sales agent with a login
    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    # Salted hash (Django password hasher format), never the raw value
    password = models.CharField(max_length=128)
    phone = models.CharField(max_length=50, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    sales = money_field()
    status = models.CharField(max_length=10, choices=AGENT_STATUS_CHOICES, default="Active")
    join_date = models.DateField(default=timezone.localdate)
    permissions = models.JSONField(default=list, blank=True)

    objects = AgentManager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def set_password(self, raw_password):
        if not raw_password or len(raw_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                {"password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters."}
            )
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    def clean(self):
        if not isinstance(self.permissions, list):
            raise ValidationError({"permissions": "Permissions must be a list."})
        unknown = [p for p in self.permissions if p not in AGENT_PERMISSIONS]
        if unknown:
            raise ValidationError({"permissions": f"Unknown permissions: {', '.join(map(str, unknown))}"})

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        return super().save(*args, **kwargs)
