from ..models import AuditLog


def log_action(*, action: str, instance, changes: dict | None = None):
    """
    Central audit logger.
    Safe to call multiple times (caller ensures idempotency).
    """
    AuditLog.objects.create(
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
