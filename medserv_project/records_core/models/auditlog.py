from django.db import models


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # Traceability for automatic side effects
    # Type of event being logged
    action = models.CharField(
        max_length=50
    )  # Common choices: create, update, link
    # What kind of object was affected
    object_type = models.CharField(
        max_length=100
    )  # (e.g., "Invoice", "DeliveryChallan", "Customer")
    # The primary key of the object
    object_id = models.CharField(max_length=100)
    # Store actual details of what changed, in JSON format
    changes = models.JSONField(null=True, blank=True)
    # Timestamp when the event was logged
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["object_type", "object_id"], name="auditlog_object_idx"),
            models.Index(fields=["created_at"], name="auditlog_created_idx"),
        ]

    def __str__(self):
        time = self.created_at
        action = self.action
        objType = self.object_type
        objId = self.object_id
        return f"[{time:%Y-%m-%d %H:%M}] {action} {objType}({objId})"
