from django.contrib.auth.base_user import BaseUserManager
from django.db import models

# -----------------------------------------
# Shared lookups for quotation / invoice /
# delivery challan tables
# -----------------------------------------
class DocumentQuerySet(models.QuerySet):
    def with_status(self, status):
        return self.filter(status=status)

    def for_reference(self, reference_no):
        # referenceNo is stored upper-case
        return self.filter(reference_no=(reference_no or "").strip().upper())

    # Enables query:
    # Invoice.objects.for_reference("QUO005")


class DocumentManager(models.Manager):
    def get_queryset(self):
        return DocumentQuerySet(self.model, using=self._db)

    def with_status(self, status):
        return self.get_queryset().with_status(status)

    def for_reference(self, reference_no):
        return self.get_queryset().for_reference(reference_no)


class InventoryQuerySet(models.QuerySet):
    def for_category(self, category):
        return self.filter(category=category)


class InventoryManager(models.Manager):
    def get_queryset(self):
        return InventoryQuerySet(self.model, using=self._db)

    def for_category(self, category):
        return self.get_queryset().for_category(category)


# Append a LedgerEntry at the end of a customer's ledger
class LedgerEntryManager(models.Manager):
    def next_position(self, customer):
        last = self.filter(customer=customer).aggregate(top=models.Max("position"))["top"]
        return 0 if last is None else last + 1

    def create_for_customer(self, customer, **kwargs):
        if "position" not in kwargs:  # no explicit slot → goes last
            kwargs["position"] = self.next_position(customer)
        return super().create(customer=customer, **kwargs)


""" Enforce rules around how agents are created """
class AgentManager(BaseUserManager):  # reuse normalize_email()

    def create_agent(self, name, email, password, **extra_fields):
        if not email:  # Email is required (it is the login)
            raise ValueError("The given email must be set")
        # Email is normalized, then lower-cased as a whole for login lookups
        email = self.normalize_email(email).strip().lower()
        agent = self.model(name=name, email=email, **extra_fields)
        agent.set_password(password)  # Password is hashed + salted
        agent.save(using=self._db)
        return agent

    def get_by_email(self, email):
        return self.get(email=(email or "").strip().lower())
