"""
Quotation acceptance.

Accepting a quotation materializes one Invoice and one Delivery Challan
that share the quotation's number and reference number. Running the
acceptance again, for a retry or a later edit, never creates a
second pair: lookups go through the back-links first, and the unique
`source_quotation` / document-number columns reject a concurrent
duplicate, which is then treated as "already exists".

The quotation write is authoritative. Failures while writing the
downstream documents are logged and reported as warnings; each of those
writes runs in its own savepoint so the quotation change survives them.
"""
import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from ..exceptions import RecordsError
from ..models import ChallanItem, DeliveryChallan, Invoice, InvoiceProduct, Quotation
from .audit_helper import log_action
from .documents import patch_quotation, refresh_invoice_totals, save_lines

logger = logging.getLogger(__name__)

# Auto-created invoices used to be recognised by this subject only
LEGACY_INVOICE_SUBJECT = "Invoice for {}"


@dataclass
class AcceptanceResult:
    quotation: Quotation
    invoice: Invoice | None = None
    challan: DeliveryChallan | None = None
    invoice_created: bool = False
    challan_created: bool = False
    warnings: list = field(default_factory=list)


def _copyable(products):
    # rows without a product name are dropped when copying
    return [p for p in products if (p.product or "").strip()]


class AcceptanceWorkflow:
    """Quotation update with idempotent Invoice / Challan side effects."""

    def __init__(self, invoice_model=Invoice, challan_model=DeliveryChallan):
        self.invoice_model = invoice_model
        self.challan_model = challan_model

    # ----------------------------
    # Entry point
    # ----------------------------
    def update(self, quotation: Quotation, payload: dict) -> AcceptanceResult:
        with transaction.atomic():
            # one acceptance at a time per quotation
            quotation = Quotation.objects.select_for_update().get(pk=quotation.pk)
            was_accepted = quotation.is_accepted

            patch_quotation(quotation, payload)
            result = AcceptanceResult(quotation=quotation)

            if quotation.is_accepted and not was_accepted:
                self._materialize(quotation, result)
            elif quotation.is_accepted and was_accepted:
                self._refresh(quotation, result)
        return result

    def _guarded(self, result, what, func):
        try:
            with transaction.atomic():
                return func()
        except (DatabaseError, ValidationError, RecordsError) as exc:
            logger.exception(
                "Quotation %s: could not %s", result.quotation.quotation_no, what
            )
            result.warnings.append(f"Could not {what}: {exc}")
            return None

    # ----------------------------
    # First acceptance
    # ----------------------------
    def _materialize(self, quotation, result):
        reference_no = (quotation.reference_no or quotation.quotation_no).upper()
        if quotation.reference_no != reference_no:
            quotation.reference_no = reference_no
            quotation.save(update_fields=["reference_no", "updated_at"])

        found = self._guarded(
            result, "generate invoice", lambda: self._ensure_invoice(quotation, reference_no)
        )
        if found:
            result.invoice, result.invoice_created = found

        found = self._guarded(
            result,
            "generate delivery challan",
            lambda: self._ensure_challan(quotation, reference_no),
        )
        if found:
            result.challan, result.challan_created = found

        self._guarded(result, "link generated documents", lambda: self._link(quotation, result))
        logger.info(
            "Quotation %s accepted (invoice %s, challan %s)",
            quotation.quotation_no,
            "created" if result.invoice_created else "existing",
            "created" if result.challan_created else "existing",
        )

    def _ensure_invoice(self, quotation, reference_no):
        invoice = self.find_invoice(quotation, reference_no)
        if invoice is not None:
            self._backfill(invoice, quotation, reference_no)
            return invoice, False
        try:
            with transaction.atomic():
                invoice = self._create_invoice(quotation, reference_no)
        except IntegrityError:
            # lost a race: someone else created it in the meantime
            invoice = self.find_invoice(quotation, reference_no)
            if invoice is None:
                raise
            return invoice, False
        log_action(
            action="create",
            instance=invoice,
            changes={"source_quotation": quotation.quotation_no},
        )
        logger.info("Auto-generated invoice %s", invoice.invoice_no)
        return invoice, True

    def _ensure_challan(self, quotation, reference_no):
        challan = self.find_challan(quotation, reference_no)
        if challan is not None:
            self._backfill(challan, quotation, reference_no)
            return challan, False
        try:
            with transaction.atomic():
                challan = self._create_challan(quotation, reference_no)
        except IntegrityError:
            challan = self.find_challan(quotation, reference_no)
            if challan is None:
                raise
            return challan, False
        log_action(
            action="create",
            instance=challan,
            changes={"source_quotation": quotation.quotation_no},
        )
        logger.info("Auto-generated delivery challan %s", challan.challan_no)
        return challan, True

    def _backfill(self, document, quotation, reference_no):
        """Older documents may predate the reference number / source link."""
        changed = []
        if not document.reference_no:
            document.reference_no = reference_no
            changed.append("reference_no")
        if document.source_quotation_id is None:
            document.source_quotation = quotation
            changed.append("source_quotation")
        if changed:
            document.save(update_fields=changed + ["updated_at"])

    def _create_invoice(self, quotation, reference_no):
        invoice = self.invoice_model(
            invoice_no=quotation.quotation_no,
            reference_no=reference_no,
            source_quotation=quotation,
            status="Pending",
        )
        self._copy_invoice_header(invoice, quotation)
        lines = self._invoice_lines(quotation)
        refresh_invoice_totals(invoice, lines)
        invoice.save()
        save_lines(invoice, InvoiceProduct, lines)
        return invoice

    def _create_challan(self, quotation, reference_no):
        challan = self.challan_model(
            challan_no=quotation.quotation_no,
            reference_no=reference_no,
            source_quotation=quotation,
            status="Pending",
            vehicle_no="",
        )
        self._copy_challan_header(challan, quotation)
        challan.save()
        save_lines(challan, ChallanItem, self._challan_items(quotation))
        return challan

    def _link(self, quotation, result):
        if result.invoice is not None:
            quotation.linked_invoice = result.invoice
        if result.challan is not None:
            quotation.linked_delivery_challan = result.challan
        quotation.save(
            update_fields=["linked_invoice", "linked_delivery_challan", "updated_at"]
        )
        log_action(
            action="link",
            instance=quotation,
            changes={
                "invoice": getattr(result.invoice, "invoice_no", None),
                "challan": getattr(result.challan, "challan_no", None),
            },
        )

    # ----------------------------
    # Re-save while Accepted
    # ----------------------------
    def _refresh(self, quotation, result):
        reference_no = quotation.reference_no or quotation.quotation_no
        result.invoice = self._guarded(
            result, "update invoice", lambda: self._refresh_invoice(quotation, reference_no)
        )
        result.challan = self._guarded(
            result,
            "update delivery challan",
            lambda: self._refresh_challan(quotation, reference_no),
        )
        if result.invoice is not None or result.challan is not None:
            self._guarded(
                result, "link generated documents", lambda: self._link(quotation, result)
            )

    def _refresh_invoice(self, quotation, reference_no):
        invoice = self.find_invoice(quotation, reference_no, include_legacy=False)
        if invoice is None:
            return None  # update-only path: nothing to create
        self._copy_invoice_header(invoice, quotation)
        lines = self._invoice_lines(quotation)
        refresh_invoice_totals(invoice, lines)
        invoice.save()
        save_lines(invoice, InvoiceProduct, lines, replace=True)
        logger.info("Refreshed invoice %s from quotation", invoice.invoice_no)
        return invoice

    def _refresh_challan(self, quotation, reference_no):
        challan = self.find_challan(quotation, reference_no)
        if challan is None:
            return None
        self._copy_challan_header(challan, quotation)
        challan.save()
        save_lines(challan, ChallanItem, self._challan_items(quotation), replace=True)
        logger.info("Refreshed delivery challan %s from quotation", challan.challan_no)
        return challan

    # ----------------------------
    # Lookups (priority order)
    # ----------------------------
    def find_invoice(self, quotation, reference_no, include_legacy=True):
        lookups = []
        if quotation.linked_invoice_id:
            lookups.append(Q(pk=quotation.linked_invoice_id))
        lookups += [
            Q(source_quotation=quotation),
            Q(invoice_no=quotation.quotation_no),
        ]
        if reference_no:
            lookups.append(Q(reference_no=reference_no.upper()))
        if include_legacy:
            lookups.append(Q(subject=LEGACY_INVOICE_SUBJECT.format(quotation.quotation_no)))
        return self._first(self.invoice_model, lookups)

    def find_challan(self, quotation, reference_no):
        lookups = []
        if quotation.linked_delivery_challan_id:
            lookups.append(Q(pk=quotation.linked_delivery_challan_id))
        lookups += [
            Q(source_quotation=quotation),
            Q(challan_no=quotation.quotation_no),
        ]
        if reference_no:
            lookups.append(Q(reference_no=reference_no.upper()))
        return self._first(self.challan_model, lookups)

    @staticmethod
    def _first(model, lookups):
        for lookup in lookups:
            found = model.objects.filter(lookup).order_by("id").first()
            if found is not None:
                return found
        return None

    # ----------------------------
    # Copying
    # ----------------------------
    @staticmethod
    def _copy_invoice_header(invoice, quotation):
        invoice.customer = quotation.customer
        invoice.customer_link_id = quotation.customer_link_id
        invoice.date = quotation.date
        invoice.address = quotation.address
        invoice.subject = quotation.subject or LEGACY_INVOICE_SUBJECT.format(
            invoice.invoice_no or quotation.quotation_no
        )
        invoice.email = quotation.email
        invoice.sales_tax_enabled = quotation.sales_tax_enabled
        invoice.sales_tax_rate = quotation.sales_tax_rate
        invoice.fbr_tax_enabled = quotation.fbr_tax_enabled
        invoice.fbr_tax_rate = quotation.fbr_tax_rate
        invoice.due_date = quotation.valid_until

    @staticmethod
    def _copy_challan_header(challan, quotation):
        challan.customer = quotation.customer
        challan.customer_link_id = quotation.customer_link_id
        challan.date = quotation.date
        challan.address = quotation.address or ""

    @staticmethod
    def _invoice_lines(quotation):
        lines = []
        for position, p in enumerate(_copyable(quotation.products.all())):
            line = InvoiceProduct(
                position=position,
                product=p.product,
                description=p.description,
                quantity=p.quantity,
                unit_price=p.unit_price,
                total=p.total,
            )
            line.validate_detached()
            lines.append(line)
        return lines

    @staticmethod
    def _challan_items(quotation):
        items = []
        for position, p in enumerate(_copyable(quotation.products.all())):
            item = ChallanItem(
                position=position,
                product_name=p.product,
                description=p.description,
                buy_description=p.buy_description,
                quantity=p.quantity,
                unit_price=p.unit_price,
                total=p.total,
                buy_price=p.buy_price,
                sell_price=p.sell_price,
            )
            item.validate_detached()
            items.append(item)
        return items


default_workflow = AcceptanceWorkflow()


def update_quotation(quotation: Quotation, payload: dict) -> AcceptanceResult:
    return default_workflow.update(quotation, payload)
