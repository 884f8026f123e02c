import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from . import serializers as s
from .exceptions import RecordsError, UpstreamFailure
from .models import (AccountingEntry, Agent, Customer, DeliveryChallan, InventoryItem, Invoice,
                     Quotation)
from .services import accounting, agents, documents, inventory, ledger
from .services.acceptance import update_quotation
from .services.dashboard import dashboard_stats
from .services.lookup import get_object

logger = logging.getLogger(__name__)


# ----------------------------
# Plumbing
# ----------------------------
def json_view(view):
    """Translate service errors into JSON responses with a fixed status."""

    @csrf_exempt  # JSON clients carry no CSRF cookie
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ValidationError as exc:
            body = {"message": "; ".join(exc.messages)}
            if hasattr(exc, "error_dict"):
                body["errors"] = exc.message_dict
            return JsonResponse(body, status=400)
        except RecordsError as exc:
            return JsonResponse({"message": str(exc)}, status=exc.status_code)
        except IntegrityError as exc:
            # a unique column the services did not translate themselves
            logger.warning("Integrity error on %s: %s", request.path, exc)
            return JsonResponse({"message": "Record already exists"}, status=400)
        except DatabaseError:
            logger.exception("Storage failure on %s %s", request.method, request.path)
            failure = UpstreamFailure("Storage is unavailable")
            return JsonResponse({"message": str(failure)}, status=failure.status_code)

    return wrapper


def parse_body(request) -> dict:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Malformed JSON body.")
    if not isinstance(payload, dict):
        raise ValidationError("Expected a JSON object.")
    return payload


def respond(data, status=200):
    return JsonResponse(s.wire(data), status=status, safe=False)


def listing(request, key, rows, projection, stats):
    data = [projection.dump(row) for row in rows]
    # ?includeStats=true wraps the list together with its stats
    if request.GET.get("includeStats") == "true":
        return respond({key: data, "stats": stats()})
    return respond(data)


def deleted(entity):
    return respond({"message": f"{entity} deleted successfully"})


@json_view
@require_http_methods(["GET"])
def health(request):
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return JsonResponse({"status": "error", "database": "unreachable"}, status=503)
    return JsonResponse({"status": "ok", "database": "ok"})


# ----------------------------
# Customers & ledger
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def customer_collection(request):
    if request.method == "POST":
        customer = ledger.create_customer(s.read_customer(parse_body(request)))
        return respond(s.CUSTOMER.dump(customer), status=201)
    rows = Customer.objects.prefetch_related("ledger")
    return listing(request, "customers", rows, s.CUSTOMER, ledger.customer_stats)


@json_view
@require_http_methods(["GET"])
def customer_stats(request):
    return respond(ledger.customer_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def customer_detail(request, pk):
    customer = ledger.get_customer(pk)
    if request.method == "PUT":
        customer = ledger.update_customer(customer, s.read_customer(parse_body(request)))
    elif request.method == "DELETE":
        ledger.delete_customer(customer)
        return deleted("Customer")
    return respond(s.CUSTOMER.dump(customer))


@json_view
@require_http_methods(["POST"])
def ledger_collection(request, pk):
    customer = ledger.get_customer(pk)
    ledger.add_entry(customer, s.LEDGER_ENTRY.load(parse_body(request)))
    customer.refresh_from_db()
    return respond(s.CUSTOMER.dump(customer), status=201)


@json_view
@require_http_methods(["PUT", "DELETE"])
def ledger_detail(request, pk, entry_id):
    customer = ledger.get_customer(pk)
    if request.method == "PUT":
        ledger.update_entry(customer, entry_id, s.LEDGER_ENTRY.load(parse_body(request)))
    else:
        ledger.delete_entry(customer, entry_id)
    customer.refresh_from_db()
    return respond(s.CUSTOMER.dump(customer))


# ----------------------------
# Quotations
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def quotation_collection(request):
    if request.method == "POST":
        quotation = documents.create_quotation(s.QUOTATION.load(parse_body(request)))
        return respond(s.QUOTATION.dump(quotation), status=201)
    rows = documents.filter_documents(
        Quotation.objects.prefetch_related("products"),
        status=request.GET.get("status"),
        reference_no=request.GET.get("referenceNo"),
    )
    return listing(request, "quotations", rows, s.QUOTATION, documents.quotation_stats)


@json_view
@require_http_methods(["GET"])
def quotation_stats(request):
    return respond(documents.quotation_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def quotation_detail(request, pk):
    quotation = get_object(Quotation, pk, "Quotation")
    if request.method == "DELETE":
        documents.delete_quotation(quotation)
        return deleted("Quotation")
    if request.method == "GET":
        return respond(s.QUOTATION.dump(quotation))

    result = update_quotation(quotation, s.QUOTATION.load(parse_body(request)))
    data = s.QUOTATION.dump(result.quotation)
    if result.warnings:
        # the quotation was saved; generated documents need a look
        data["warnings"] = result.warnings
    return respond(data)


# ----------------------------
# Invoices
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def invoice_collection(request):
    if request.method == "POST":
        invoice = documents.create_invoice(s.INVOICE.load(parse_body(request)))
        return respond(s.INVOICE.dump(invoice), status=201)
    rows = documents.filter_documents(
        Invoice.objects.prefetch_related("products"),
        status=request.GET.get("status"),
        reference_no=request.GET.get("referenceNo"),
    )
    return listing(request, "invoices", rows, s.INVOICE, documents.invoice_stats)


@json_view
@require_http_methods(["GET"])
def invoice_stats(request):
    return respond(documents.invoice_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def invoice_detail(request, pk):
    invoice = get_object(Invoice, pk, "Invoice")
    if request.method == "PUT":
        invoice = documents.update_invoice(invoice, s.INVOICE.load(parse_body(request)))
    elif request.method == "DELETE":
        documents.delete_invoice(invoice)
        return deleted("Invoice")
    return respond(s.INVOICE.dump(invoice))


# ----------------------------
# Delivery challans
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def challan_collection(request):
    if request.method == "POST":
        challan = documents.create_challan(s.DELIVERY_CHALLAN.load(parse_body(request)))
        return respond(s.DELIVERY_CHALLAN.dump(challan), status=201)
    rows = documents.filter_documents(
        DeliveryChallan.objects.prefetch_related("items"),
        status=request.GET.get("status"),
        reference_no=request.GET.get("referenceNo"),
    )
    return listing(request, "deliveryChallans", rows, s.DELIVERY_CHALLAN, documents.challan_stats)


@json_view
@require_http_methods(["GET"])
def challan_stats(request):
    return respond(documents.challan_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def challan_detail(request, pk):
    challan = get_object(DeliveryChallan, pk, "Delivery challan")
    if request.method == "PUT":
        challan = documents.update_challan(challan, s.DELIVERY_CHALLAN.load(parse_body(request)))
    elif request.method == "DELETE":
        documents.delete_challan(challan)
        return deleted("Delivery challan")
    return respond(s.DELIVERY_CHALLAN.dump(challan))


# ----------------------------
# Inventory
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def inventory_collection(request):
    if request.method == "POST":
        item = inventory.create_item(s.INVENTORY_ITEM.load(parse_body(request)))
        return respond(s.INVENTORY_ITEM.dump(item), status=201)
    rows = inventory.list_items(
        category=request.GET.get("category"), status=request.GET.get("status")
    )
    return listing(request, "items", rows, s.INVENTORY_ITEM, inventory.inventory_stats)


@json_view
@require_http_methods(["GET"])
def inventory_stats(request):
    return respond(inventory.inventory_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def inventory_detail(request, pk):
    item = get_object(InventoryItem, pk, "Inventory item")
    if request.method == "PUT":
        item = inventory.update_item(item, s.INVENTORY_ITEM.load(parse_body(request)))
    elif request.method == "DELETE":
        inventory.delete_item(item)
        return deleted("Inventory item")
    return respond(s.INVENTORY_ITEM.dump(item))


@json_view
@require_http_methods(["POST"])
def inventory_sell(request, pk):
    item = get_object(InventoryItem, pk, "Inventory item")
    payload = parse_body(request)
    customer = None
    if payload.get("customerId"):
        customer = ledger.get_customer(payload["customerId"])
    item, sold = inventory.record_sale(
        item,
        quantity=payload.get("quantity", 1),
        unit_price=payload.get("unitPrice", item.price),
        customer_name=payload.get("customerName") or "",
        customer=customer,
        date=s.read_date(payload.get("date")),
    )
    return respond(
        {"item": s.INVENTORY_ITEM.dump(item), "soldEntry": s.INVENTORY_ITEM.dump(sold)},
        status=201,
    )


# ----------------------------
# Accounting
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def accounting_collection(request):
    if request.method == "POST":
        entry = accounting.create_entry(s.ACCOUNTING_ENTRY.load(parse_body(request)))
        return respond(s.ACCOUNTING_ENTRY.dump(entry), status=201)
    rows = accounting.list_entries(
        category=request.GET.get("category"), expense_type=request.GET.get("expenseType")
    )
    return listing(
        request, "accountingEntries", rows, s.ACCOUNTING_ENTRY, accounting.accounting_stats
    )


@json_view
@require_http_methods(["GET"])
def accounting_stats(request):
    return respond(accounting.accounting_stats())


@json_view
@require_http_methods(["GET"])
def accounting_statement(request):
    start = s.read_date(request.GET.get("startDate"), "startDate")
    end = s.read_date(request.GET.get("endDate"), "endDate")
    rows = accounting.statement(start, end)
    return respond([s.ACCOUNTING_ENTRY.dump(row) for row in rows])


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def accounting_detail(request, pk):
    entry = get_object(AccountingEntry, pk, "Accounting entry")
    if request.method == "PUT":
        entry = accounting.update_entry(entry, s.ACCOUNTING_ENTRY.load(parse_body(request)))
    elif request.method == "DELETE":
        accounting.delete_entry(entry)
        return deleted("Accounting entry")
    return respond(s.ACCOUNTING_ENTRY.dump(entry))


# ----------------------------
# Agents
# ----------------------------
@json_view
@require_http_methods(["GET", "POST"])
def agent_collection(request):
    if request.method == "POST":
        agent = agents.create_agent(s.read_agent(parse_body(request)))
        return respond(s.AGENT.dump(agent), status=201)
    return listing(request, "agents", Agent.objects.all(), s.AGENT, agents.agent_stats)


@json_view
@require_http_methods(["GET"])
def agent_stats(request):
    return respond(agents.agent_stats())


@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def agent_detail(request, pk):
    agent = get_object(Agent, pk, "Agent")
    if request.method == "PUT":
        agent = agents.update_agent(agent, s.read_agent(parse_body(request)))
    elif request.method == "DELETE":
        agents.delete_agent(agent)
        return deleted("Agent")
    return respond(s.AGENT.dump(agent))


@json_view
@require_http_methods(["POST"])
def agent_login(request):
    payload = parse_body(request)
    token, agent = agents.authenticate(payload.get("email"), payload.get("password"))
    return respond({"token": token, "agent": s.AGENT.dump(agent)})


# ----------------------------
# Dashboard
# ----------------------------
@json_view
@require_http_methods(["GET"])
def dashboard(request):
    year = request.GET.get("year")
    if year and not year.isdigit():
        raise ValidationError({"year": "Year must be a number."})
    return respond(dashboard_stats(int(year) if year else None))
