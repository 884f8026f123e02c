from .accounting import AccountingEntry
from .agent import Agent
from .auditlog import AuditLog
from .challan import ChallanItem, DeliveryChallan
from .customer import INITIAL_BALANCE, Customer, LedgerEntry
from .inventory import VARIANT_FIELDS, InventoryItem
from .invoice import Invoice, InvoiceProduct
from .quotation import Quotation, QuotationProduct
