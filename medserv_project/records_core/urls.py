from django.urls import path

from . import views

urlpatterns = [
    # Customers & their ledger
    path("customers/", views.customer_collection, name="customer-list"),
    path("customers/stats/", views.customer_stats, name="customer-stats"),
    path("customers/<str:pk>/", views.customer_detail, name="customer-detail"),
    path("customers/<str:pk>/ledger/", views.ledger_collection, name="ledger-list"),
    path(
        "customers/<str:pk>/ledger/<str:entry_id>/",
        views.ledger_detail,
        name="ledger-detail",
    ),
    # Quotations (PUT runs the acceptance workflow)
    path("quotations/", views.quotation_collection, name="quotation-list"),
    path("quotations/stats/", views.quotation_stats, name="quotation-stats"),
    path("quotations/<str:pk>/", views.quotation_detail, name="quotation-detail"),
    # Invoices
    path("invoices/", views.invoice_collection, name="invoice-list"),
    path("invoices/stats/", views.invoice_stats, name="invoice-stats"),
    path("invoices/<str:pk>/", views.invoice_detail, name="invoice-detail"),
    # Delivery challans
    path("delivery-challans/", views.challan_collection, name="challan-list"),
    path("delivery-challans/stats/", views.challan_stats, name="challan-stats"),
    path("delivery-challans/<str:pk>/", views.challan_detail, name="challan-detail"),
    # Inventory
    path("inventory/", views.inventory_collection, name="inventory-list"),
    path("inventory/stats/", views.inventory_stats, name="inventory-stats"),
    path("inventory/<str:pk>/", views.inventory_detail, name="inventory-detail"),
    path("inventory/<str:pk>/sell/", views.inventory_sell, name="inventory-sell"),
    # Accounting
    path("accounting/", views.accounting_collection, name="accounting-list"),
    path("accounting/stats/", views.accounting_stats, name="accounting-stats"),
    path("accounting/statement/", views.accounting_statement, name="accounting-statement"),
    path("accounting/<str:pk>/", views.accounting_detail, name="accounting-detail"),
    # Agents
    path("agents/", views.agent_collection, name="agent-list"),
    path("agents/stats/", views.agent_stats, name="agent-stats"),
    path("agents/login/", views.agent_login, name="agent-login"),
    path("agents/<str:pk>/", views.agent_detail, name="agent-detail"),
    # Dashboard
    path("dashboard/", views.dashboard, name="dashboard"),
]
