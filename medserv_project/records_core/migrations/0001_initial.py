from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import records_core.models.quotation


def money(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(
        decimal_places=2,
        max_digits=14,
        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
        **kwargs,
    )


def rate():
    return models.DecimalField(
        decimal_places=2,
        default=Decimal("0.00"),
        max_digits=6,
        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
    )


def stamps():
    return [
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def line_fields():
    return [
        ("description", models.TextField(blank=True, default="")),
        (
            "quantity",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                max_digits=12,
                null=True,
                validators=[django.core.validators.MinValueValidator(Decimal("0"))],
            ),
        ),
        ("unit_price", money()),
        ("total", money()),
        ("position", models.PositiveIntegerField(default=0)),
    ]


def taxed_header():
    return [
        ("customer", models.CharField(blank=True, default="", max_length=200)),
        ("subject", models.CharField(blank=True, default="", max_length=255)),
        ("address", models.TextField(blank=True, default="")),
        ("email", models.CharField(blank=True, default="", max_length=254)),
        ("date", models.DateField(default=django.utils.timezone.localdate)),
        ("sales_tax_enabled", models.BooleanField(default=False)),
        ("sales_tax_rate", rate()),
        ("fbr_tax_enabled", models.BooleanField(default=False)),
        ("fbr_tax_rate", rate()),
        ("sub_total", money()),
        ("sales_tax_amount", money()),
        ("fbr_tax_amount", money()),
        ("total_amount", money()),
        (
            "customer_link",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="records_core.customer",
            ),
        ),
    ]


def pk():
    return ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID"))


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[pk()]
            + stamps()
            + [
                ("serial_number", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("total_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "debit_credit",
                    models.CharField(
                        choices=[("Debit", "Debit"), ("Credit", "Credit")],
                        default="Debit",
                        max_length=6,
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[pk()]
            + stamps()
            + [
                ("position", models.PositiveIntegerField(default=0)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("particulars", models.CharField(max_length=255)),
                ("debit_amount", money()),
                ("credit_amount", money()),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("quantity", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("unit_price", money()),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger",
                        to="records_core.customer",
                    ),
                ),
            ],
            options={
                "ordering": ["position", "id"],
                "indexes": [
                    models.Index(fields=["customer", "position"], name="ledger_customer_pos_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="Quotation",
            fields=[pk()]
            + stamps()
            + taxed_header()
            + [
                ("quotation_no", models.CharField(max_length=32, unique=True)),
                ("reference_no", models.CharField(blank=True, default="", max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Accepted", "Accepted"),
                            ("Rejected", "Rejected"),
                        ],
                        default="Pending",
                        max_length=10,
                    ),
                ),
                ("valid_until", models.DateField(blank=True, null=True)),
                (
                    "terms_and_conditions",
                    models.JSONField(
                        blank=True, default=records_core.models.quotation.default_terms
                    ),
                ),
                ("buyback_description", models.TextField(blank=True, default="")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["date"], name="quotation_date_idx"),
                    models.Index(fields=["status"], name="quotation_status_idx"),
                    models.Index(fields=["customer"], name="quotation_customer_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuotationProduct",
            fields=[pk()]
            + line_fields()
            + [
                ("product", models.CharField(blank=True, default="", max_length=255)),
                ("buy_description", models.TextField(blank=True, default="")),
                ("buy_price", money()),
                ("sell_price", money()),
                (
                    "quotation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="records_core.quotation",
                    ),
                ),
            ],
            options={"ordering": ["position", "id"], "abstract": False},
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[pk()]
            + stamps()
            + taxed_header()
            + [
                ("invoice_no", models.CharField(max_length=32, unique=True)),
                ("reference_no", models.CharField(blank=True, default="", max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[("Pending", "Pending"), ("Paid", "Paid"), ("Partial", "Partial")],
                        default="Pending",
                        max_length=10,
                    ),
                ),
                ("due_date", models.DateField(blank=True, null=True)),
                (
                    "source_quotation",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="generated_invoice",
                        to="records_core.quotation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["date"], name="invoice_date_idx"),
                    models.Index(fields=["status"], name="invoice_status_idx"),
                    models.Index(fields=["reference_no"], name="invoice_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceProduct",
            fields=[pk()]
            + line_fields()
            + [
                ("product", models.CharField(blank=True, default="", max_length=255)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="records_core.invoice",
                    ),
                ),
            ],
            options={"ordering": ["position", "id"], "abstract": False},
        ),
        migrations.CreateModel(
            name="DeliveryChallan",
            fields=[pk()]
            + stamps()
            + [
                ("challan_no", models.CharField(max_length=32, unique=True)),
                ("reference_no", models.CharField(blank=True, default="", max_length=32)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("customer", models.CharField(blank=True, default="", max_length=200)),
                ("address", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("In Transit", "In Transit"),
                            ("Delivered", "Delivered"),
                        ],
                        default="Pending",
                        max_length=12,
                    ),
                ),
                ("vehicle_no", models.CharField(blank=True, default="", max_length=50)),
                (
                    "customer_link",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="records_core.customer",
                    ),
                ),
                (
                    "source_quotation",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="generated_challan",
                        to="records_core.quotation",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="challan_status_idx"),
                    models.Index(fields=["reference_no"], name="challan_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChallanItem",
            fields=[pk()]
            + line_fields()
            + [
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("buy_description", models.TextField(blank=True, default="")),
                ("buy_price", money()),
                ("sell_price", money()),
                (
                    "challan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="records_core.deliverychallan",
                    ),
                ),
            ],
            options={"ordering": ["position", "id"], "abstract": False},
        ),
        migrations.AddField(
            model_name="quotation",
            name="linked_invoice",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="records_core.invoice",
            ),
        ),
        migrations.AddField(
            model_name="quotation",
            name="linked_delivery_challan",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="records_core.deliverychallan",
            ),
        ),
        migrations.CreateModel(
            name="InventoryItem",
            fields=[pk()]
            + stamps()
            + [
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("machines", "Machines"),
                            ("probs", "Probes"),
                            ("parts", "Parts"),
                            ("productsCategory", "Products"),
                            ("importStock", "Import Stock"),
                        ],
                        max_length=20,
                    ),
                ),
                ("s_n", models.PositiveIntegerField(blank=True, null=True)),
                ("p_n", models.CharField(blank=True, default="", max_length=50)),
                ("serial_no", models.CharField(blank=True, default="", max_length=100)),
                ("box_no", models.CharField(blank=True, default="", max_length=50)),
                ("model_no", models.CharField(blank=True, default="", max_length=100)),
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("part_name", models.CharField(blank=True, default="", max_length=255)),
                ("probes", models.CharField(blank=True, default="", max_length=255)),
                ("pro_type", models.CharField(blank=True, default="", max_length=100)),
                ("category_name", models.CharField(blank=True, default="Default", max_length=100)),
                (
                    "machine_category",
                    models.CharField(
                        blank=True,
                        choices=[("instock", "In stock"), ("repair", "Repair"), ("sold", "Sold")],
                        max_length=10,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        blank=True,
                        choices=[("InStock", "In stock"), ("Repair", "Repair"), ("Sold", "Sold")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("quantity", models.PositiveIntegerField(default=0)),
                (
                    "price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=14,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("buyer_name", models.CharField(blank=True, default="", max_length=200)),
                ("buyer_serial", models.CharField(blank=True, default="", max_length=100)),
                ("buyer_city", models.CharField(blank=True, default="", max_length=100)),
                ("last_sold_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("last_sold_unit_price", money(blank=True, null=True, default=None)),
                ("last_sold_total", money(blank=True, null=True, default=None)),
                ("last_sold_date", models.DateField(blank=True, null=True)),
                ("last_sold_customer", models.CharField(blank=True, default="", max_length=200)),
                ("is_sold_entry", models.BooleanField(default=False)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category"], name="inventory_category_idx"),
                    models.Index(fields=["category_name"], name="inventory_catname_idx"),
                    models.Index(fields=["machine_category"], name="inventory_machine_cat_idx"),
                    models.Index(fields=["status"], name="inventory_status_idx"),
                    models.Index(fields=["category", "s_n"], name="inventory_cat_sn_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountingEntry",
            fields=[pk()]
            + stamps()
            + [
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("account", models.CharField(blank=True, default="", max_length=200)),
                ("debit", money()),
                ("credit", money()),
                ("balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "category",
                    models.CharField(
                        choices=[("Income", "Income"), ("Expense", "Expense")], max_length=10
                    ),
                ),
                (
                    "expense_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Office Expense", "Office Expense"),
                            ("Home Expense", "Home Expense"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("customer", models.CharField(blank=True, default="", max_length=200)),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["date"], name="accounting_date_idx"),
                    models.Index(fields=["category"], name="accounting_category_idx"),
                    models.Index(fields=["expense_type"], name="accounting_expense_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Agent",
            fields=[pk()]
            + stamps()
            + [
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("password", models.CharField(max_length=128)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("sales", money()),
                (
                    "status",
                    models.CharField(
                        choices=[("Active", "Active"), ("Inactive", "Inactive")],
                        default="Active",
                        max_length=10,
                    ),
                ),
                ("join_date", models.DateField(default=django.utils.timezone.localdate)),
                ("permissions", models.JSONField(blank=True, default=list)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                pk(),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["object_type", "object_id"], name="auditlog_object_idx"),
                    models.Index(fields=["created_at"], name="auditlog_created_idx"),
                ],
            },
        ),
    ]
