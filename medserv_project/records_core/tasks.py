import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def recompute_all_balances():
    # import lazily to avoid circular imports at module import time
    from .models import Customer
    from .services.accounting import recalculate_running_balances
    from .services.ledger import recalculate

    # Re-derive every customer's balance from their stored ledger
    customers = 0
    for customer in Customer.objects.prefetch_related("ledger").iterator(chunk_size=200):
        recalculate(customer)
        customers += 1

    # Then the cash book running balances
    entries = recalculate_running_balances()

    logger.info(
        "Recomputed balances for %d customers and %d accounting entries",
        customers,
        entries,
    )
    return {"customers": customers, "accountingEntries": entries}
