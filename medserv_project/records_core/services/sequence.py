import logging
import re

from django.conf import settings
from django.db import IntegrityError, transaction

from ..exceptions import DuplicateKey

logger = logging.getLogger(__name__)


def next_sequential_code(prefix: str, model, field: str) -> str:
    """
    Next code for `prefix` in `model.field`: CUST007 → CUST008.

    Only values shaped exactly like <prefix><digits> (any case) count.
    The greatest number wins numerically, so CUST1000 follows CUST999.
    Empty table / no matching values → <prefix>001.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$", re.IGNORECASE)
    values = model._default_manager.filter(
        **{f"{field}__iregex": rf"^{re.escape(prefix)}[0-9]+$"}
    ).values_list(field, flat=True)

    highest = 0
    for value in values:
        match = pattern.match(value or "")
        if match:
            highest = max(highest, int(match.group(1)))

    # Pad with zeros (1 -> "001"); wider numbers keep all their digits
    return f"{prefix}{highest + 1:0{settings.SEQUENCE_MIN_DIGITS}d}"


def create_with_code(prefix, model, field, build, supplied=None):
    """
    Insert a row whose `field` holds a sequential code.

    `build(code)` must save and return the new instance. There is no lock
    around read-max-then-insert, so a concurrent insert can take the same
    code first: the unique column rejects ours and we retry with a fresh
    code. A caller-supplied code is never replaced.
    """
    label = model._meta.verbose_name.title()
    if supplied:
        try:
            with transaction.atomic():
                return build(supplied.strip().upper())
        except IntegrityError:
            raise DuplicateKey(f"{label} number already exists")

    attempts = settings.SEQUENCE_RETRY_ATTEMPTS
    for attempt in range(1, attempts + 1):
        code = next_sequential_code(prefix, model, field)
        try:
            with transaction.atomic():
                return build(code)
        except IntegrityError:
            logger.warning(
                "%s code %s taken concurrently (attempt %d/%d)", label, code, attempt, attempts
            )
    raise DuplicateKey(f"{label} number already exists")
