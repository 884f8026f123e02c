import logging

from django.conf import settings
from django.core import signing
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum

from ..exceptions import AuthenticationFailed, DuplicateKey
from ..models import Agent
from ..money import ZERO, money

logger = logging.getLogger(__name__)

AGENT_FIELDS = ("name", "email", "phone", "city", "sales", "status", "join_date", "permissions")

INVALID_LOGIN = "Invalid email or password"


def create_agent(data: dict) -> Agent:
    if not data.get("email"):
        raise ValidationError({"email": "This field cannot be blank."})
    extra = {k: data[k] for k in AGENT_FIELDS if k not in ("name", "email") and data.get(k) is not None}
    try:
        with transaction.atomic():
            agent = Agent.objects.create_agent(
                data.get("name") or "", data.get("email"), data.get("password"), **extra
            )
    except IntegrityError:
        raise DuplicateKey("Email already exists")
    logger.info("Created agent %s", agent.email)
    return agent


def update_agent(agent: Agent, data: dict) -> Agent:
    for field in AGENT_FIELDS:
        if field in data and data[field] is not None:
            setattr(agent, field, data[field])
    if data.get("password"):
        # a new raw password is hashed again
        agent.set_password(data["password"])
    try:
        with transaction.atomic():
            agent.save()
    except IntegrityError:
        raise DuplicateKey("Email already exists")
    return agent


def delete_agent(agent: Agent):
    agent.delete()


# ----------------------------
# Login tokens
# ----------------------------
def issue_token(agent: Agent) -> str:
    return signing.dumps(
        {"id": agent.pk, "email": agent.email}, salt=settings.AGENT_TOKEN_SALT
    )


def verify_token(token: str) -> Agent:
    """Agent behind a bearer token; expired or tampered tokens fail."""
    try:
        payload = signing.loads(
            token, salt=settings.AGENT_TOKEN_SALT, max_age=settings.AGENT_TOKEN_MAX_AGE
        )
    except signing.BadSignature:  # SignatureExpired is a subclass
        raise AuthenticationFailed("Invalid or expired token")
    try:
        return Agent.objects.get(pk=payload["id"], email=payload["email"])
    except Agent.DoesNotExist:
        raise AuthenticationFailed("Invalid or expired token")


def authenticate(email, password):
    """Return (token, agent) for a valid email/password pair."""
    try:
        agent = Agent.objects.get_by_email(email)
    except Agent.DoesNotExist:
        raise AuthenticationFailed(INVALID_LOGIN)
    if not password or not agent.check_password(password):
        logger.warning("Failed login for %s", agent.email)
        raise AuthenticationFailed(INVALID_LOGIN)
    return issue_token(agent), agent


def agent_stats() -> dict:
    agg = Agent.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status="Active")),
        total_sales=Sum("sales"),
        average_sales=Avg("sales"),
    )
    return {
        "totalAgents": agg["total"],
        "activeAgents": agg["active"],
        "totalSales": money(agg["total_sales"] or ZERO),
        "averageSales": money(agg["average_sales"] or ZERO),
    }
