from enum import Enum
from typing import Iterable
from app.modules.consent.errors import InvalidScope


class ConsentScope(str, Enum):
    ACCOUNTS = "accounts"
    BALANCES = "balances"
    TRANSACTIONS = "transactions"
    PAYMENTS = "payments"
    STATEMENTS = "statements"
    ANALYTICS = "analytics"
    PROFILE = "profile"


SCOPE_DESCRIPTIONS: dict[ConsentScope, str] = {
    ConsentScope.ACCOUNTS: "Access to account information",
    ConsentScope.BALANCES: "Access to account balances",
    ConsentScope.TRANSACTIONS: "Access to transaction history",
    ConsentScope.PAYMENTS: "Ability to make payments",
    ConsentScope.STATEMENTS: "Access to account statements",
    ConsentScope.ANALYTICS: "Access to financial analytics",
    ConsentScope.PROFILE: "Access to user profile information",
}

VALID_SCOPES: frozenset[str] = frozenset(s.value for s in ConsentScope)


def validate_scopes(scopes: Iterable[str | ConsentScope] | None) -> list[ConsentScope]:
    """Normalize a scope list against the registry.

    Raises InvalidScope when the list is empty or names anything outside the
    registry; the error lists every offending value. Duplicates collapse,
    keeping first-seen order.
    """
    items = list(scopes or [])
    if not items:
        raise InvalidScope()

    def _value(s):
        return s.value if isinstance(s, ConsentScope) else s

    invalid = [str(_value(s)) for s in items if _value(s) not in VALID_SCOPES]
    if invalid:
        raise InvalidScope(invalid)

    out: list[ConsentScope] = []
    for s in items:
        scope = ConsentScope(_value(s))
        if scope not in out:
            out.append(scope)
    return out


def describe_scopes() -> dict[str, str]:
    return {scope.value: text for scope, text in SCOPE_DESCRIPTIONS.items()}
