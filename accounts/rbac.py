"""Role capability checks for HR actions."""
from accounts.models import User


class AmendmentAction:
    CREATE = "create"
    APPROVE = "approve"
    REJECT = "reject"
    APPLY = "apply"

    ALL = (CREATE, APPROVE, REJECT, APPLY)


# Legacy role names still present in older tokens and imports
ROLE_ALIASES = {
    "ADMIN": User.ROLE_MANAGEMENT,
}

AMENDMENT_CAPABILITIES = {
    AmendmentAction.CREATE: frozenset({User.ROLE_HR, User.ROLE_MANAGEMENT}),
    AmendmentAction.APPROVE: frozenset({User.ROLE_HR, User.ROLE_MANAGEMENT}),
    AmendmentAction.REJECT: frozenset({User.ROLE_HR, User.ROLE_MANAGEMENT}),
    AmendmentAction.APPLY: frozenset({User.ROLE_HR, User.ROLE_MANAGEMENT}),
}


def normalize_role(role):
    """Upper-case a role string and resolve legacy aliases. Returns None for blanks."""
    if not role or not isinstance(role, str):
        return None
    value = role.strip().upper()
    if not value:
        return None
    return ROLE_ALIASES.get(value, value)


def can_perform(role, action):
    """Return True when ``role`` may perform the amendment ``action``."""
    allowed_roles = AMENDMENT_CAPABILITIES.get(action)
    if not allowed_roles:
        return False
    return normalize_role(role) in allowed_roles


def get_user_role(user):
    """Normalized role of an authenticated user, or None."""
    if not user or not getattr(user, "is_authenticated", False):
        return None
    return normalize_role(getattr(user, "role", None))
