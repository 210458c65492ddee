"""
Permission code helpers: canonical form, normalization and wildcard matching.

Canonical codes look like "orders:approve". The legacy "orders.approve" form is
accepted by normalize_code only, which is applied where codes enter the service
(HTTP input and rows read from Supabase). Everything past that point assumes the
canonical form.
"""

import re
from typing import AbstractSet, Iterable, List

from staffdesk.modules.permissions.exceptions import InvalidPermissionCode

SEPARATOR = ":"
LEGACY_SEPARATOR = "."
WILDCARD = "*"

_SEGMENT = re.compile(r"^[a-z0-9_\-]+$")


def normalize_code(raw) -> str:
    """Return the canonical form of a permission code or raise InvalidPermissionCode."""
    if not isinstance(raw, str):
        raise InvalidPermissionCode(raw, "permission code must be a string")
    code = raw.strip().lower()
    if code == WILDCARD:
        return code
    if LEGACY_SEPARATOR in code:
        if SEPARATOR in code:
            raise InvalidPermissionCode(raw, "mixed separators in permission code")
        code = code.replace(LEGACY_SEPARATOR, SEPARATOR)
    parts = code.split(SEPARATOR)
    if len(parts) != 2:
        raise InvalidPermissionCode(raw)
    module, action = parts
    if not _SEGMENT.match(module) or not (action == WILDCARD or _SEGMENT.match(action)):
        raise InvalidPermissionCode(raw)
    return code


def normalize_codes(raw_codes: Iterable) -> List[str]:
    return [normalize_code(c) for c in raw_codes]


def module_of(code: str) -> str:
    return code.split(SEPARATOR, 1)[0]


def module_wildcard(code: str) -> str:
    """Module-scoped wildcard that covers code, e.g. "orders:*" for "orders:approve"."""
    return f"{module_of(code)}{SEPARATOR}{WILDCARD}"


class PermissionSet(frozenset):
    """Effective permission codes plus the codes denied by override.

    Compares and iterates like a plain frozenset of granted codes. The denied
    codes are kept alongside so a deny still holds when the granted side
    carries a wildcard that would otherwise cover it.
    """

    def __new__(cls, granted: Iterable[str] = (), denied: Iterable[str] = ()):
        instance = super().__new__(cls, granted)
        instance.denied = frozenset(denied)
        return instance

    def __repr__(self) -> str:
        return f"PermissionSet({sorted(self)!r}, denied={sorted(self.denied)!r})"


def has_permission(held: AbstractSet[str], code: str) -> bool:
    """True if the held set grants code exactly, through "*", or through "<module>:*".

    A code denied by override never matches, whatever wildcard is held.
    """
    if not held:
        return False
    if code in getattr(held, "denied", ()):
        return False
    if code in held or WILDCARD in held:
        return True
    return module_wildcard(code) in held
