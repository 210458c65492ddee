class InvalidPermissionCode(ValueError):
    """Raised when a permission code is not a usable "module:action" token."""

    def __init__(self, code, reason: str = "malformed permission code"):
        self.code = code
        self.reason = reason
        super().__init__(f"{reason}: {code!r}")


class PermissionResolutionError(Exception):
    """Raised by the resolver when the permission store could not be read."""

    def __init__(self, user_id: str, org_id: str, message: str):
        self.user_id = user_id
        self.org_id = org_id
        super().__init__(f"Could not resolve permissions for user {user_id} in org {org_id}: {message}")
