"""
Exceptions raised by route-level authorization helpers

The policy engine itself never raises; it returns a Decision. These
exceptions exist only so that routes can stop early and let the blueprint
error handlers turn a denial into a 403 response.
"""
from mentorhub.rbac.types import Decision


class AccessDenied(Exception):
    """The actor is not allowed to perform the requested action"""

    def __init__(self, decision: Decision, message: str = "Access denied"):
        super().__init__(message)
        self.decision = decision
        self.message = message


class FieldsNotAllowed(AccessDenied):
    """The payload names fields the actor may not change"""

    def __init__(self, fields):
        self.fields = sorted(fields)
        super().__init__(
            Decision.deny("fields not updatable"),
            f"You may not change: {', '.join(self.fields)}"
        )
