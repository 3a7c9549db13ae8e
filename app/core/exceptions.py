"""
Domain exceptions raised by the service layer.

Routes translate these into HTTP responses; services never raise HTTPException
for provider or persistence failures.
"""


class AnalysisValidationError(ValueError):
    """Missing or invalid analysis input. Raised before any external call."""


class CacheLookupError(Exception):
    """The analysis cache could not be queried (distinct from a cache miss)."""


class AnalysisProviderError(Exception):
    """The external analysis provider failed, timed out or returned malformed output."""


class PersistenceError(Exception):
    """An insert or update against the database failed."""


class PaymentProviderError(Exception):
    """The payment gateway rejected or failed a request."""


class PaymentNotFoundError(LookupError):
    """No payment transaction exists for the given reference (or it belongs to another user)."""


class PlanNotFoundError(LookupError):
    """The requested subscription plan does not exist or cannot be purchased."""


class AnalysisNotFoundError(LookupError):
    """No analysis with this id belongs to the user."""


class FeatureAccessDenied(PermissionError):
    """The user's current tier does not include the feature."""

    def __init__(self, feature: str):
        super().__init__(f"Feature '{feature}' requires an upgrade")
        self.feature = feature
