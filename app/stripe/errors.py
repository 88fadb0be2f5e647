class VerificationError(Exception):
    """Inbound webhook could not be authenticated or decoded. Answered with 400, never dispatched."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ProviderError(Exception):
    """A Stripe API call failed. The provider's message is relayed to the caller verbatim."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPayloadError(VerificationError):
    """Authentic body that is not a Stripe event at all (not JSON, no type)."""
