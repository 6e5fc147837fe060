from __future__ import annotations

from taskhub.commons.exceptions import (
    BaseServiceException,
    BaseServiceUnavailableException,
)

# Same text for wrong, expired and already-used codes.
INVALID_OR_EXPIRED_CODE = "Invalid or expired OTP"


class InvalidOrExpiredCode(BaseServiceException):
    pass


class DeliveryUnavailable(BaseServiceUnavailableException):
    pass
