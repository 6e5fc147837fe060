from __future__ import annotations

from taskhub.commons.exceptions import (
    BaseServiceBadGatewayException,
    BaseServiceUnauthorizedException,
)


class InvalidProviderToken(BaseServiceUnauthorizedException):
    pass


class UpstreamIdentityFailure(BaseServiceBadGatewayException):
    pass
