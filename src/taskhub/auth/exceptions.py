from __future__ import annotations

from taskhub.commons.exceptions import (
    BaseServiceUnauthorizedException,
    BaseServiceUnProcessableException,
)


class InvalidCredentials(BaseServiceUnauthorizedException):
    pass


class Unauthenticated(BaseServiceUnauthorizedException):
    pass


class EmailTaken(BaseServiceUnProcessableException):
    pass


class WeakPassword(BaseServiceUnProcessableException):
    pass
