from __future__ import annotations

from taskhub.commons.exceptions import (
    BaseServiceForbiddenException,
    BaseServiceNotFoundException,
    BaseServiceUnProcessableException,
)


class AccessDenied(BaseServiceForbiddenException):
    pass


class ResourceNotFound(BaseServiceNotFoundException):
    pass


class InvalidRole(BaseServiceUnProcessableException):
    pass


class UserNotFound(BaseServiceNotFoundException):
    pass
