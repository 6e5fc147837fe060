from __future__ import annotations

from taskhub.core.db import DatabaseManager
from taskhub.health import repository


async def get_health_payload(manager: DatabaseManager) -> dict:
    db_ok, db_detail = await repository.check_db(manager)
    mail_ok, mail_detail = repository.check_mail()
    idp_ok, idp_url, idp_detail = repository.check_identity_provider()

    # Only the DB is mandatory. Without mail or the identity provider the API
    # still serves password login, so report "degraded" rather than "error".
    if not db_ok:
        status = "error"
    elif not (mail_ok and idp_ok):
        status = "degraded"
    else:
        status = "ok"

    return {
        "status": status,
        "db": {
            "ok": db_ok,
            "configured": True,
            "detail": db_detail,
        },
        "mail": {
            "ok": mail_ok,
            "configured": mail_ok,
            "detail": mail_detail,
        },
        "identity_provider": {
            "ok": idp_ok,
            "configured": idp_ok,
            "base_url": idp_url,
            "detail": idp_detail,
        },
    }
