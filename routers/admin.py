from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from deps.auth import require_admin
from sessions import SessionStore, get_store

logger = logging.getLogger("timestables.admin")

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/sessions/purge")
def purge_sessions(store: SessionStore = Depends(get_store)):
    n = store.purge()
    logger.info("purged %s sessions", n)
    return {"ok": True, "count": n}
