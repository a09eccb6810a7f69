# routers/health.py
from fastapi import APIRouter, Depends

from sessions import SessionStore, get_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(store: SessionStore = Depends(get_store)):
    return {"ok": True, "sessions": len(store), "max_sessions": store.max_sessions}
