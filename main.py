import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL

# Routers
from routers.admin import router as admin_router
from routers.game import router as game_router
from routers.health import router as health_router

logger = logging.getLogger("timestables")
logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title="Times Tables Quest – Game API")

# Allow calls from the front-end dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(game_router)  # /sessions/...
app.include_router(health_router)  # /health
app.include_router(admin_router)  # /admin/...
