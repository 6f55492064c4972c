import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.config import get_settings
from app.database import engine, Base
from app.routers import users, loot, wishlist, guild, notifications
from app.services.errors import LootError, to_http_exception

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Datenbank-Tabellen erstellen
    Base.metadata.create_all(bind=engine)
    logger.info("Datenbank bereit: %s", engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(
    title="Gilde - Loot-Verteilung",
    description="Web-Anwendung zur Loot-Verteilung einer Gilde",
    version="0.1.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

# CORS für Frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LootError)
async def loot_error_handler(request: Request, exc: LootError):
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


# Router einbinden
app.include_router(users.router, prefix="/api/users", tags=["Mitglieder"])
app.include_router(loot.router, prefix="/api/loot", tags=["Loot"])
app.include_router(wishlist.router, prefix="/api/wishlist", tags=["Wishlist"])
app.include_router(guild.router, prefix="/api/guild", tags=["Gilde"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Benachrichtigungen"])


@app.get("/")
async def root():
    return {"message": "Gilde API läuft", "version": "0.1.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
