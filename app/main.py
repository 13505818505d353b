# app/main.py
from contextlib import asynccontextmanager
import logging

import requests
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.local_storage import DatabaseLocalStorage
from app.core.supabase_client import supabase_public
from app.database import create_db_and_tables, create_local_engine
from app.storefront import build_storefront

# Routers
from app.routers.auth import router as auth_router
from app.routers.cart import router as cart_router
from app.routers.customize import router as customize_router
from app.routers.users import router as users_router
from app.routers.checkout import router as checkout_router
from app.routers.orders import router as orders_router
from app.routers.admin import router as admin_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Open the local device storage and create its table.
      - Build the Storefront (Supabase client, cart, session gate...).
      - Restore a persisted auth session, syncing the cart if signed in.

    Shutdown:
      - Close the HTTP session and dispose the storage engine.
    """
    logger.info("🔄 Startup: Opening local storage at %s", settings.LOCAL_STORAGE_URL)
    engine = create_local_engine(settings.LOCAL_STORAGE_URL)
    try:
        create_db_and_tables(engine)
        logger.info("✅ Startup: Local storage ready.")
    except Exception as e:
        logger.error(f"❌ Startup: Local storage FAILED: {e}")
        raise

    http = requests.Session()
    storefront = build_storefront(
        settings,
        supabase_public(),
        DatabaseLocalStorage(engine, settings.LOCAL_STORAGE_QUOTA_BYTES),
        http,
    )
    if storefront.gate.restore():
        logger.info("✅ Startup: Session restored, cart synced.")
    app.state.storefront = storefront

    yield

    http.close()
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME or "StarterPrint3D Storefront",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    settings.SITE_URL,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(customize_router, prefix=settings.API_V1_STR)
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(checkout_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "starterprint3d-storefront"}
