# storefront/main.py
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

load_dotenv()

from storefront.config import settings
from storefront.database import init_db
from storefront.utils.cart_state import AuthenticationRequired, CartSyncError

# Routers
from storefront.routes.auth import router as auth_router
from storefront.routes.catalog import router as catalog_router
from storefront.routes.cart import router as cart_router
from storefront.routes.checkout import router as checkout_router
from storefront.routes.orders import router as orders_router
from storefront.routes.admin import router as admin_router
from storefront.routes.dashboard import router as dashboard_router
from storefront.routes.realtime import router as realtime_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialisation
init_db()

app = FastAPI(title="Storefront API", version="1.0.0")

# Uploaded product images, make sure the directory exists before mounting
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

# Credentials are allowed so the session cookie reaches the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Cart mutations without a session send the caller to the login step
@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(CartSyncError)
async def cart_sync_error_handler(request: Request, exc: CartSyncError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Failed {exc}. Please try again."},
    )


# Router registration
app.include_router(catalog_router)
app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(dashboard_router)
app.include_router(admin_router)
app.include_router(realtime_router)
