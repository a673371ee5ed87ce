import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ops_platform.config import settings
from ops_platform.database import init_db
from ops_platform.errors import register_error_handlers

# Import routes
from ops_platform.routes import auth, bookings, contacts, dashboard, forms, inbox, inventory, public, workspaces

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Ops Platform API started ({settings.ENVIRONMENT})")
    yield


# Create FastAPI app
app = FastAPI(
    title="Ops Platform API",
    description="Multi-tenant operations platform for appointment-based businesses",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(workspaces.router, prefix="/api/workspaces", tags=["Workspaces"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["Contacts"])
app.include_router(inbox.router, prefix="/api/inbox", tags=["Inbox"])
app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(public.router, prefix="/api/public", tags=["Public"])


# Health check
@app.get("/api/health")
def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
