from fastapi import FastAPI, Request, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.routes import auth as auth_router, events as events_router, users as users_router, health as health_router
from app.db.session import engine, Base
from app.core.config import settings
from app.core.exceptions import setup_exception_handlers
from app.core.logging import logger

app = FastAPI(title="EventHub", version="1.0.0")

# Rate limits are declared on the auth routes
app.state.limiter = auth_router.limiter
setup_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


api_router = APIRouter()
api_router.include_router(auth_router.router)
api_router.include_router(events_router.router)
api_router.include_router(users_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)


@app.get("/", tags=["meta"])
async def index():
    """Describe the available endpoints."""
    return {
        "success": True,
        "message": "Event Management API",
        "version": app.version,
        "endpoints": {
            "auth": {
                "POST /register": "Register a new user",
                "POST /login": "Login user",
            },
            "events": {
                "GET /events": "Get all events (requires authentication)",
                "GET /events/{id}": "Get event by ID (requires authentication)",
                "POST /events": "Create new event (requires organizer role)",
                "PUT /events/{id}": "Update event (requires organizer role, own events only)",
                "DELETE /events/{id}": "Delete event (requires organizer role, own events only)",
                "POST /events/{id}/register": "Register for an event (requires authentication)",
                "GET /events/{id}/registrations": "Get event registrations (requires organizer role, own events only)",
            },
            "user": {
                "GET /user/profile": "Get current user profile (requires authentication)",
                "GET /user/registrations": "Get user event registrations (requires authentication)",
            },
        },
    }


@app.on_event("startup")
async def on_startup():
    # create tables (simple approach; no migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if not settings.email_configured:
        logger.warning("Email service not configured. Registration emails will be logged instead of sent.")


@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()
