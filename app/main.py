import logging
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import settings
from app.core.errors import http_exception_handler, request_validation_handler, unhandled_exception_handler
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.permissions import routes as permissions_routes
from app.modules.users import routes as users_routes
from app.modules.organizations import routes as organizations_routes
from app.modules.leads import routes as leads_routes
from app.modules.inventory import routes as inventory_routes
from app.modules.projects import routes as projects_routes
from app.modules.call_logs import routes as call_logs_routes
from app.modules.webhooks import routes as webhooks_routes
from app.modules.audit import routes as audit_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api")
app.include_router(permissions_routes.router, prefix="/api")
app.include_router(permissions_routes.admin_router, prefix="/api")
app.include_router(users_routes.router, prefix="/api")
app.include_router(users_routes.admin_router, prefix="/api")
app.include_router(organizations_routes.router, prefix="/api")
app.include_router(leads_routes.router, prefix="/api")
app.include_router(inventory_routes.router, prefix="/api")
app.include_router(projects_routes.router, prefix="/api")
app.include_router(call_logs_routes.router, prefix="/api")
app.include_router(webhooks_routes.router, prefix="/api")
app.include_router(audit_routes.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment})")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    return {"status": "ready"}
