import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from staffdesk.config.settings import settings
from staffdesk.core.dependencies import build_permission_cache
from staffdesk.core.middleware import SecurityHeadersMiddleware
from staffdesk.modules.auth import routes as auth_routes
from staffdesk.modules.flags import routes as flags_routes
from staffdesk.modules.onboarding import routes as onboarding_routes
from staffdesk.modules.overrides import routes as overrides_routes
from staffdesk.modules.permissions import routes as permissions_routes
from staffdesk.modules.roles import routes as roles_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# default_limits apply to every route through SlowAPIMiddleware; health checks are exempt
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

app = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module_routes in (
    auth_routes,
    permissions_routes,
    roles_routes,
    overrides_routes,
    flags_routes,
    onboarding_routes,
):
    app.include_router(module_routes.router, prefix=API_PREFIX)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


@app.on_event("startup")
async def create_permission_cache():
    app.state.permission_cache = build_permission_cache()
    logger.info(
        "%s started (%s); permission cache ttl=%ss failure_ttl=%ss max_entries=%s",
        settings.app_name,
        settings.environment,
        settings.permission_cache_ttl_seconds,
        settings.permission_cache_failure_ttl_seconds,
        settings.permission_cache_max_entries,
    )


@app.on_event("shutdown")
async def drop_permission_cache():
    cache = getattr(app.state, "permission_cache", None)
    if cache is not None:
        cache.invalidate_all()
    logger.info("%s stopped", settings.app_name)


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    cache = getattr(app.state, "permission_cache", None)
    return {
        "status": "healthy",
        "permission_cache": cache.stats() if cache is not None else None,
    }


@app.get("/ready")
@limiter.exempt
async def ready():
    return {"status": "ready"}
