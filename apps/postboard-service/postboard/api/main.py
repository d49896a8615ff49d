"""
FastAPI app assembly: logging, middleware, error handlers and router wiring.
"""
import logging
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from postboard.utils.runtime import cors_origins, dev_mode_requested, log_level

# Configure logging
LOG_LEVEL = log_level()
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", logging.getLevelName(LOG_LEVEL))

from postboard.api.errors import ErrorCode, error_body, install_error_handlers  # noqa: E402
from postboard.api.posts import router as posts_router  # noqa: E402
from postboard.api.sessions import router as sessions_router  # noqa: E402
from postboard.api.users import router as users_router  # noqa: E402
from postboard.db.database import init_sqlite_schema  # noqa: E402

# Postgres schemas are managed by Alembic migrations; SQLite (local/dev) is created here.
init_sqlite_schema()

app = FastAPI(
    title="Postboard Service",
    description="Owner-scoped posts API with session authentication.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

_CREDENTIAL_HEADERS = (
    "authorization",
    "x-session-token",
    "x-auth-request-email",
    "x-forwarded-email",
)


# Middleware: reject writes that carry no credential at all before routing
# (must be added before CORSMiddleware: CORS wraps these 401s too)
@app.middleware("http")
async def reject_anonymous_writes(request: Request, call_next):
    if request.method in ("POST", "PUT", "PATCH", "DELETE") and not dev_mode_requested():
        h = request.headers
        if not any(h.get(name) for name in _CREDENTIAL_HEADERS):
            return JSONResponse(
                error_body("Sign in to perform changes.", ErrorCode.UNAUTHENTICATED),
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers={"WWW-Authenticate": "Bearer"},
            )
    return await call_next(request)


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(posts_router)
app.include_router(sessions_router)
app.include_router(users_router)


@app.get("/hello")
def hello():
    return {"greeting": "hello world!"}


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "postboard-service"}
