from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.routes import historique as historique_routes
from app.routes import notifications as notifications_routes
from app.routes import commandes as commandes_routes
from app.core.errors import ActionError, first_error_message
from app.db import session as db_session
from app.core.config import settings
import logging
import time

app = FastAPI(
    title="ChanthanaThaiCook API",
    version="1.0.0",
    description="Historique des commandes, notifications et back-office",
    # Avoid automatic 307 redirects between /path and /path/
    # Root endpoints register both variants instead.
    redirect_slashes=False,
)

# Configure logging level from env
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
# Use a dedicated app logger to avoid uvicorn.access formatter expectations
_req_logger = logging.getLogger("app.request")


@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    # the SQLAlchemy listener increments this counter during the request
    db_counter = [0]
    db_count_token = db_session.request_db_query_count.set(db_counter)
    start = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        db_session.request_db_query_count.reset(db_count_token)
    duration_ms = int((time.perf_counter() - start) * 1000)

    if settings.REQUEST_LOG_VERBOSE:
        prefixes = [p.strip() for p in (settings.REQUEST_LOG_INCLUDE_PREFIXES or "").split(",") if p.strip()]
        path_full = request.url.path
        if any(path_full.startswith(pref) for pref in prefixes):
            qs = request.url.query
            path_qs = f"{path_full}?{qs}" if qs else path_full
            _req_logger.info(
                "%s %s -> %s in %sms | db_queries=%s global_db_queries=%s",
                request.method,
                path_qs,
                response.status_code,
                duration_ms,
                db_counter[0],
                db_session.get_global_db_queries_total(),
            )
    return response


@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": first_error_message(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(historique_routes.router)
app.include_router(notifications_routes.router)
app.include_router(commandes_routes.router)


@app.on_event("startup")
def on_startup():
    # create database tables if they don't exist
    db_session.create_db()


@app.get("/")
def root():
    return {"status": "API en ligne"}
