import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import engine
from .errors import BookingEngineError
from .redis_client import redis_client
from .routers import bookings, business, employees, slots

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Booking Engine API")


def _status_code_name(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "ERROR"


@app.exception_handler(BookingEngineError)
async def booking_error_handler(request: Request, exc: BookingEngineError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Routing 404/405, auth 401 and router-level 400/409 share the error body
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "code": _status_code_name(exc.status_code)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={
            "message": message,
            "code": "VALIDATION_ERROR",
            "detail": jsonable_encoder(errors),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # Safe to retry: the commit path re-checks everything on the next attempt
    logger.error(f"Storage failure on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal error, please retry", "code": "INTERNAL"},
    )


# ===== Routers =====
# slots before employees: /employees/slots must not be captured by /employees/{id}
app.include_router(slots.router)
app.include_router(employees.router)
app.include_router(bookings.router)
app.include_router(business.router)


@app.get("/health")
def health():
    result = {"database": False, "redis": None}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        result["database"] = True
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")

    if redis_client is not None:
        try:
            result["redis"] = bool(redis_client.ping())
        except RedisError:
            logger.warning("Health check: redis unreachable")
            result["redis"] = False

    return result
