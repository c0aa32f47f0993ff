# barbershop/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlmodel import Session

from barbershop.config import LOG_LEVEL, SEED_CATALOG
from barbershop.data import seed_catalog
from barbershop.db import create_db_and_tables, engine
from barbershop.errors import SchedulingError, ValidationError
from barbershop.logging_config import bind_request_id, get_logger, setup_structured_logging
from barbershop.routers import admin_routes, appointments_routes, barbers_routes
from barbershop.schemas import BookingResponse

setup_structured_logging(LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    if SEED_CATALOG:
        with Session(engine) as session:
            seed_catalog(session)
    logger.info("startup_complete")
    yield


app = FastAPI(title="Barbershop Scheduling API", lifespan=lifespan)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = bind_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def booking_body_error_handler(request: Request, exc: RequestValidationError):
    # booking clients always get a BookingResponse, even for a malformed body
    if request.method != "POST" or request.url.path != "/appointments":
        return await request_validation_exception_handler(request, exc)

    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"] if part != "body")
    error = ValidationError(f"{field}: {first['msg']}" if field else first["msg"])
    logger.info("booking_rejected", error_code=error.code, reason=error.message)
    return JSONResponse(
        status_code=error.status_code,
        content=BookingResponse(success=False, message=error.message, error_code=error.code).model_dump(mode="json"),
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(barbers_routes.router)
app.include_router(appointments_routes.router)
app.include_router(admin_routes.router)
