from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from whatsontv.config import setup_logging
from whatsontv.services import ConfigurationError, DeliveryError, notification_scheduler

from whatsontv.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the daily Slack notification job for the lifetime of the app"""
    logger.info("Starting WhatsOnTV service...")

    try:
        notification_scheduler.start()
    except Exception as e:
        logger.error(f"Failed to start notification scheduler: {e}", exc_info=True)
        raise

    next_run = notification_scheduler.get_next_run_time()
    logger.info("WhatsOnTV service started, next notification at %s", next_run.isoformat() if next_run else "never")

    yield

    try:
        notification_scheduler.shutdown()
    except Exception as e:
        logger.error(f"Error during scheduler shutdown: {e}", exc_info=True)

    logger.info("WhatsOnTV service stopped")


app = FastAPI(
    title="WhatsOnTV",
    description="Daily TVMaze schedule, filtered and grouped by network",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error for {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(DeliveryError)
async def delivery_error_handler(request: Request, exc: DeliveryError):
    logger.error(f"Delivery failed for {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log rejected query parameters and return a serializable error list"""
    logger.error(f"Validation error for {request.method} {request.url.path}?{request.url.query}")

    errors = [
        {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        for error in exc.errors()
    ]
    logger.debug(f"Validation details: {errors}")

    return JSONResponse(status_code=422, content={"detail": errors})
