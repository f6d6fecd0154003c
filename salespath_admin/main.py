import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load env from the project root .env
project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(project_dir, ".env"))

# Import after dotenv is loaded
from salespath_admin.core.config import cors_origins, settings, validate_config  # noqa: E402
from salespath_admin.core.logging import configure_logging  # noqa: E402
from salespath_admin.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from salespath_admin.core.validation import validate_env  # noqa: E402
from salespath_admin.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from salespath_admin.api import businesses, health, monitoring, subscriptions, users  # noqa: E402

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("salespath")
    logger.info("Starting SalesPath admin backend...")
    try:
        yield
    finally:
        logging.getLogger("salespath").info("Stopping SalesPath admin backend...")


app = FastAPI(title="SalesPath - Admin Backend", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring must be registered before /admin/businesses/{business_id}
app.include_router(monitoring.router)
app.include_router(businesses.router)
app.include_router(subscriptions.router)
app.include_router(users.router)
app.include_router(health.router)
