import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from .application.errors import AuthCoreError
from .application.ports.sms_gateway import SmsGateway
from .application.services import OtpJanitor
from .core.config import settings
from .database import create_db_and_tables, engine
from .dependencies import get_sms_gateway
from .exceptions import auth_core_exception_handler, http_exception_handler, validation_exception_handler
from .infrastructure.persistence.sqlalchemy.repositories.otp_store_sql import SqlOtpStore
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware
from .routers import auth_router, otp_router, sms_router, users_router
from .schemas.common.common import HealthResponse
from .utils import utcnow

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@contextmanager
def otp_store_scope():
    with Session(engine) as session:
        yield SqlOtpStore(session)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    create_db_and_tables()
    if not get_sms_gateway().configured:
        logger.warning("No SMS provider configured: OTP and 2FA logins will fail until BRIQ_API_KEY or AT_API_KEY is set")

    janitor_task = None
    if settings.OTP_JANITOR_INTERVAL_SECONDS > 0:
        janitor = OtpJanitor(otp_store_scope, settings.OTP_JANITOR_INTERVAL_SECONDS)
        janitor_task = asyncio.create_task(janitor.run_forever())
    yield
    # Shutdown
    if janitor_task is not None:
        janitor_task.cancel()
        try:
            await janitor_task
        except asyncio.CancelledError:
            pass
    logger.info(f"Shutting down {settings.APP_NAME}...")


def create_application() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    )

    application.add_exception_handler(AuthCoreError, auth_core_exception_handler)
    application.add_exception_handler(HTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(SecurityMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(auth_router.router)
    application.include_router(otp_router.router)
    application.include_router(users_router.router)
    application.include_router(sms_router.router)

    @application.get("/api/health", response_model=HealthResponse)
    def health_check(gateway: SmsGateway = Depends(get_sms_gateway)):
        return HealthResponse(
            service=settings.APP_NAME,
            version=settings.APP_VERSION,
            timestamp=utcnow().isoformat(),
            smsProviderConfigured=gateway.configured,
        )

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chicktrack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,  # in-memory resend cooldown is per process
        log_level=settings.LOG_LEVEL.lower()
    )
