import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from starlette.middleware.base import BaseHTTPMiddleware
from lending_api.config import settings
from lending_api.database import Base, SessionLocal, engine, session_scope
from lending_api.errors import LendingError
from lending_api.models.user import UserRole
from lending_api.routes import admin, auth, book, loan
from lending_api.services.identity import IdentityStore

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests."""
    async def dispatch(self, request: Request, call_next):
        auth_header = request.headers.get("Authorization")
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip} - Auth: {'Present' if auth_header else 'Missing'}")

        response = await call_next(request)
        return response


def bootstrap_admin(session_factory):
    """Create the configured admin account on first start."""
    username = settings.bootstrap_admin_username
    password = settings.bootstrap_admin_password
    if not username or not password:
        return

    with session_scope(session_factory) as db:
        identity = IdentityStore(db)
        if identity.find_by_username(username) is not None:
            logger.info(f"Admin user '{username}' already exists")
            return
        identity.register(username, password, UserRole.ADMIN)
        logger.info(f"Admin user '{username}' created")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the bootstrap admin before serving."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    bootstrap_admin(SessionLocal)

    yield

    logger.info("Shutting down, disposing database engine...")
    engine.dispose()


app = FastAPI(
    title="Library Lending API",
    description="Backend API for borrowing and returning library books",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(LoggingMiddleware)


@app.exception_handler(LendingError)
async def lending_error_handler(request: Request, exc: LendingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Include routers
app.include_router(auth.router)
app.include_router(book.router)
app.include_router(loan.router)
app.include_router(admin.router)

@app.get("/")
async def root():
    return {"message": "Library Lending API", "version": "1.0.0"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "lending_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
