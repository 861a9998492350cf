import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leavedesk.config import get_settings
from leavedesk.core.database import SessionLocal, init_db
from leavedesk.api.routes import auth, employees, leaves, data_io
from leavedesk.scripts.seed_data import ensure_hr_account

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    db = SessionLocal()
    try:
        ensure_hr_account(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title=settings.app_name,
    description="API for Employee Leave Management",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(employees.router, prefix="/api/employees", tags=["Employees"])
app.include_router(leaves.router, prefix="/api/leaves", tags=["Leaves"])
app.include_router(data_io.router, prefix="/api/data", tags=["Data Export"])


@app.get("/")
async def root():
    return {"message": "Leave Desk API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
