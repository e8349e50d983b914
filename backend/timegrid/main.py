import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db, init_db
from .errors import register_error_handlers
from .middleware.audit import audit_middleware
from .middleware.cors import cors_middleware
from .routers import availabilities, check_service, schedules

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.auto_create_tables:
        init_db()
        logger.info("Database tables ensured")
    yield


app = FastAPI(title="timegrid availability API", lifespan=lifespan)

register_error_handlers(app)

# ===== Middleware order (last added runs first) =====
app.middleware("http")(cors_middleware)
app.middleware("http")(audit_middleware)

app.include_router(availabilities.router)
app.include_router(check_service.router)
app.include_router(schedules.router)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    return {"status": "ok", "database": db.execute(text("SELECT 1")).scalar() == 1}
