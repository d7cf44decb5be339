import logging
from pathlib import Path
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from app.core.config import settings
from app.core.database import engine, Base
from app.models import ai_trace, document, user  # noqa: F401 (tables)
from app.routers import health, auth, products, content, payments, ai, public

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Launchpad API",
    version="0.1.0"
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(products.router)
app.include_router(content.router)
app.include_router(payments.router)
app.include_router(ai.router)
app.include_router(public.router)

# Fichiers uploadés (images des blocs, fichiers de livraison)
Path(settings.UPLOADS_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False), name="uploads")
