import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the default admin user if it does not exist yet."""
    from app.database import SessionLocal
    from app.models.usuario import Usuario
    from app.utils.security import hash_password

    db = SessionLocal()
    try:
        admin = db.query(Usuario).filter(Usuario.username == "admin").first()
        if admin is None:
            db.add(
                Usuario(
                    username="admin",
                    email="admin@cronograma.local",
                    password_hash=hash_password("Admin123!"),
                    nombre_completo="Administrador",
                    rol="ADMIN",
                    activo=True,
                )
            )
            db.commit()
            logger.info("[SEED] Admin creado: admin / Admin123!")
        else:
            logger.info("[SEED] Admin ya existe, sin cambios.")
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[SEED] No se pudo crear el admin: %s", exc)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure an admin account exists
    _seed_admin_user()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])

# Gantt schedule + monthly financial matrix
from app.routers import cronograma  # noqa: E402

app.include_router(
    cronograma.router,
    prefix=f"{settings.API_PREFIX}/cronograma",
    tags=["Cronograma"],
)
