from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://launchpad:launchpad@db:5432/launchpad")
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  #expire au bout de 15 minutes
    JWT_REFRESH_EXPIRE_MIN = int(getenv("JWT_REFRESH_EXPIRE_MIN", "43200"))  #expire au bout d'1 mois

    # Stockage des fichiers (images des blocs, fichiers de livraison)
    BASE_URL = getenv("BASE_URL", "http://localhost:8000")
    UPLOADS_DIR = getenv("UPLOADS_DIR", "./uploads")
    MAX_IMAGE_BYTES = int(getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
    MAX_FILE_BYTES = int(getenv("MAX_FILE_BYTES", str(50 * 1024 * 1024)))

    # Editeur de contenu
    UNDO_HISTORY_LIMIT = int(getenv("UNDO_HISTORY_LIMIT", "20"))

    # Stripe Connect
    STRIPE_SECRET_KEY = getenv("STRIPE_SECRET_KEY", "")
    STRIPE_CLIENT_ID = getenv("STRIPE_CLIENT_ID", "")
    DEFAULT_ORIGIN = getenv("DEFAULT_ORIGIN", "http://localhost:5173")
    PLATFORM_FEE_RATE = float(getenv("PLATFORM_FEE_RATE", "0.1"))  # 10% pour la plateforme

    # Copywriting IA (API Messages d'Anthropic)
    ANTHROPIC_API_KEY = getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_MODEL = getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
    ANTHROPIC_BASE_URL = getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    AI_REQUEST_TIMEOUT = int(getenv("AI_REQUEST_TIMEOUT", "60"))

settings = Settings()
