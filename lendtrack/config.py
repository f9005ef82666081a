import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_DEFAULT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    APP_ENV: str = "development"
    SECRET_KEY: str = _DEFAULT_SECRET
    DATABASE_URL: str = "sqlite:///./data/lendtrack.db"
    FIRST_ADMIN_USER: str = "admin"
    FIRST_ADMIN_PASS: str = "admin123"
    LOG_LEVEL: str = "INFO"
    # Prefix automaticky generovaných kódů položek (BVGJK0001, BVGJK0002, ...)
    ITEM_CODE_PREFIX: str = "BVGJK"
    # Maximální doba čekání na zámek položky, poté ItemBusyError
    LOCK_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"


settings = Settings()

if settings.SECRET_KEY == _DEFAULT_SECRET:
    if settings.APP_ENV == "production":
        raise RuntimeError("SECRET_KEY musí být nastaven v produkci! Zkontrolujte .env soubor.")
    else:
        logger.warning("SECRET_KEY má výchozí hodnotu, nastavte ji v .env pro produkci!")

if settings.FIRST_ADMIN_PASS == "admin123":
    if settings.APP_ENV == "production":
        logger.warning("FIRST_ADMIN_PASS má výchozí hodnotu 'admin123', změňte ji v .env!")
    else:
        logger.warning("FIRST_ADMIN_PASS má výchozí hodnotu, doporučeno změnit v .env")
