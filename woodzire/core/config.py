import os
from dotenv import load_dotenv
load_dotenv()

class Settings:
    APP_NAME = os.getenv("APP_NAME", "Woodzire")
    SECRET_KEY = os.getenv("SECRET_KEY", "change-woodzire")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./woodzire.db")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@woodzire.in")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
    ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")
    NOTIFY_FUNCTION_URL = os.getenv("NOTIFY_FUNCTION_URL", "")
    NOTIFY_API_KEY = os.getenv("NOTIFY_API_KEY", "")
    NOTIFY_TIMEOUT = float(os.getenv("NOTIFY_TIMEOUT", "5"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DOMESTIC_COUNTRY = os.getenv("DOMESTIC_COUNTRY", "India")

settings = Settings()
