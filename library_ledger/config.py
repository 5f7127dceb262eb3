import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///library_ledger.db"
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret-key-change-me-32b")
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_ACCESS_TOKEN_HOURS", "24")))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Lending ledger
    LOAN_PERIOD_DAYS = int(os.getenv("LOAN_PERIOD_DAYS", "14"))
    DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", "3"))
    LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "2"))

    # Reporting windows
    TOP_BORROWED_LIMIT = 10
    TREND_MONTHS = 6
    DAILY_ACTIVITY_DAYS = 30


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    LOG_LEVEL = "WARNING"
