# backend/foodbook/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/foodbook.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///foodbook.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Billing
    TAX_RATE_PERCENT = int(os.environ.get("TAX_RATE_PERCENT", "18"))
    DEFAULT_COMPANY_NAME = os.environ.get("DEFAULT_COMPANY_NAME", "FOODBOOK")

    # Staff role passwords start out as this value until the owner changes them
    DEFAULT_ROLE_PASSWORD = os.environ.get("DEFAULT_ROLE_PASSWORD", "admin123")
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
    OTP_TTL_MINUTES = int(os.environ.get("OTP_TTL_MINUTES", "5"))

    # Outbound email (disabled unless host and user are both set)
    SMTP_HOST = os.environ.get("SMTP_HOST")
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
    SMTP_USER = os.environ.get("SMTP_USER")
    SMTP_PASS = os.environ.get("SMTP_PASS")
    MAIL_SENDER_NAME = os.environ.get("MAIL_SENDER_NAME", "FoodBook")
    APP_BASE_URL = os.environ.get("APP_BASE_URL", "http://localhost:5000")
