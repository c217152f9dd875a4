# backend/tillbook/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/tillbook.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///tillbook.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Printed in the receipt header
    SHOP_NAME = os.environ.get("SHOP_NAME", "Family Cake")

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "5"))

    # Where exported text reports are written
    REPORT_EXPORT_DIR = os.environ.get("REPORT_EXPORT_DIR", "reports")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Terminal sessions untouched this long are closed and their cart dropped
    SESSION_IDLE_MINUTES = int(os.environ.get("SESSION_IDLE_MINUTES", "480"))
