# services/config.py
from __future__ import annotations
import os

# ------------------------------------------------------------------------------
# Helper: get env var with fallback
# ------------------------------------------------------------------------------
def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return v if v is not None and v != "" else default

def _env_list(name: str, default: str = "") -> list[str]:
    return [m.strip().lower() for m in _env(name, default).split(",") if m.strip()]

# ------------------------------------------------------------------------------
# Database
# ------------------------------------------------------------------------------
DB_URL: str = _env("DB_URL", "sqlite://./db.sqlite3")

# Every guarded store call is cancelled after this many seconds.
STORE_TIMEOUT_SECONDS: float = float(_env("STORE_TIMEOUT_SECONDS", "10"))
# Compare-and-set attempts on projects.version before giving up with 409.
MAX_UPDATE_RETRIES: int = int(_env("MAX_UPDATE_RETRIES", "3"))

# ------------------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------------------
SECRET_KEY: str = _env("SECRET_KEY", "your-secret-key")
REFRESH_SECRET: str = _env("REFRESH_SECRET", "your-refresh-secret")
ALGORITHM: str = "HS256"
ACCESS_EXPIRE: int = int(_env("ACCESS_EXPIRE_SECONDS", str(15 * 60)))
REFRESH_EXPIRE: int = int(_env("REFRESH_EXPIRE_SECONDS", str(7 * 24 * 3600)))

SEED_ADMIN_EMAIL: str = _env("SEED_ADMIN_EMAIL", "admin@axisogreen.in")
SEED_ADMIN_PASSWORD: str = _env("SEED_ADMIN_PASSWORD", "password123")

CORS_ORIGINS: list[str] = [o.strip() for o in _env("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",") if o.strip()]

# ---------------- Mailboxes used by the authorization table ----------------
SUPER_ADMIN_EMAIL: str = _env("SUPER_ADMIN_EMAIL", "admin@axisogreen.in").lower()
FINANCE_EMAIL: str = _env("FINANCE_EMAIL", "dhanush@axisogreen.in").lower()
OPS_EMAIL: str = _env("OPS_EMAIL", "contact@axisogreen.in").lower()

RECEIPT_EMAILS: list[str] = _env_list("RECEIPT_EMAILS", f"{OPS_EMAIL},{FINANCE_EMAIL}")
EDIT_CUSTOMER_EMAILS: list[str] = _env_list("EDIT_CUSTOMER_EMAILS", OPS_EMAIL)
READ_ONLY_EMAILS: list[str] = _env_list("READ_ONLY_EMAILS", OPS_EMAIL)
REVENUE_HIDDEN_EMAILS: list[str] = _env_list("REVENUE_HIDDEN_EMAILS", f"{FINANCE_EMAIL},{OPS_EMAIL}")

# ---------------- Receipt ----------------
COMPANY_NAME: str = _env("COMPANY_NAME", "Axiso Green Energies Private Limited")
COMPANY_STATE: str = _env("COMPANY_STATE", "Telangana")
COMPANY_STATE_CODE: str = _env("COMPANY_STATE_CODE", "36")
COMPANY_COUNTRY: str = _env("COMPANY_COUNTRY", "India")
COMPANY_GSTIN: str = _env("COMPANY_GSTIN", "36ABCA4478M1Z9")
COMPANY_EMAIL: str = _env("COMPANY_EMAIL", "admin@axisogreen.in")
COMPANY_WEBSITE: str = _env("COMPANY_WEBSITE", "www.axisogreen.in")

# Missing image files are skipped when drawing.
RECEIPT_LOGO_PATH: str = _env("RECEIPT_LOGO_PATH", "assets/axiso-logo.png")
RECEIPT_SIGNATURE_PATH: str = _env("RECEIPT_SIGNATURE_PATH", "assets/signature.png")
RECEIPTS_DIR: str = _env("RECEIPTS_DIR", "data/receipts")
