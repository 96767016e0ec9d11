import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("SQLITE_URL", "sqlite+aiosqlite:///./pavilion.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

# -----------------------
# JWT Config
# -----------------------
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable must be set")

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

ADMIN_ROLES = ["superadmin", "admin"]
CUSTOMER_ROLES = ["customer"]

# -----------------------
# Pricing & Documents
# -----------------------
DEFAULT_TAX_RATE = Decimal(os.getenv("DEFAULT_TAX_RATE", "18"))
QUOTATION_VALID_DAYS = int(os.getenv("QUOTATION_VALID_DAYS", "30"))
QUOTATION_PREFIX = os.getenv("QUOTATION_PREFIX", "QT")
ORDER_PREFIX = os.getenv("ORDER_PREFIX", "ORD")

COMPANY_NAME = os.getenv("COMPANY_NAME", "Pavilion Sports")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "")
COMPANY_LOGO_PATH = os.getenv("COMPANY_LOGO_PATH")  # optional, PDF renders without it

DEFAULT_PAYMENT_TERMS = "Net 30 Days"
DEFAULT_DELIVERY_TERMS = "7-10 business days"
DEFAULT_TERMS = os.getenv(
    "DEFAULT_TERMS",
    "1. Prices are valid for 30 days from the quotation date.\n"
    "2. Payment terms: 50% advance, balance before delivery.\n"
    "3. Delivery: 7-14 working days from order confirmation.\n"
    "4. All prices are exclusive of GST unless otherwise stated.\n"
    "5. Goods once sold cannot be returned or exchanged.\n"
    "6. This quotation is subject to stock availability.",
)

# -----------------------
# Logging
# -----------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
