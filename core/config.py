# core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///canteen.db")
DB_WRITE_TIMEOUT = int(os.getenv("DB_WRITE_TIMEOUT", "15"))  # seconds
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@canteen.local")
DEFAULT_LOCATION = os.getenv("DEFAULT_LOCATION", "canteen")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
IMAGE_HOST = os.getenv("IMAGE_HOST", "http://localhost:5000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# The two shops; every menu item, offer and order belongs to exactly one
LOCATIONS = ("canteen", "cafeteria")
