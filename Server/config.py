"""
Research Library Server - Configuration

Process-level configuration read from environment variables.
Runtime-tunable values (session idle timeout, log retention) live in the
settings table instead; see DatabaseManager.PopulateDefaultSettings.
"""

import os
import secrets

# SQLite database location
DATABASE_PATH = os.environ.get("LIBRARY_DATABASE_PATH", "database/research_library.db")

# Root folder for uploaded PDF files
STORAGE_ROOT = os.environ.get("LIBRARY_STORAGE_ROOT", "storage/papers")

# Secret used to sign the session cookie. A random one is generated per process
# when unset, which logs everybody out on restart.
SESSION_SECRET = os.environ.get("LIBRARY_SESSION_SECRET") or secrets.token_urlsafe(32)
SESSION_SECRET_IS_EPHEMERAL = "LIBRARY_SESSION_SECRET" not in os.environ
SESSION_COOKIE_NAME = "library_session"

# Network
HOST = os.environ.get("LIBRARY_HOST", "0.0.0.0")
PORT = int(os.environ.get("LIBRARY_PORT", "5000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("LIBRARY_CORS_ORIGINS", "http://localhost:5173,http://localhost:8080").split(",")
    if origin.strip()
]

# Uploads
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB

# Password hashing cost
BCRYPT_ROUNDS = 10
