"""
Research Library Server - Database Manager

This module manages database connection, initialization, password hashing
and the small identity-store queries shared by the other managers.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker
from fastapi.concurrency import run_in_threadpool
import bcrypt

import config
from models.database import Base, Role, User, Setting

logger = logging.getLogger(__name__)

# Seeded on first boot when no admin exists. Known-bad; the operator must change it.
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin"
DEFAULT_ADMIN_FULL_NAME = "System Admin"

DEFAULT_SETTINGS = {
    "session_idle_minutes": "15",
    "log_retention_days": "365",
    "activity_log_page_size": "100",
}


class DatabaseManager:
    """
    Manages database connection, initialization, and operations
    """

    def __init__(self, db_path: str = None):
        """
        Initialize database manager

        Args:
            db_path: Path to SQLite database file (defaults to config.DATABASE_PATH)
        """
        self.db_path = db_path or config.DATABASE_PATH

        # Ensure database directory exists
        db_dir = Path(self.db_path).parent
        if db_dir and str(db_dir) != '.':
            db_dir.mkdir(parents=True, exist_ok=True)

        # Password hashing runs in worker threads, so connections must be shareable
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False}
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def InitializeDatabase(self) -> bool:
        """
        Initialize the database with all tables and default data
        Creates tables if they don't exist, populates default settings,
        and creates the default admin user when no admin account exists.

        Returns:
            bool: True if the default admin user was created
        """
        Base.metadata.create_all(bind=self.engine)

        session = self.SessionLocal()
        admin_created = False

        try:
            if self.CountAdmins(session) == 0:
                existing = self.FindUserByLogin(session, DEFAULT_ADMIN_USERNAME)
                if existing:
                    # Username taken by a non-admin; promote rather than collide
                    existing.role = Role.ADMIN.value
                    logger.warning(f"No admin found; promoted existing user '{existing.username}' to admin")
                else:
                    admin_user = User(
                        username=DEFAULT_ADMIN_USERNAME,
                        password_hash=self.HashPassword(DEFAULT_ADMIN_PASSWORD),
                        full_name=DEFAULT_ADMIN_FULL_NAME,
                        role=Role.ADMIN.value
                    )
                    session.add(admin_user)
                    admin_created = True

            self.PopulateDefaultSettings(session)

            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        return admin_created

    def PopulateDefaultSettings(self, session):
        """
        Populate default settings
        Only adds settings that don't already exist

        Args:
            session: SQLAlchemy session
        """
        for key, value in DEFAULT_SETTINGS.items():
            existing = session.query(Setting).filter(Setting.key == key).first()
            if not existing:
                session.add(Setting(key=key, value=value))
                logger.info(f"Added default setting: {key} = {value}")

    # ==================== Password Hashing ====================

    @staticmethod
    def HashPassword(password: str) -> str:
        """
        Hash a password using bcrypt
        Truncates to 72 bytes to comply with bcrypt's maximum password length

        Args:
            password: Plain text password

        Returns:
            str: Hashed password (as string)
        """
        password_bytes = password.encode('utf-8')[:72]
        salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
        hashed = bcrypt.hashpw(password_bytes, salt)
        return hashed.decode('utf-8')

    @staticmethod
    def VerifyPassword(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash
        Truncates to 72 bytes to comply with bcrypt's maximum password length

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored password hash (as string)

        Returns:
            bool: True if password matches, False otherwise
        """
        if not plain_password or not hashed_password:
            return False
        password_bytes = plain_password.encode('utf-8')[:72]
        hashed_bytes = hashed_password.encode('utf-8')
        try:
            return bcrypt.checkpw(password_bytes, hashed_bytes)
        except ValueError:
            logger.error("Stored password hash is malformed")
            return False

    async def HashPasswordAsync(self, password: str) -> str:
        """HashPassword on a worker thread so the event loop keeps serving requests"""
        return await run_in_threadpool(self.HashPassword, password)

    async def VerifyPasswordAsync(self, plain_password: str, hashed_password: str) -> bool:
        """VerifyPassword on a worker thread"""
        return await run_in_threadpool(self.VerifyPassword, plain_password, hashed_password)

    def GetSession(self):
        """
        Get a new database session

        Returns:
            Session: SQLAlchemy session
        """
        return self.SessionLocal()

    # ==================== Identity Store Queries ====================

    @staticmethod
    def FindUserByLogin(session, username: str) -> Optional[User]:
        """
        Find a user by login name, ignoring case

        Args:
            session: SQLAlchemy session
            username: Username as typed by the user

        Returns:
            User or None
        """
        if not username:
            return None
        return session.query(User).filter(func.lower(User.username) == username.strip().lower()).first()

    @staticmethod
    def CountAdmins(session) -> int:
        """Number of accounts holding the admin role"""
        return session.query(User).filter(User.role == Role.ADMIN.value).count()

    # ==================== Settings ====================

    def GetSetting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Read a setting value

        Args:
            key: Setting key
            default: Value returned when the key is missing

        Returns:
            str: Stored value or default
        """
        session = self.GetSession()
        try:
            setting = session.query(Setting).filter(Setting.key == key).first()
            return setting.value if setting else default
        finally:
            session.close()

    def GetIntSetting(self, key: str) -> int:
        """Read an integer setting, falling back to the built-in default on bad data"""
        fallback = int(DEFAULT_SETTINGS[key])
        value = self.GetSetting(key, str(fallback))
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Setting '{key}' has non-integer value '{value}', using {fallback}")
            return fallback

    def GetAllSettings(self) -> dict:
        """All settings as a dict of ints"""
        return {key: self.GetIntSetting(key) for key in DEFAULT_SETTINGS}

    def UpdateSettings(self, values: dict) -> dict:
        """
        Store new setting values

        Args:
            values: Mapping of known setting keys to integers; None values are skipped

        Returns:
            dict: All settings after the update
        """
        session = self.GetSession()
        try:
            for key, value in values.items():
                if value is None or key not in DEFAULT_SETTINGS:
                    continue
                setting = session.query(Setting).filter(Setting.key == key).first()
                if setting:
                    setting.value = str(value)
                else:
                    session.add(Setting(key=key, value=str(value)))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        return self.GetAllSettings()
