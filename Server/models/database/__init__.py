"""
Research Library Server - Database Models Package

This package contains all SQLAlchemy database model definitions.
All models share a common declarative base for proper table relationships.
"""

# Import Base first
from models.database.base import Base, NewId, UtcNow, AsUtc

# Import all models
from models.database.role import Role
from models.database.user import User
from models.database.strand import Strand
from models.database.research_paper import ResearchPaper
from models.database.activity_log import ActivityLog
from models.database.login_attempt import LoginAttempt
from models.database.session_record import SessionRecord
from models.database.setting import Setting

# Export all models and Base
__all__ = [
    'Base',
    'NewId',
    'UtcNow',
    'AsUtc',
    'Role',
    'User',
    'Strand',
    'ResearchPaper',
    'ActivityLog',
    'LoginAttempt',
    'SessionRecord',
    'Setting',
]
