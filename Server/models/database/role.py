"""
Research Library Server - Role Enumeration

The closed set of account roles. Every authorization rule in policy.py is
total over this enum; 'editor' is accepted and stored but is treated like
'viewer' wherever a rule does not name it.
"""

from enum import Enum


class Role(str, Enum):
    """Account roles"""
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"

    @classmethod
    def Parse(cls, value) -> "Role":
        """
        Convert a stored or submitted value to a Role

        Raises:
            ValueError: If value is not a known role
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())
