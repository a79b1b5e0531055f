"""
User Repository - role lookups for authorization
"""
from typing import Optional
from sqlalchemy.orm import Session

from invoice_service.models.user import User


class UserRepository:
    """Read-only access to user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_role(self, user_id: str) -> Optional[str]:
        """Get user's role, or None if the user has no profile"""
        user = self.get_by_id(user_id)
        return user.role if user else None
