"""
SQLAlchemy User model (read-only here, owned by the auth service)
"""
from sqlalchemy import Column, String, CheckConstraint
from invoice_service.database import Base


class User(Base):
    """User profile with role"""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default='customer')

    __table_args__ = (
        CheckConstraint("role IN ('customer', 'admin')", name='check_role_valid'),
    )

    def __repr__(self):
        return f"<User(id='{self.id}', role='{self.role}')>"
