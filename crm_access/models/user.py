"""
User Model

CRM users with a fixed role and an optional custom role.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from crm_access.core.database import Base


class User(Base):
    """CRM user; role is one of SUPERADMIN, ADMIN, MANAGER, SALES"""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(120), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # Fixed role, used whenever the custom role does not resolve
    role = Column(String(20), nullable=False, default='SALES')
    custom_role_id = Column(String(36), ForeignKey('custom_roles.id'), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    custom_role = relationship("CustomRole", back_populates="users")

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'custom_role_id': self.custom_role_id,
            'custom_role_name': self.custom_role.name if self.custom_role else None,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
