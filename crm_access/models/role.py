"""
Role Models

Administrator-defined roles and the grantable permission catalog.
- PermissionDefinition: one grantable (resource, action) pair
- CustomRole: named role, optionally marked as a system role
- RolePermission: assignment of a permission to a role
"""
import uuid
from datetime import datetime
from typing import List
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from crm_access.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class PermissionDefinition(Base):
    """A grantable capability, e.g. ('leads', 'view_all')"""
    __tablename__ = 'permissions'
    __table_args__ = (
        UniqueConstraint('resource', 'action', name='uq_permissions_resource_action'),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    resource = Column(String(50), nullable=False, index=True)
    action = Column(String(50), nullable=False)
    description = Column(String(200))
    category = Column(String(50))  # Admin, CRM, Inventory, Reports

    roles = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")

    @property
    def code(self) -> str:
        return f"{self.resource}:{self.action}"

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'resource': self.resource,
            'action': self.action,
            'description': self.description,
            'category': self.category,
        }


class CustomRole(Base):
    """Role created and edited by administrators"""
    __tablename__ = 'custom_roles'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)

    # System roles mirror the fixed roles and cannot be renamed
    is_system = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    users = relationship("User", back_populates="custom_role")

    def permission_codes(self) -> List[str]:
        """Get 'resource:action' codes granted by this role"""
        return sorted(rp.permission.code for rp in self.permissions)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'is_system': self.is_system,
            'is_active': self.is_active,
            'user_count': len(self.users),
            'permissions': [rp.permission.to_dict() for rp in self.permissions],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class RolePermission(Base):
    """Assignment of one permission to one custom role"""
    __tablename__ = 'role_permissions'

    role_id = Column(String(36), ForeignKey('custom_roles.id', ondelete='CASCADE'), primary_key=True)
    permission_id = Column(String(36), ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    role = relationship("CustomRole", back_populates="permissions")
    permission = relationship("PermissionDefinition", back_populates="roles")
