from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, UniqueConstraint, DateTime, text
from typing import Dict

Base = declarative_base()


class PermissionSetting(Base):
    """One cell row of the (resource, level) -> read/write/delete matrix."""
    __tablename__ = 'permission_settings'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resource: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(32), nullable=False)
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_write: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    __table_args__ = (UniqueConstraint('resource', 'level', name='uq_permission_resource_level'),)

    def flags(self) -> Dict[str, bool]:
        return {
            'can_read': bool(self.can_read),
            'can_write': bool(self.can_write),
            'can_delete': bool(self.can_delete),
        }

    def to_dict(self):
        return {
            'id': self.id,
            'resource': self.resource,
            'level': self.level,
            **self.flags(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
