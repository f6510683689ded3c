"""AppUser model - clinic staff accounts."""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from app.database import Base, BigIntPK


class AppUser(Base):
    """AppUser model - staff member who can belong to one or more clinics."""

    __tablename__ = 'app_user'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=True)
    full_name = Column(String(200), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    is_suspended = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user_tenants = relationship('UserTenant', back_populates='user')

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self, role=None):
        return {
            'id': self.id,
            'name': self.full_name,
            'email': self.email,
            'role': role,
            'avatarUrl': self.avatar_url,
            'isSuspended': self.is_suspended,
        }

    def __repr__(self):
        return f"<AppUser(id={self.id}, email='{self.email}')>"
