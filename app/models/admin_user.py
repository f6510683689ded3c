"""AdminUser model - platform super administrators (no tenant association)."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from app.database import Base, BigIntPK


class AdminUser(Base):
    """AdminUser model - manages tenants and plans across the whole platform.

    Admin users have no tenant. Their session key ('admin_user_id') is
    separate from the clinic staff session.
    """

    __tablename__ = 'admin_users'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<AdminUser(id={self.id}, email='{self.email}')>"
