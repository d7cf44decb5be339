from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.core.database import Base, utcnow
import bcrypt

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Stripe Connect (compte vendeur)
    stripe_connected = Column(Boolean, default=False)
    stripe_account_id = Column(String, nullable=True)
    stripe_connected_at = Column(DateTime(timezone=True), nullable=True)

    def set_password(self, password: str):
        self.password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

    def verify_password(self, password: str) -> bool:
        return bcrypt.checkpw(password.encode(), self.password_hash.encode())
