from sqlalchemy import Column, Integer, String

from .db import Base


class EntityMixin:
    """Columns shared by every persisted entity."""
    id = Column(Integer, primary_key=True, index=True)


class Account(EntityMixin, Base):
    __tablename__ = "accounts"
    email = Column(String(254), unique=True, index=True, nullable=False)
    # base64 of a 64-byte SHA-512 digest
    password_hash = Column(String(88), nullable=False)
    # base64 of the raw salt bytes
    salt = Column(String(128), nullable=False)

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        """
        Serialize the public part of an Account.

        The password hash and salt are never included.
        """
        return {
            "id": self.id,
            "email": self.email,
        }
