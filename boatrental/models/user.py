"""Back-office user model (the credential record checked at login)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from boatrental.models.base import BaseModel


class User(BaseModel):
    """Back-office user.

    Rows are created by the provisioning CLI (``boatrental-admin create-user``);
    the web application only ever reads them. ``password_hash`` holds an
    Argon2id hash string, never the plaintext password.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.username}>"
