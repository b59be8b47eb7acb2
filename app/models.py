"""SQLAlchemy models."""
import time

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

db = SQLAlchemy()


def _epoch_seconds() -> int:
    return int(time.time())


class Submission(db.Model):
    """A marketing form submission. Written once, never updated."""

    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    # Split-name deployments fill firstname/lastname, full-name ones fill name.
    # Free-text fields are unbounded; only email has a validated length.
    firstname: Mapped[str | None] = mapped_column(Text, nullable=True)
    lastname: Mapped[str | None] = mapped_column(Text, nullable=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, default=_epoch_seconds, nullable=False)
    klaviyo_profile_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Submission {self.id} {self.email}>"
