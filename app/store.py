"""Persistence of accepted submissions."""
import logging
import secrets
import string

from sqlalchemy.exc import SQLAlchemyError

from app.errors import InternalError
from app.models import Submission, db

ID_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
ID_LENGTH = 16

logger = logging.getLogger(__name__)


def generate_submission_id(length: int = ID_LENGTH) -> str:
    """Random URL-safe id from [0-9A-Za-z]."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class SubmissionStore:
    """Insert-only store over the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def insert(self, submission: Submission) -> Submission:
        try:
            self.session.add(submission)
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Database insertion error for submission %s: %s", submission.id, e)
            self.session.rollback()
            raise InternalError("Failed to store your submission. Please try again.") from e
        return submission
