from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.subject import Subject

logger = structlog.get_logger(__name__)


class SubjectRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, name: str) -> Optional[Subject]:
        """Get subject by exact name"""
        return self.session.query(Subject).filter(Subject.name == name).first()

    def find_or_create_by_name(self, name: str) -> Subject:
        """
        Get the subject with this exact name, creating it when missing.

        The insert runs in a savepoint so a concurrent insert of the same name only rolls
        back the savepoint; the row the other writer created is returned instead.
        """
        subject = self.get_by_name(name)
        if subject:
            return subject

        try:
            with self.session.begin_nested():
                subject = Subject(name=name)
                self.session.add(subject)
                self.session.flush()
            logger.info("subject_created", subject_id=subject.id, name=name)
            return subject
        except IntegrityError:
            logger.info("subject_created_concurrently", name=name)
            subject = self.get_by_name(name)
            if subject is None:
                raise
            return subject
