"""
Repository for Log database operations
"""

from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.log import Log
from models.user import User
from media_types import MEDIA_TYPES, LOG_STATUS_OPTIONS


class LogRepository:
    """Repository for Log database operations"""

    @staticmethod
    def get_for_user(user_id, log_id):
        """Get a Log by ID only if it belongs to the user"""
        return Log.query.filter_by(id=log_id, user_id=user_id).first()

    @staticmethod
    def get_by_item(user_id, media_type, external_id):
        """Get the single Log a user keeps for an external item"""
        return Log.query.filter_by(user_id=user_id, media_type=media_type, external_id=external_id).first()

    @staticmethod
    def list_for_user(user_id, media_type=None, external_id=None, status=None, sort="date"):
        """
        List a user's logs.
        status filters only when valid for media_type; without media_type any status filters.
        """
        query = Log.query.filter(Log.user_id == user_id)
        valid_type = media_type in MEDIA_TYPES
        if valid_type:
            query = query.filter(Log.media_type == media_type)
        if external_id:
            query = query.filter(Log.external_id == external_id)
        if status:
            if valid_type:
                if status in LOG_STATUS_OPTIONS[media_type]:
                    query = query.filter(Log.status == status)
            else:
                query = query.filter(Log.status == status)

        if sort == "grade":
            query = query.order_by(Log.grade.desc().nulls_last(), Log.updated_at.desc())
        else:
            query = query.order_by(Log.updated_at.desc())
        return query.all()

    @staticmethod
    def list_completed(user_id):
        """Logs with a completion date, for stats"""
        return Log.query.filter(Log.user_id == user_id, Log.completed_at.isnot(None)).all()

    @staticmethod
    def list_for_export(user_id, media_type=None):
        query = Log.query.filter(Log.user_id == user_id)
        if media_type:
            query = query.filter(Log.media_type == media_type)
        return query.order_by(Log.updated_at.desc()).all()

    @staticmethod
    def list_for_item(media_type, external_id):
        """Every user's log of one item, newest first, with the author"""
        return (
            db.session.query(Log, User)
            .join(User, Log.user_id == User.id)
            .filter(Log.media_type == media_type, Log.external_id == external_id)
            .order_by(Log.created_at.desc())
            .all()
        )

    @staticmethod
    def count_for_user(user_id):
        """Count a user's logs"""
        return Log.query.filter_by(user_id=user_id).count()

    @staticmethod
    def create(**kwargs):
        """Create new Log record"""
        try:
            item = Log(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(item, **kwargs):
        """Update Log record"""
        for key, value in kwargs.items():
            if hasattr(item, key):
                setattr(item, key, value)
        try:
            db.session.commit()
            db.session.refresh(item)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return item

    @staticmethod
    def delete(item):
        """Delete Log record"""
        try:
            db.session.delete(item)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return True
