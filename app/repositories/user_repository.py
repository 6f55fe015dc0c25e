"""
Repository for User database operations
"""

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from db import db
from models.user import User


class UserRepository:
    """Repository for User database operations"""

    @staticmethod
    def get_by_id(id):
        """Get User by ID"""
        return db.session.get(User, id)

    @staticmethod
    def get_by_email(email):
        """Get User by email"""
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_username(username):
        """Get User by username"""
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_by_login(identifier):
        """Get User by email, or by username (case-insensitive) when no email matches"""
        user = User.query.filter_by(email=identifier).first()
        if user:
            return user
        return User.query.filter(func.lower(User.username) == identifier.lower()).first()

    @staticmethod
    def get_by_reset_token(token):
        """Get User holding a password reset token"""
        return User.query.filter_by(reset_token=token).first()

    @staticmethod
    def get_by_stripe_customer(customer_id):
        """Get User by Stripe customer id"""
        return User.query.filter_by(stripe_customer_id=customer_id).first()

    @staticmethod
    def create(**kwargs):
        """Create new User record"""
        try:
            item = User(**kwargs)
            db.session.add(item)
            db.session.commit()
            db.session.refresh(item)
            return item
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def update(id, **kwargs):
        """Update User record"""
        item = db.session.get(User, id)
        if not item:
            return None

        for key, value in kwargs.items():
            if hasattr(item, key):
                setattr(item, key, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return item

    @staticmethod
    def count():
        """Count total User records"""
        return User.query.count()
