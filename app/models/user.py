"""
Model: User
Account credentials, profile preferences, provider API keys and tier
"""

import json
import uuid

from db import db, now_utc
from flask_login import UserMixin
from constants import TIER_FREE, TIER_PRO
from media_types import MEDIA_TYPES, BOARD_GAME_PROVIDERS, SUPPORTED_LOCALES, DEFAULT_LOCALE

# api key name used by clients -> column
API_KEY_FIELDS = {
    "tmdb": "tmdb_api_key",
    "rawg": "rawg_api_key",
    "bgg": "bgg_api_key",
    "ludopedia": "ludopedia_api_key",
    "comicvine": "comicvine_api_key",
}


def new_id():
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(32), unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    theme = db.Column(db.String(10))
    locale = db.Column(db.String(10))
    visible_media_types = db.Column(db.Text)
    board_game_provider = db.Column(db.String(20), default="bgg")
    country = db.Column(db.String(2))
    onboarded = db.Column(db.Boolean, default=False, nullable=False)

    tier = db.Column(db.String(10), default=TIER_FREE, nullable=False)
    stripe_customer_id = db.Column(db.String(255))

    tmdb_api_key = db.Column(db.String(512))
    rawg_api_key = db.Column(db.String(512))
    bgg_api_key = db.Column(db.String(512))
    ludopedia_api_key = db.Column(db.String(512))
    comicvine_api_key = db.Column(db.String(512))

    reset_token = db.Column(db.String(64), index=True)
    reset_token_expires = db.Column(db.DateTime(timezone=True))

    created_at = db.Column(db.DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    logs = db.relationship("Log", back_populates="user", cascade="all, delete-orphan", lazy="dynamic")

    @property
    def is_pro(self):
        return self.tier == TIER_PRO

    @property
    def effective_theme(self):
        return "light" if self.theme == "light" else "dark"

    @property
    def effective_locale(self):
        return self.locale if self.locale in SUPPORTED_LOCALES else DEFAULT_LOCALE

    @property
    def effective_board_game_provider(self):
        return self.board_game_provider if self.board_game_provider in BOARD_GAME_PROVIDERS else "bgg"

    def get_visible_media_types(self):
        """Stored list filtered to known types; every type when unset or unusable"""
        if not self.visible_media_types:
            return list(MEDIA_TYPES)
        try:
            stored = json.loads(self.visible_media_types)
        except (TypeError, ValueError):
            return list(MEDIA_TYPES)
        if not isinstance(stored, list):
            return list(MEDIA_TYPES)
        filtered = [t for t in stored if t in MEDIA_TYPES]
        return filtered or list(MEDIA_TYPES)

    def set_visible_media_types(self, media_types):
        self.visible_media_types = json.dumps(list(media_types))

    def get_api_key(self, name):
        column = API_KEY_FIELDS.get(name)
        return getattr(self, column) if column else None

    def api_keys_status(self):
        return {name: bool(getattr(self, column)) for name, column in API_KEY_FIELDS.items()}

    def to_auth_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "onboarded": bool(self.onboarded),
        }

    def to_me_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "onboarded": bool(self.onboarded),
            "tier": self.tier or TIER_FREE,
            "theme": self.effective_theme,
            "locale": self.effective_locale,
            "visibleMediaTypes": self.get_visible_media_types(),
            "boardGameProvider": self.effective_board_game_provider,
            "country": self.country,
            "apiKeys": self.api_keys_status(),
        }

    def __repr__(self):
        return f"<User {self.id} {self.username}>"
