"""
Model: Log
One user's record of one external catalog item
"""

from db import db, now_utc
from models.user import new_id
from utils import isoformat_utc


class Log(db.Model):
    __tablename__ = "logs"
    __table_args__ = (
        db.UniqueConstraint("user_id", "media_type", "external_id", name="uq_logs_user_media_external"),
        db.Index("idx_logs_user_media", "user_id", "media_type"),
        db.Index("idx_logs_media_external", "media_type", "external_id"),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    media_type = db.Column(db.String(20), nullable=False)
    external_id = db.Column(db.String(256), nullable=False)
    title = db.Column(db.String(500), nullable=False)
    image = db.Column(db.String(2048))
    grade = db.Column(db.Float)
    review = db.Column(db.Text)
    list_type = db.Column(db.String(20))
    status = db.Column(db.String(30))
    season = db.Column(db.Integer)
    episode = db.Column(db.Integer)
    chapter = db.Column(db.Integer)
    volume = db.Column(db.Integer)
    started_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))
    content_hours = db.Column(db.Float)
    board_game_source = db.Column(db.String(20))
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    user = db.relationship("User", back_populates="logs")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "mediaType": self.media_type,
            "externalId": self.external_id,
            "title": self.title,
            "image": self.image,
            "grade": self.grade,
            "review": self.review,
            "listType": self.list_type,
            "status": self.status,
            "season": self.season,
            "episode": self.episode,
            "chapter": self.chapter,
            "volume": self.volume,
            "startedAt": isoformat_utc(self.started_at),
            "completedAt": isoformat_utc(self.completed_at),
            "contentHours": self.content_hours,
            "boardGameSource": self.board_game_source,
            "createdAt": isoformat_utc(self.created_at),
            "updatedAt": isoformat_utc(self.updated_at),
        }

    def __repr__(self):
        return f"<Log {self.media_type}:{self.external_id} user={self.user_id}>"
