from models.db import db
from utils import clock


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.String(32), primary_key=True)
    recipient_id = db.Column(db.String(64), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=clock.now, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }
