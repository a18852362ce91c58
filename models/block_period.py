from models.db import db
from utils import clock


class BlockPeriod(db.Model):
    __tablename__ = "block_periods"

    id = db.Column(db.String(32), primary_key=True)

    # closed-open interval [start, end)
    start = db.Column(db.DateTime, nullable=False, index=True)
    end = db.Column(db.DateTime, nullable=False, index=True)
    reason = db.Column(db.String(255), nullable=False)

    created_by_id = db.Column(db.String(64), db.ForeignKey("user_profiles.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=clock.now, nullable=False)

    __table_args__ = (
        db.CheckConstraint("start < \"end\"", name="ck_block_periods_range"),
    )

    def covers(self, instant) -> bool:
        return self.start <= instant < self.end

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "reason": self.reason,
            "created_by_id": self.created_by_id,
            "created_at": self.created_at.isoformat(),
        }
