from models.db import db
from utils import clock

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.String(64), nullable=True, index=True)  # nullable for scheduler events
    action = db.Column(db.String(80), nullable=False)  # e.g. BLOCK_CREATE, BOOKING_CANCEL
    entity = db.Column(db.String(80), nullable=True)   # e.g. booking, block
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=clock.now, nullable=False)
