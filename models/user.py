from sqlalchemy import text

from models.db import db
from utils import clock
from utils.roles import MEMBER, LEAD_ADMIN


class Profile(db.Model):
    __tablename__ = "user_profiles"

    # id issued by the identity provider, not generated here
    id = db.Column(db.String(64), primary_key=True)

    service_number = db.Column(db.String(6), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    display_name = db.Column(db.String(120), nullable=False)
    rank = db.Column(db.String(40), nullable=False)
    unit = db.Column(db.String(40), nullable=False)
    service_document_number = db.Column(db.String(120), nullable=False)

    role = db.Column(db.String(20), nullable=False, default=MEMBER, index=True)
    # role values: MEMBER, LEAD_ADMIN, CENTRAL_ADMIN

    created_at = db.Column(db.DateTime, default=clock.now, nullable=False)

    __table_args__ = (
        # Hard business-rule: at most one LEAD_ADMIN at any time
        db.Index(
            "uq_user_profiles_single_lead",
            "role",
            unique=True,
            sqlite_where=text(f"role = '{LEAD_ADMIN}'"),
            postgresql_where=text(f"role = '{LEAD_ADMIN}'"),
        ),
    )

    @property
    def title(self) -> str:
        return f"{self.rank} {self.display_name}".strip()

    def summary(self) -> dict:
        return {
            "display_name": self.display_name,
            "rank": self.rank,
            "service_document_number": self.service_document_number,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "service_number": self.service_number,
            "email": self.email,
            "display_name": self.display_name,
            "rank": self.rank,
            "unit": self.unit,
            "service_document_number": self.service_document_number,
            "role": self.role,
            "created_at": self.created_at.isoformat(),
        }
