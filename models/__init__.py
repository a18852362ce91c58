from .db import db
from .user import Profile
from .audit_log import AuditLog
from .booking import Booking
from .block_period import BlockPeriod
from .notification import Notification
