from .health import health_bp
from .booking import booking_bp
from .admin import admin_bp
from .audit_logs import audit_bp
from .profile import profile_bp
from .cron import cron_bp
