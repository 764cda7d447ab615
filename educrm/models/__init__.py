# Import models here so Alembic can discover them via metadata
from .base import Base  # noqa: F401
from .student import Student  # noqa: F401
from .university import University  # noqa: F401
from .user import StaffUser  # noqa: F401
from .follow_up import FollowUp  # noqa: F401
from .application import Application  # noqa: F401
from .invoice import Invoice  # noqa: F401
from .audit_log import AuditLog  # noqa: F401
