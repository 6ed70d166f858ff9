from health_wallet.models.user import User, Role
from health_wallet.models.report import Report
from health_wallet.models.vital import Vital
from health_wallet.models.permission import Permission

__all__ = ["User", "Role", "Report", "Vital", "Permission"]
