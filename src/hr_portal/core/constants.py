"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveCategory

EMPLOYEE_CODE_PREFIX = "EMP"
TASK_CODE_PREFIX = "TASK"
CODE_NUMBER_WIDTH = 3

# Yearly allotments created at onboarding. UNPAID carries no balance.
DEFAULT_LEAVE_ALLOTMENT = {
    LeaveCategory.SICK: 10,
    LeaveCategory.CASUAL: 12,
    LeaveCategory.EARNED: 15,
}

DEFAULT_START_PROGRESS = 25
MIN_PASSWORD_LENGTH = 6
DEFAULT_LIST_LIMIT = 200

BOOTSTRAP_ADMIN_CODE = "EMP001"
BOOTSTRAP_ADMIN_PASSWORD = "Admin@123"
BOOTSTRAP_ADMIN_EMAIL = "admin@hr-portal.local"
