"""Common module — shared utilities for GROFAST."""

from grofast.common.audit import AuditTrail, create_audit_entry
from grofast.common.constants import (
    DEFAULT_CHANNELS,
    HOUR_SLOTS,
    MAX_LIST_LIMIT,
    MESSAGE_HISTORY_LIMIT,
    ChannelType,
    CheckInState,
    EmployeeRole,
    LeaveStatus,
    LeaveType,
    ReportRange,
    TaskPriority,
    TaskStatus,
)
from grofast.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from grofast.common.filters import (
    ListParams,
    apply_filters,
    apply_limit,
    apply_sorting,
    build_list_query,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "ChannelType",
    "CheckInState",
    "EmployeeRole",
    "LeaveStatus",
    "LeaveType",
    "ReportRange",
    "TaskPriority",
    "TaskStatus",
    "DEFAULT_CHANNELS",
    "HOUR_SLOTS",
    "MAX_LIST_LIMIT",
    "MESSAGE_HISTORY_LIMIT",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "ListParams",
    "apply_filters",
    "apply_limit",
    "apply_sorting",
    "build_list_query",
]
