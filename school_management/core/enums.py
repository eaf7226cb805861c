from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    PRINCIPAL = "PRINCIPAL"


class PolicyScope(str, Enum):
    """Where an attendance policy applies, from widest to narrowest."""

    GLOBAL = "GLOBAL"
    SCHOOL = "SCHOOL"
    CLASS = "CLASS"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class PaymentStatus(str, Enum):
    """Settlement state shared by teacher wages and school payments."""

    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    BULK_OPERATION = "BULK_OPERATION"


class AuditSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ConfigType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    JSON = "JSON"


class BackupStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class MetricType(str, Enum):
    SYSTEM = "SYSTEM"
    DATABASE = "DATABASE"
    APPLICATION = "APPLICATION"


class BulkOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DEACTIVATE = "deactivate"
    ACTIVATE = "activate"
    DELETE = "delete"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    XLSX = "xlsx"
