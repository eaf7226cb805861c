from __future__ import annotations

from dataclasses import dataclass

from .finance.calculator.hourly_calculator import HourlyWageCalculator
from .finance.service import PaymentService, WageService
from .policies.service import PolicyService
from .policies.sqlalchemy_repository import SqlAlchemyPolicyRepository
from .principal.service import PrincipalDashboardService
from .reports.attendance_report import AttendanceReportService
from .reports.financial_report import FinancialReportService
from .schools.service import SchoolService
from .system.audit import AuditService
from .system.backup import BackupService
from .system.configuration import ConfigurationService
from .system.health import HealthService
from .system.metrics import SystemMetricsService
from .teaching.service import AssignmentService, TeachingService
from .users.bulk_service import BulkUserService
from .users.password_reset import PasswordResetService
from .users.service import AuthService, UserService
from .users.sqlalchemy_repository import SqlAlchemyUserRepository


@dataclass(frozen=True)
class Container:
    users_repo: SqlAlchemyUserRepository
    policies_repo: SqlAlchemyPolicyRepository

    audit_service: AuditService
    auth_service: AuthService
    user_service: UserService
    bulk_user_service: BulkUserService
    password_reset_service: PasswordResetService
    school_service: SchoolService
    assignment_service: AssignmentService
    teaching_service: TeachingService
    policy_service: PolicyService
    wage_service: WageService
    payment_service: PaymentService
    attendance_report_service: AttendanceReportService
    financial_report_service: FinancialReportService
    principal_dashboard_service: PrincipalDashboardService
    configuration_service: ConfigurationService
    backup_service: BackupService
    metrics_service: SystemMetricsService
    health_service: HealthService


def build_container(*, backup_dir: str) -> Container:
    users_repo = SqlAlchemyUserRepository()
    policies_repo = SqlAlchemyPolicyRepository()

    audit_service = AuditService()
    policy_service = PolicyService(policies_repo)
    configuration_service = ConfigurationService(audit_service)

    return Container(
        users_repo=users_repo,
        policies_repo=policies_repo,
        audit_service=audit_service,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, audit_service),
        bulk_user_service=BulkUserService(users_repo, audit_service),
        password_reset_service=PasswordResetService(users_repo, audit_service),
        school_service=SchoolService(audit_service),
        assignment_service=AssignmentService(audit_service),
        teaching_service=TeachingService(),
        policy_service=policy_service,
        wage_service=WageService(audit_service, calculator=HourlyWageCalculator()),
        payment_service=PaymentService(audit_service),
        attendance_report_service=AttendanceReportService(policy_service),
        financial_report_service=FinancialReportService(),
        principal_dashboard_service=PrincipalDashboardService(),
        configuration_service=configuration_service,
        backup_service=BackupService(audit_service, configuration_service, backup_dir=backup_dir),
        metrics_service=SystemMetricsService(),
        health_service=HealthService(),
    )
