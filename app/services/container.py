from __future__ import annotations

from dataclasses import dataclass

from app.core.access import AccessDecisionLayer
from app.core.security import Clock, PasswordHasher, TokenService, utcnow
from app.repositories.data_store import DataStore
from app.repositories.revocation import RevocationStore
from app.repositories.users import UserRepository
from app.services.audit_service import EventLogger
from app.services.auth_service import AuthService
from app.services.employee_service import EmployeeService
from app.services.leave_service import LeaveService
from app.services.notifications import LoggingNotificationSink, NotificationSink


@dataclass
class Container:
    store: DataStore
    event_logger: EventLogger
    tokens: TokenService
    access: AccessDecisionLayer
    auth_service: AuthService
    employee_service: EmployeeService
    leave_service: LeaveService


def build_container(
    store: DataStore | None = None,
    event_logger: EventLogger | None = None,
    hasher: PasswordHasher | None = None,
    notifier: NotificationSink | None = None,
    clock: Clock = utcnow,
) -> Container:
    store = store or DataStore()
    event_logger = event_logger or EventLogger(clock=clock)
    revocations = RevocationStore()
    tokens = TokenService(clock=clock)

    auth_service = AuthService(
        store=store,
        event_logger=event_logger,
        hasher=hasher or PasswordHasher(),
        tokens=tokens,
        notifier=notifier or LoggingNotificationSink(),
        revocations=revocations,
        clock=clock,
    )
    return Container(
        store=store,
        event_logger=event_logger,
        tokens=tokens,
        access=AccessDecisionLayer(tokens=tokens, users=UserRepository(store), revocations=revocations),
        auth_service=auth_service,
        employee_service=EmployeeService(store=store, event_logger=event_logger, clock=clock),
        leave_service=LeaveService(store=store, event_logger=event_logger, clock=clock),
    )
