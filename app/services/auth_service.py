from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import uuid4

from app.core.config import settings
from app.core.errors import Conflict, DuplicateIdentity, InvalidCredentials, InvalidRole, NotFound, WeakPassword
from app.core.rbac import Role, parse_roles, primary_role
from app.core.security import Clock, IssuedToken, PasswordHasher, TokenService, utcnow
from app.models.auth import AuthResponse, RegisterRequest, UserPublic, is_valid_email
from app.repositories.data_store import DataStore
from app.repositories.employees import EmployeeRepository
from app.repositories.revocation import RevocationStore
from app.repositories.roles import RoleRepository
from app.repositories.users import UserRepository
from app.services.audit_service import EventLogger
from app.services.notifications import NotificationSink


logger = logging.getLogger(__name__)

RESET_MAIL_SUBJECT = "Password Reset Request"


@dataclass(frozen=True)
class AuthResult:
    token: str
    expires_at: datetime
    identity: dict[str, Any]
    employee: Optional[dict[str, Any]] = None


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    def __init__(
        self,
        store: DataStore,
        event_logger: EventLogger,
        hasher: PasswordHasher,
        tokens: TokenService,
        notifier: NotificationSink,
        revocations: RevocationStore,
        clock: Clock = utcnow,
        reset_ttl: timedelta | None = None,
        password_min_length: int | None = None,
    ) -> None:
        self.store = store
        self.users = UserRepository(store)
        self.roles = RoleRepository(store)
        self.employees = EmployeeRepository(store)
        self.event_logger = event_logger
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.revocations = revocations
        self.clock = clock
        self.reset_ttl = reset_ttl or timedelta(minutes=settings.reset_token_expire_minutes)
        self.password_min_length = password_min_length or settings.password_min_length
        # verified against when the identifier is unknown so both failure paths cost one hash check
        self._decoy_hash = hasher.hash(secrets.token_urlsafe(16))

        self.seed_roles()
        if settings.bootstrap_admin_username and settings.bootstrap_admin_password:
            self.seed_admin(
                settings.bootstrap_admin_username,
                settings.bootstrap_admin_password,
                settings.bootstrap_admin_email,
            )

    def _iso_now(self) -> str:
        return self.clock().isoformat()

    # -- bootstrap ---------------------------------------------------------

    def seed_roles(self) -> None:
        for role in Role:
            if self.roles.create_if_absent(role):
                logger.info("Created role %s", role.value)
            else:
                logger.debug("Role %s already exists", role.value)

    def seed_admin(self, username: str, password: str, email: str | None = None) -> bool:
        if self.users.find_by_username(username):
            logger.debug("Bootstrap admin %s already exists", username)
            return False
        if email and self.users.find_by_email(email):
            logger.warning("Bootstrap admin email %s already in use; creating %s without one", email, username)
            email = None
        self._create_identity(
            username=username,
            hashed_password=self.hasher.hash(password),
            email=email,
            roles={Role.ADMIN},
            employee=None,
        )
        logger.info("Created bootstrap admin account %s", username)
        return True

    # -- login / registration ---------------------------------------------

    def login(self, identifier: str, password: str) -> AuthResult:
        user = self.users.find_by_username(identifier)
        if not user:
            self.hasher.verify(password, self._decoy_hash)
            logger.info("Login failed for %s: unknown identifier", identifier)
            self.event_logger.log_event("auth_login_failed", identifier, {"reason": "unknown_identifier"})
            raise InvalidCredentials()

        if not self.hasher.verify(password, user["hashed_password"]):
            logger.info("Login failed for %s: password mismatch", identifier)
            self.event_logger.log_event("auth_login_failed", identifier, {"reason": "password_mismatch"})
            raise InvalidCredentials()

        result = self._authenticated(user)
        self.event_logger.log_event("auth_login", identifier, {"roles": user["roles"]})
        return result

    def register(self, request: RegisterRequest) -> AuthResult:
        self._check_password(request.password)

        roles = parse_roles(request.roles)
        unknown = {r.value for r in roles} - self.roles.names()
        if unknown:
            raise InvalidRole(f"Role(s) not provisioned: {', '.join(sorted(unknown))}")

        hashed_password = self.hasher.hash(request.password)

        with self.store.lock:
            if self.users.find_by_username(request.identifier):
                logger.info("Registration rejected for %s: identifier taken", request.identifier)
                raise DuplicateIdentity()
            if request.email and self.users.find_by_email(request.email):
                logger.info("Registration rejected for %s: email already in use", request.identifier)
                raise DuplicateIdentity("An account with this email address already exists")

            employee: dict[str, Any] | None = None
            if request.wants_employee():
                if self.employees.find_by_number(request.employee_number):
                    raise DuplicateIdentity("An employee with this employee number already exists")
                employee = {
                    "id": f"emp-{uuid4().hex[:10]}",
                    "name": request.name,
                    "employee_number": request.employee_number,
                    "department": request.department,
                    "position": request.position,
                    "contact_info": request.contact_info,
                    "start_date": request.start_date.isoformat() if request.start_date else None,
                    "created_at": self._iso_now(),
                }

            user = self._create_identity(
                username=request.identifier,
                hashed_password=hashed_password,
                email=request.email,
                roles=roles,
                employee=employee,
            )

        logger.info("Registered %s with roles %s", user["username"], ",".join(user["roles"]))
        self.event_logger.log_event(
            "auth_register",
            user["username"],
            {"roles": user["roles"], "employee_id": user.get("employee_id")},
        )
        return self._authenticated(user)

    def _create_identity(
        self,
        username: str,
        hashed_password: str,
        email: str | None,
        roles: set[Role],
        employee: dict[str, Any] | None,
    ) -> dict[str, Any]:
        now = self._iso_now()
        with self.store.lock:
            if employee is not None:
                self.employees.save(employee)
            return self.users.save(
                {
                    "user_id": f"u-{uuid4().hex[:10]}",
                    "username": username,
                    "email": email,
                    "hashed_password": hashed_password,
                    "employee_id": employee["id"] if employee else None,
                    "roles": sorted(r.value for r in roles),
                    "reset_token_hash": None,
                    "reset_token_expires_at": None,
                    "created_at": now,
                    "updated_at": now,
                }
            )

    def _authenticated(self, user: dict[str, Any]) -> AuthResult:
        issued: IssuedToken = self.tokens.issue(user)
        employee = self.employees.find_by_id(user["employee_id"]) if user.get("employee_id") else None
        return AuthResult(token=issued.token, expires_at=issued.expires_at, identity=user, employee=employee)

    def _check_password(self, password: str | None) -> None:
        if password is None or len(password) < self.password_min_length:
            raise WeakPassword(f"Password must be at least {self.password_min_length} characters")

    def _is_strong_enough(self, password: str | None) -> bool:
        try:
            self._check_password(password)
        except WeakPassword:
            return False
        return True

    # -- password lifecycle -----------------------------------------------

    def change_password(self, identifier: str, current_password: str, new_password: str) -> bool:
        if not self._is_strong_enough(new_password):
            logger.info("Password change for %s rejected: new password too short", identifier)
            return False

        user = self.users.find_by_username(identifier)
        if not user:
            logger.info("Password change for %s rejected: unknown identifier", identifier)
            return False
        if not self.hasher.verify(current_password, user["hashed_password"]):
            logger.info("Password change for %s rejected: current password mismatch", identifier)
            return False

        new_hash = self.hasher.hash(new_password)
        with self.store.lock:
            fresh = self.users.find_by_id(user["user_id"])
            if not fresh or fresh["hashed_password"] != user["hashed_password"]:
                logger.warning("Password change for %s lost a race with another update", identifier)
                return False
            fresh["hashed_password"] = new_hash
            fresh["updated_at"] = self._iso_now()
            self.users.save(fresh)

        self.event_logger.log_event("password_changed", identifier)
        return True

    def initiate_reset(self, email: str) -> bool:
        """Issue a single-use reset token and mail it.

        The return value is for internal use only; the HTTP layer answers
        identically either way.
        """
        if not is_valid_email(email):
            logger.info("Password reset requested with a malformed email address")
            return False

        user = self.users.find_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email %s", email)
            return False

        token = secrets.token_urlsafe(32)
        expires_at = self.clock() + self.reset_ttl
        with self.store.lock:
            fresh = self.users.find_by_id(user["user_id"])
            if not fresh:
                return False
            fresh["reset_token_hash"] = _hash_reset_token(token)
            fresh["reset_token_expires_at"] = expires_at.isoformat()
            fresh["updated_at"] = self._iso_now()
            self.users.save(fresh)

        self.event_logger.log_event(
            "password_reset_requested",
            user["username"],
            {"expires_at": expires_at.isoformat()},
        )

        link = f"{settings.reset_url_base}?token={token}"
        body = (
            f"To reset your password, click the link below (valid for "
            f"{int(self.reset_ttl.total_seconds() // 60)} minutes):\n{link}"
        )
        try:
            self.notifier.send(email, RESET_MAIL_SUBJECT, body)
        except Exception:
            logger.exception("Reset mail for %s could not be delivered", user["username"])
        return True

    def reset_password(self, token: str, new_password: str) -> bool:
        if not token or not self._is_strong_enough(new_password):
            return False

        token_hash = _hash_reset_token(token)
        user = self.users.find_by_reset_token_hash(token_hash)
        if not user or self._reset_expired(user):
            logger.info("Password reset rejected: unknown or expired token")
            return False

        new_hash = self.hasher.hash(new_password)
        with self.store.lock:
            fresh = self.users.find_by_reset_token_hash(token_hash)
            if not fresh or self._reset_expired(fresh):
                return False
            fresh["hashed_password"] = new_hash
            fresh["reset_token_hash"] = None
            fresh["reset_token_expires_at"] = None
            fresh["updated_at"] = self._iso_now()
            self.users.save(fresh)

        self.event_logger.log_event("password_reset", fresh["username"])
        return True

    def _reset_expired(self, user: dict[str, Any]) -> bool:
        raw = user.get("reset_token_expires_at")
        if not raw:
            return True
        return self.clock() >= datetime.fromisoformat(raw)

    # -- sessions ----------------------------------------------------------

    def logout(self, token: str) -> bool:
        validation = self.tokens.validate(token)
        if not validation.ok or not validation.claims.get("jti"):
            return False
        expires_at = datetime.fromtimestamp(validation.claims["exp"], tz=timezone.utc)
        self.revocations.revoke(validation.claims["jti"], expires_at)
        self.event_logger.log_event("auth_logout", validation.claims["sub"])
        return True

    # -- views -------------------------------------------------------------

    def as_public(self, user: dict[str, Any]) -> UserPublic:
        return UserPublic(
            user_id=user["user_id"],
            username=user["username"],
            email=user.get("email"),
            roles=user.get("roles", []),
            primary_role=primary_role(user.get("roles", [])),
            employee_id=user.get("employee_id"),
        )

    def as_auth_response(self, result: AuthResult) -> AuthResponse:
        roles = result.identity.get("roles", [])
        return AuthResponse(
            access_token=result.token,
            expires_at=result.expires_at,
            username=result.identity["username"],
            roles=roles,
            primary_role=primary_role(roles),
            employee_id=result.employee["id"] if result.employee else None,
            employee_number=result.employee["employee_number"] if result.employee else None,
        )

    def list_users(self) -> list[UserPublic]:
        return [self.as_public(u) for u in self.users.list()]

    def update_profile(self, username: str, email: Optional[str]) -> dict[str, Any]:
        with self.store.lock:
            user = self.users.find_by_username(username)
            if not user:
                raise NotFound("User not found")
            if email:
                holder = self.users.find_by_email(email)
                if holder and holder["user_id"] != user["user_id"]:
                    raise Conflict("Email address already in use by another account")
            if email is not None:
                user["email"] = email or None
                user["updated_at"] = self._iso_now()
                user = self.users.save(user)
        self.event_logger.log_event("profile_updated", username, {"email_set": bool(user.get("email"))})
        return user
