from collections.abc import Callable
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from app.core.access import ANY_AUTHENTICATED, Principal, RoleRequirement
from app.core.rbac import Role
from app.services.container import Container


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def authorize(requirement: RoleRequirement) -> Callable[..., Principal]:
    def dependency(
        request: Request,
        token: Optional[str] = Depends(oauth2_scheme),
        container: Container = Depends(get_container),
    ) -> Principal:
        return container.access.authorize(request.state, token, requirement)

    return dependency


get_current_user = authorize(ANY_AUTHENTICATED)


def require_roles(allowed_roles: list[Role]) -> Callable[..., Principal]:
    return authorize(RoleRequirement.any_of(*allowed_roles))
