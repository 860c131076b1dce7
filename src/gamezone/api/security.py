"""Request dependencies: the service container and the calling principal."""

from fastapi import Depends, Header, Request

from gamezone.errors import Forbidden, Unauthorized
from gamezone.identity.access import Principal
from gamezone.services import Services
from gamezone.utils.logging import add_context


def get_services(request: Request) -> Services:
    return request.app.state.services


def current_principal(
    authorization: str | None = Header(None),
    services: Services = Depends(get_services),
) -> Principal:
    """Resolve ``Authorization: Bearer <token>`` to a principal."""
    if not authorization:
        raise Unauthorized("No token, authorization denied")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("No token, authorization denied")

    principal = services.accounts.principal_for(token.strip())
    add_context(user_id=principal.user_id)
    return principal


def admin_principal(principal: Principal = Depends(current_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden("Admin access required")
    return principal
