"""FastAPI dependencies for institution resolution and tenant context.

Authentication happens upstream: the authenticating layer stores the
principal id on ``request.state.user_id`` (and optionally a session id on
``request.state.session_id``).
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional

from fastapi import Request

from ..config.constants import RequestKeys
from ..features.access.entities.audit import RequestMetadata
from ..features.access.services.access_validator import raise_for_decision
from ..features.roles.entities.permission import PermissionContext
from ..features.tenancy.entities.context import TenantContext

if TYPE_CHECKING:
    from ..container import CampusServices


logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

PermissionContextFactory = Callable[[Request, str, TenantContext], Awaitable[PermissionContext]]


def request_metadata(request: Request) -> RequestMetadata:
    return RequestMetadata(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


async def resolve_institution_id(
    request: Request,
    header: str = RequestKeys.INSTITUTION_HEADER,
    query_param: str = RequestKeys.INSTITUTION_QUERY_PARAM,
    body_field: str = RequestKeys.INSTITUTION_BODY_FIELD,
) -> Optional[str]:
    """Institution id from the header, else the query string, else a JSON body."""
    institution_id = request.headers.get(header)
    if institution_id:
        return institution_id

    institution_id = request.query_params.get(query_param)
    if institution_id:
        return institution_id

    body = await _json_body(request)
    if body.get(body_field):
        return str(body[body_field])
    return None


async def _json_body(request: Request) -> Dict[str, Any]:
    """The request's JSON object body, or an empty dict when there is none."""
    if request.method not in _BODY_METHODS:
        return {}
    if "application/json" not in request.headers.get("content-type", ""):
        return {}

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _first(*values: Any) -> Optional[str]:
    for value in values:
        if value:
            return str(value)
    return None


async def permission_context_from_request(
    request: Request, user_id: str, context: TenantContext
) -> PermissionContext:
    """Fill the ownership facts of a permission check from path params and the JSON body.

    ``userId`` names the resource owner, ``id`` or ``userId`` the profile
    being viewed and ``teacherId`` the course teacher. Snake-case names
    (``user_id``, ``teacher_id``) are accepted as well.
    """
    params = request.path_params
    body = await _json_body(request)
    return PermissionContext(
        user_id=user_id,
        institution_id=context.institution_id,
        resource_owner_id=_first(
            params.get("userId"), params.get("user_id"), body.get("userId"), body.get("user_id")
        ),
        profile_user_id=_first(
            params.get("id"), params.get("userId"), params.get("user_id")
        ),
        course_teacher_id=_first(
            params.get("teacherId"), params.get("teacher_id"), body.get("teacherId"), body.get("teacher_id")
        ),
    )


class TenantContextDependency:
    """Dependency establishing the TenantContext for a request.

    Usage:
        tenant_context = TenantContextDependency(services, resource="course", action="read")

        @app.get("/courses")
        async def list_courses(context: TenantContext = Depends(tenant_context)):
            ...

    When ``resource`` and ``action`` are given the principal's role is checked
    too. ``permission_context`` supplies the ownership facts that conditioned
    grants test; it defaults to permission_context_from_request.
    """

    def __init__(
        self,
        services: "CampusServices",
        resource: Optional[str] = None,
        action: Optional[str] = None,
        permission_context: PermissionContextFactory = permission_context_from_request,
    ):
        self.services = services
        self.resource = resource
        self.action = action
        self.permission_context = permission_context

    async def __call__(self, request: Request) -> TenantContext:
        settings = self.services.settings
        validator = self.services.access_validator
        metadata = request_metadata(request)
        resource = self.resource or "institution"
        action = self.action or "access"

        user_id = getattr(request.state, "user_id", None)
        if not user_id:
            decision = await validator.validate_request_context(None, None, resource, action, request=metadata)
            raise_for_decision(decision)

        institution_id = await resolve_institution_id(
            request,
            header=settings.institution_header,
            query_param=settings.institution_query_param,
            body_field=settings.institution_body_field,
        )
        if not institution_id:
            decision = await validator.validate_request_context(user_id, None, resource, action, request=metadata)
            raise_for_decision(decision)

        decision = await validator.check_institution_access(user_id, institution_id, request=metadata)
        raise_for_decision(decision, details={"institution_id": institution_id})

        session_id = getattr(request.state, "session_id", None) or user_id
        context = await self.services.context_manager.establish(session_id, user_id, institution_id)

        if self.resource and self.action:
            permission_context = await self.permission_context(request, user_id, context)
            decision = await validator.validate_request_context(
                user_id,
                context,
                self.resource,
                self.action,
                permission_context=permission_context,
                request=metadata,
            )
            raise_for_decision(decision)

        request.state.tenant_context = context
        return context
