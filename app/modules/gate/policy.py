"""
Request gate decision table.

Evaluated on every page request before anything renders. Pure: the caller
loads the session user and profiles row, this module only decides.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from app.modules.auth.schemas import AuthUser
from app.modules.routing.access import (
    ProfileAccess, has_client_access, has_talent_access,
    needs_admin_access, needs_client_access, needs_talent_access
)
from app.modules.routing.decide import (
    Continue, Decision, Redirect, decide_post_auth_redirect
)
from app.modules.routing.destination import determine_destination
from app.modules.routing.paths import (
    PATHS, PREFIXES, is_auth_route, is_bootstrap_safe_path, is_passthrough_path,
    is_path_or_child, is_public_path, login_path_with_return
)


@dataclass
class GateContext:
    user: Optional[AuthUser] = None
    profile: Optional[Dict[str, Any]] = None


def _is_valid_uuid(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _is_admin_client_profile_view(path: str, query: Mapping[str, str]) -> bool:
    """Admins may open a specific client's profile read-only via ?userId=<uuid>."""
    return path == PATHS.CLIENT_PROFILE and _is_valid_uuid(query.get("userId"))


def _own_destination_or_login(path: str, access: ProfileAccess) -> Decision:
    destination = determine_destination(access)
    if destination == path:
        # Already on the terminal we would send them to; break the loop
        return Redirect(PATHS.LOGIN)
    return Redirect(destination)


def _unassigned_allowlisted(path: str) -> bool:
    return (
        is_path_or_child(path, PREFIXES.ONBOARDING)
        or path == PATHS.CHOOSE_ROLE
        or is_public_path(path)
    )


def evaluate_request(path: str, query: Mapping[str, str], context: GateContext, query_string: str = "") -> Decision:
    """`query_string` is the raw query, carried verbatim into the login returnUrl."""
    if is_passthrough_path(path):
        return Continue()

    if context.user is None:
        if is_public_path(path) or is_auth_route(path):
            return Continue()
        return Redirect(login_path_with_return(path, query_string))

    profile = context.profile
    if profile is None:
        # Let the page/action repair the missing row
        if is_bootstrap_safe_path(path) or is_public_path(path):
            return Continue()
        return Redirect(login_path_with_return(path))

    if profile.get("is_suspended"):
        if path == PATHS.SUSPENDED:
            return Continue()
        return Redirect(PATHS.SUSPENDED)

    access = ProfileAccess.from_row(profile)
    signed_out = query.get("signedOut") == "true"
    return_url_raw = query.get("returnUrl")

    if access.account_type is None and not access.is_admin:
        if access.role in ("talent", "client"):
            # Inconsistent row: trust the role and send them to its terminal
            within_own_area = (
                needs_talent_access(path) if access.role == "talent" else needs_client_access(path)
            )
            if not (_unassigned_allowlisted(path) or is_auth_route(path) or within_own_area):
                return Redirect(determine_destination(access))
        else:
            if path == PATHS.TALENT_DASHBOARD or _unassigned_allowlisted(path):
                return Continue()
            if signed_out and path == PATHS.LOGIN:
                return Continue()
            return Redirect(PATHS.TALENT_DASHBOARD)

    if is_auth_route(path) or path == PATHS.HOME:
        decision = decide_post_auth_redirect(
            pathname=path,
            profile=access,
            return_url_raw=return_url_raw,
            signed_out=signed_out,
            fallback=PATHS.TALENT_DASHBOARD,
        )
        if isinstance(decision, Redirect):
            return decision
        return Continue()

    if needs_admin_access(path) and not access.is_admin:
        return _own_destination_or_login(path, access)

    if needs_client_access(path):
        if access.is_admin:
            if _is_admin_client_profile_view(path, query):
                return Continue()
            return Redirect(PATHS.ADMIN_DASHBOARD)
        if not has_client_access(access):
            return _own_destination_or_login(path, access)

    if needs_talent_access(path):
        if access.is_admin:
            return Redirect(PATHS.ADMIN_DASHBOARD)
        if not has_talent_access(access):
            return _own_destination_or_login(path, access)

    return Continue()
