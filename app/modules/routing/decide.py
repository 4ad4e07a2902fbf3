"""
Post-auth redirect decision shared by the request gate, the auth callback and boot state.

Navigation is returned as a value (Continue / Redirect); nothing here raises,
touches the database or builds HTTP responses.
"""

from dataclasses import dataclass
from typing import Optional, Union
from app.modules.routing.access import ProfileAccess, can_access_target, is_routable
from app.modules.routing.destination import determine_destination
from app.modules.routing.paths import PATHS, is_auth_route


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class Redirect:
    to: str


Decision = Union[Continue, Redirect]


def safe_return_url(value: Optional[str]) -> Optional[str]:
    """Root-relative paths only; anything that could leave the site is treated as absent."""
    if not value:
        return None
    if not value.startswith("/") or "://" in value:
        return None
    # "//host" and "/\host" are both protocol-relative to browsers
    if value.startswith("//") or value.startswith("/\\"):
        return None
    return value


def _redirect_unless_here(pathname: str, target: str) -> Decision:
    if target == pathname:
        return Continue()
    return Redirect(target)


def decide_post_auth_redirect(
    pathname: str,
    profile: Optional[ProfileAccess],
    return_url_raw: Optional[str] = None,
    signed_out: bool = False,
    fallback: str = PATHS.TALENT_DASHBOARD,
) -> Decision:
    # Let the login/choose-role UI render while cookies are still clearing
    if signed_out and pathname in (PATHS.LOGIN, PATHS.CHOOSE_ROLE):
        return Continue()

    return_url = safe_return_url(return_url_raw)
    destination = determine_destination(profile, fallback=fallback)

    if is_auth_route(pathname):
        # returnUrl is only honoured once role/account_type have resolved
        if return_url and is_routable(profile) and can_access_target(profile, return_url):
            return _redirect_unless_here(pathname, return_url)
        return _redirect_unless_here(pathname, destination)

    if pathname == PATHS.HOME:
        return _redirect_unless_here(pathname, destination)

    return Continue()
