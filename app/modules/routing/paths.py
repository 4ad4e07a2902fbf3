"""
Route table shared by the request gate, boot state and the post-auth redirect decision.
"""

from typing import Tuple
from urllib.parse import urlencode


class PATHS:
    # Public
    HOME = "/"
    ABOUT = "/about"
    GIGS = "/gigs"
    TALENT_LANDING = "/talent"
    SUSPENDED = "/suspended"

    # Client application flow (Career Builder)
    CLIENT_SIGNUP = "/client/signup"
    CLIENT_APPLY = "/client/apply"
    CLIENT_APPLY_SUCCESS = "/client/apply/success"
    CLIENT_APPLICATION_STATUS = "/client/application-status"

    # Auth
    LOGIN = "/login"
    RESET_PASSWORD = "/reset-password"
    UPDATE_PASSWORD = "/update-password"
    VERIFICATION_PENDING = "/verification-pending"
    CHOOSE_ROLE = "/choose-role"

    # Onboarding
    ONBOARDING = "/onboarding"

    # Dashboards (terminals)
    TALENT_DASHBOARD = "/talent/dashboard"
    CLIENT_DASHBOARD = "/client/dashboard"
    ADMIN_DASHBOARD = "/admin/dashboard"

    # Private talent surfaces
    TALENT_PROFILE = "/talent/profile"
    TALENT_SUBSCRIBE = "/talent/subscribe"

    # Client profile completion (promoted clients finish here, not in /onboarding)
    CLIENT_PROFILE = "/client/profile"


class PREFIXES:
    TALENT = "/talent/"
    GIGS = "/gigs/"
    CLIENT = "/client/"
    ADMIN = "/admin/"
    TALENT_SETTINGS = "/talent/settings"
    ONBOARDING = "/onboarding"
    SETTINGS = "/settings"


ONBOARDING_PATH = PATHS.ONBOARDING

PUBLIC_ROUTES: Tuple[str, ...] = (
    PATHS.HOME,
    PATHS.ABOUT,
    PATHS.GIGS,
    PATHS.TALENT_LANDING,
    PATHS.SUSPENDED,
    PATHS.CLIENT_SIGNUP,
    PATHS.CLIENT_APPLY,
    PATHS.CLIENT_APPLY_SUCCESS,
    PATHS.CLIENT_APPLICATION_STATUS,
)

PUBLIC_ROUTE_PREFIXES: Tuple[str, ...] = (PREFIXES.TALENT, PREFIXES.GIGS)

AUTH_ROUTES: Tuple[str, ...] = (
    PATHS.LOGIN,
    PATHS.RESET_PASSWORD,
    PATHS.UPDATE_PASSWORD,
    PATHS.VERIFICATION_PENDING,
    PATHS.CHOOSE_ROLE,
)

PRIVATE_TALENT_ROOTS: Tuple[str, ...] = (
    PATHS.TALENT_DASHBOARD,
    PATHS.TALENT_PROFILE,
    PREFIXES.TALENT_SETTINGS,
    PATHS.TALENT_SUBSCRIBE,
)

PUBLIC_CLIENT_PATHS: Tuple[str, ...] = (
    PATHS.CLIENT_APPLY,
    PATHS.CLIENT_APPLY_SUCCESS,
    PATHS.CLIENT_APPLICATION_STATUS,
    PATHS.CLIENT_SIGNUP,
)

# Signed-in users without a profiles row may stay here so the page/action can repair it
BOOTSTRAP_SAFE_ROOTS: Tuple[str, ...] = (
    PREFIXES.ONBOARDING,
    PREFIXES.SETTINGS,
    PATHS.CHOOSE_ROLE,
    PATHS.LOGIN,
    PATHS.VERIFICATION_PENDING,
    PATHS.TALENT_DASHBOARD,
)

PASSTHROUGH_PREFIXES: Tuple[str, ...] = (
    "/_next",
    "/favicon",
    "/images",
    "/static",
    "/api/",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
    "/ready",
)


def is_path_or_child(pathname: str, root: str) -> bool:
    return pathname == root or pathname.startswith(f"{root}/")


def is_public_route(pathname: str) -> bool:
    return pathname in PUBLIC_ROUTES


def is_auth_route(pathname: str) -> bool:
    return pathname in AUTH_ROUTES


def is_private_talent_path(pathname: str) -> bool:
    return any(is_path_or_child(pathname, root) for root in PRIVATE_TALENT_ROOTS)


def is_public_path(pathname: str) -> bool:
    """Safe to remain on while signed out: public routes plus /talent/<slug> and /gigs/<id>."""
    if is_public_route(pathname):
        return True
    if not any(pathname.startswith(p) for p in PUBLIC_ROUTE_PREFIXES):
        return False
    if pathname.startswith(PREFIXES.TALENT):
        return not is_private_talent_path(pathname)
    return True


def is_bootstrap_safe_path(pathname: str) -> bool:
    return any(is_path_or_child(pathname, root) for root in BOOTSTRAP_SAFE_ROOTS)


def is_passthrough_path(pathname: str) -> bool:
    """Assets, API routes and service probes bypass the gate entirely."""
    if pathname == "/api":
        return True
    if any(pathname.startswith(p) for p in PASSTHROUGH_PREFIXES):
        return True
    return "." in pathname


def login_path_with_return(pathname: str, query_string: str = "") -> str:
    target = f"{pathname}?{query_string}" if query_string else pathname
    return f"{PATHS.LOGIN}?{urlencode({'returnUrl': target})}"
