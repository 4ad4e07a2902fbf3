import itertools
import pytest
from app.modules.routing.access import ProfileAccess
from app.modules.routing.decide import Continue, Redirect, decide_post_auth_redirect, safe_return_url
from app.modules.routing.destination import determine_destination
from app.modules.routing.paths import (
    PATHS, is_passthrough_path, is_public_path, login_path_with_return
)

DASHBOARDS = {PATHS.ADMIN_DASHBOARD, PATHS.CLIENT_DASHBOARD, PATHS.TALENT_DASHBOARD}


def access(role=None, account_type=None):
    return ProfileAccess.from_row({"role": role, "account_type": account_type})


class TestDetermineDestination:
    @pytest.mark.parametrize(
        "role,account_type",
        list(itertools.product(["admin", "client", "talent", None], ["client", "talent", "unassigned", None])),
    )
    def test_always_a_dashboard(self, role, account_type):
        assert determine_destination(access(role, account_type)) in DASHBOARDS

    @pytest.mark.parametrize("account_type", ["client", "talent", "unassigned", None])
    def test_admin_wins(self, account_type):
        assert determine_destination(access("admin", account_type)) == PATHS.ADMIN_DASHBOARD

    def test_client_by_role_or_account_type(self):
        assert determine_destination(access("client", None)) == PATHS.CLIENT_DASHBOARD
        assert determine_destination(access(None, "client")) == PATHS.CLIENT_DASHBOARD
        # Role wins over account_type
        assert determine_destination(access("client", "talent")) == PATHS.CLIENT_DASHBOARD

    def test_unknown_user_falls_back_to_talent(self):
        assert determine_destination(None) == PATHS.TALENT_DASHBOARD
        assert determine_destination(access(None, "unassigned")) == PATHS.TALENT_DASHBOARD


class TestSafeReturnUrl:
    @pytest.mark.parametrize("value", [
        None, "", "gigs", "https://evil.com", "http://evil.com/talent", "//evil.com",
        "//evil.com/path", "/\\evil.com", "javascript:alert(1)", "/redirect?to=https://evil.com",
    ])
    def test_rejects_offsite(self, value):
        assert safe_return_url(value) is None

    @pytest.mark.parametrize("value", ["/gigs", "/gigs/123?x=1", "/talent/profile", "/a"])
    def test_keeps_root_relative(self, value):
        assert safe_return_url(value) == value


class TestDecidePostAuthRedirect:
    @pytest.mark.parametrize("value", ["", "https://evil.com", "//evil.com", "evil.com", "/\\evil.com"])
    def test_unsafe_return_url_never_used(self, value):
        decision = decide_post_auth_redirect(PATHS.LOGIN, access("talent", "talent"), return_url_raw=value)
        assert decision == Redirect(PATHS.TALENT_DASHBOARD)

    @pytest.mark.parametrize("value", ["/gigs", "/gigs/42", "/talent/profile", "/about?tab=1"])
    def test_safe_return_url_used_verbatim(self, value):
        decision = decide_post_auth_redirect(PATHS.LOGIN, access("talent", "talent"), return_url_raw=value)
        assert decision == Redirect(value)

    def test_return_url_needs_access(self):
        decision = decide_post_auth_redirect(PATHS.LOGIN, access("talent", "talent"), return_url_raw="/admin/users")
        assert decision == Redirect(PATHS.TALENT_DASHBOARD)

    def test_return_url_ignored_until_account_type_resolves(self):
        decision = decide_post_auth_redirect(PATHS.LOGIN, access("talent", "unassigned"), return_url_raw="/gigs")
        assert decision == Redirect(PATHS.TALENT_DASHBOARD)

    def test_signed_out_login_renders(self):
        decision = decide_post_auth_redirect(PATHS.LOGIN, access("talent", "talent"), signed_out=True)
        assert decision == Continue()

    @pytest.mark.parametrize("role,account_type,dashboard", [
        ("admin", None, PATHS.ADMIN_DASHBOARD),
        ("client", "client", PATHS.CLIENT_DASHBOARD),
        ("talent", "talent", PATHS.TALENT_DASHBOARD),
    ])
    def test_no_redirect_to_current_path(self, role, account_type, dashboard):
        profile = access(role, account_type)
        assert decide_post_auth_redirect(PATHS.LOGIN, profile) == Redirect(dashboard)
        # Visiting the return target itself from an auth route is a no-op
        assert decide_post_auth_redirect(PATHS.LOGIN, profile, return_url_raw=PATHS.LOGIN) == Continue()

    def test_home_goes_to_destination(self):
        assert decide_post_auth_redirect(PATHS.HOME, access("client", "client")) == Redirect(PATHS.CLIENT_DASHBOARD)

    def test_other_paths_continue(self):
        assert decide_post_auth_redirect("/gigs", access("talent", "talent")) == Continue()


class TestPaths:
    def test_talent_slug_is_public_but_dashboard_is_not(self):
        assert is_public_path("/talent/jane-doe")
        assert not is_public_path("/talent/dashboard")
        assert not is_public_path("/talent/settings/billing")

    def test_passthrough(self):
        assert is_passthrough_path("/api/boot")
        assert is_passthrough_path("/favicon.ico")
        assert is_passthrough_path("/health")
        assert not is_passthrough_path("/talent/dashboard")

    def test_login_path_keeps_query(self):
        assert login_path_with_return("/client/profile", "userId=1") == "/login?returnUrl=%2Fclient%2Fprofile%3FuserId%3D1"
