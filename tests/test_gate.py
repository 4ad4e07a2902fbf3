import pytest
from app.modules.gate.policy import GateContext, evaluate_request
from app.modules.routing.decide import Continue, Redirect
from app.modules.routing.paths import PATHS
from tests.fakes import make_user

ADMIN_ID = "0b7c3a8e-6f1d-4c4b-9a53-2f3d8e7b1c11"
CLIENT_ID = "5f0e2b6a-1d9c-4e8f-b7a2-9c3d4e5f6a7b"


def ctx(role=None, account_type=None, suspended=False, profile=True):
    if not profile:
        return GateContext(user=make_user())
    return GateContext(
        user=make_user(),
        profile={"role": role, "account_type": account_type, "is_suspended": suspended},
    )


class TestSignedOut:
    @pytest.mark.parametrize("path", ["/", "/about", "/gigs", "/gigs/123", "/talent/jane", "/login", "/client/apply"])
    def test_public_and_auth_paths_continue(self, path):
        assert evaluate_request(path, {}, GateContext()) == Continue()

    def test_private_path_redirects_to_login_with_return(self):
        decision = evaluate_request("/talent/dashboard", {"tab": "gigs"}, GateContext(), "tab=gigs")
        assert decision == Redirect("/login?returnUrl=%2Ftalent%2Fdashboard%3Ftab%3Dgigs")

    def test_repeated_query_params_survive_in_return_url(self):
        decision = evaluate_request("/talent/dashboard", {"tag": "b"}, GateContext(), "tag=a&tag=b")
        assert decision == Redirect("/login?returnUrl=%2Ftalent%2Fdashboard%3Ftag%3Da%26tag%3Db")

    def test_passthrough(self):
        assert evaluate_request("/api/boot", {}, GateContext()) == Continue()
        assert evaluate_request("/logo.png", {}, GateContext()) == Continue()


class TestMissingProfile:
    @pytest.mark.parametrize("path", ["/onboarding", "/choose-role", "/talent/dashboard", "/settings/account", "/login"])
    def test_bootstrap_safe_continue(self, path):
        assert evaluate_request(path, {}, ctx(profile=False)) == Continue()

    def test_other_paths_go_to_login(self):
        decision = evaluate_request("/client/dashboard", {}, ctx(profile=False))
        assert decision == Redirect("/login?returnUrl=%2Fclient%2Fdashboard")


class TestSuspended:
    def test_redirects_to_suspended(self):
        assert evaluate_request("/talent/dashboard", {}, ctx("talent", "talent", suspended=True)) == Redirect(PATHS.SUSPENDED)

    def test_suspended_page_renders(self):
        assert evaluate_request(PATHS.SUSPENDED, {}, ctx("talent", "talent", suspended=True)) == Continue()


class TestUnassigned:
    def test_known_role_goes_to_its_dashboard(self):
        assert evaluate_request("/talent/dashboard", {}, ctx("client", "unassigned")) == Redirect(PATHS.CLIENT_DASHBOARD)

    def test_known_role_keeps_onboarding(self):
        assert evaluate_request("/onboarding", {}, ctx("talent", "unassigned")) == Continue()

    def test_no_role_lands_on_talent_dashboard(self):
        assert evaluate_request("/client/dashboard", {}, ctx(None, None)) == Redirect(PATHS.TALENT_DASHBOARD)
        assert evaluate_request(PATHS.TALENT_DASHBOARD, {}, ctx(None, None)) == Continue()
        assert evaluate_request(PATHS.CHOOSE_ROLE, {}, ctx(None, "unassigned")) == Continue()


class TestRoleGating:
    def test_login_sends_onboarded_user_to_dashboard(self):
        assert evaluate_request("/login", {}, ctx("client", "client")) == Redirect(PATHS.CLIENT_DASHBOARD)

    def test_login_honours_return_url(self):
        assert evaluate_request("/login", {"returnUrl": "/gigs/9"}, ctx("talent", "talent")) == Redirect("/gigs/9")

    def test_signed_out_login_renders(self):
        assert evaluate_request("/login", {"signedOut": "true"}, ctx("talent", "talent")) == Continue()

    def test_home_redirects_to_dashboard(self):
        assert evaluate_request("/", {}, ctx("talent", "talent")) == Redirect(PATHS.TALENT_DASHBOARD)

    def test_talent_kept_out_of_admin_and_client(self):
        assert evaluate_request("/admin/users", {}, ctx("talent", "talent")) == Redirect(PATHS.TALENT_DASHBOARD)
        assert evaluate_request("/client/dashboard", {}, ctx("talent", "talent")) == Redirect(PATHS.TALENT_DASHBOARD)

    def test_client_kept_out_of_talent_area(self):
        assert evaluate_request("/talent/settings/billing", {}, ctx("client", "client")) == Redirect(PATHS.CLIENT_DASHBOARD)

    def test_own_area_continues(self):
        assert evaluate_request("/client/dashboard", {}, ctx("client", "client")) == Continue()
        assert evaluate_request("/talent/profile", {}, ctx("talent", "talent")) == Continue()
        assert evaluate_request("/admin/dashboard", {}, ctx("admin", None)) == Continue()

    def test_admin_kept_out_of_talent_area(self):
        assert evaluate_request("/talent/dashboard", {}, ctx("admin", None)) == Redirect(PATHS.ADMIN_DASHBOARD)


class TestAdminClientProfileView:
    def test_admin_with_valid_user_id_continues(self):
        decision = evaluate_request(PATHS.CLIENT_PROFILE, {"userId": CLIENT_ID}, ctx("admin", None))
        assert decision == Continue()

    @pytest.mark.parametrize("query", [{}, {"userId": "not-a-uuid"}, {"userId": ""}])
    def test_admin_without_valid_user_id_goes_to_admin_dashboard(self, query):
        decision = evaluate_request(PATHS.CLIENT_PROFILE, query, ctx("admin", None))
        assert decision == Redirect(PATHS.ADMIN_DASHBOARD)

    def test_carve_out_is_only_for_client_profile(self):
        decision = evaluate_request(PATHS.CLIENT_DASHBOARD, {"userId": CLIENT_ID}, ctx("admin", None))
        assert decision == Redirect(PATHS.ADMIN_DASHBOARD)


class TestMiddleware:
    def seed(self, db, user_id, role, account_type="talent", **extra):
        db.rows("profiles").append({
            "id": user_id, "role": role, "account_type": account_type,
            "display_name": "Some Name", "email_verified": True, "is_suspended": False, **extra,
        })
        return db.add_user(user_id, first_name="Some", last_name="Name")

    def test_signed_out_redirect(self, client):
        response = client.get("/talent/dashboard")
        assert response.status_code == 307
        assert response.headers["location"] == "/login?returnUrl=%2Ftalent%2Fdashboard"

    def test_signed_out_redirect_keeps_raw_query(self, client):
        response = client.get("/talent/dashboard?tag=a&tag=b")
        assert response.status_code == 307
        assert response.headers["location"] == "/login?returnUrl=%2Ftalent%2Fdashboard%3Ftag%3Da%26tag%3Db"

    def test_public_page_renders(self, client):
        response = client.get("/login")
        assert response.status_code == 200
        assert response.json()["page"] == "login"
        assert response.headers["cache-control"] == "no-store"

    def test_api_is_not_gated(self, client):
        assert client.get("/api/boot").status_code == 401

    def test_admin_client_profile_carve_out(self, client, fake_db):
        token = self.seed(fake_db, ADMIN_ID, "admin", account_type="unassigned")
        fake_db.rows("client_profiles").append({"user_id": CLIENT_ID, "company_name": "Acme"})
        headers = {"Authorization": f"Bearer {token}"}

        response = client.get(f"/client/profile?userId={CLIENT_ID}", headers=headers)
        assert response.status_code == 200
        assert response.json()["read_only"] is True
        assert response.json()["client_profile"]["company_name"] == "Acme"

        response = client.get("/client/profile", headers=headers)
        assert response.status_code == 307
        assert response.headers["location"] == PATHS.ADMIN_DASHBOARD

        response = client.get("/client/profile?userId=nope", headers=headers)
        assert response.headers["location"] == PATHS.ADMIN_DASHBOARD

    def test_suspended_user(self, client, fake_db):
        token = self.seed(fake_db, "user-s", "talent", is_suspended=True)
        response = client.get("/talent/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 307
        assert response.headers["location"] == PATHS.SUSPENDED

    def test_profile_query_error_fails_open(self, client, fake_db):
        token = fake_db.add_user("user-e")
        fake_db.fail("profiles", "select")
        response = client.get("/client/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 307
        assert response.headers["location"].startswith("/login?returnUrl=")

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["x-content-type-options"] == "nosniff"
