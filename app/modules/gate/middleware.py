import logging
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import RedirectResponse
from typing import Callable, Optional
from app.core.dependencies import extract_access_token
from app.database.supabase_client import SupabaseClient, is_no_rows_error, maybe_row
from app.modules.auth.service import AuthService
from app.modules.gate.policy import GateContext, evaluate_request
from app.modules.routing.decide import Redirect
from app.modules.routing.paths import is_passthrough_path

logger = logging.getLogger(__name__)

GATE_PROFILE_COLUMNS = "role, account_type, is_suspended"


def load_gate_context(request: Request) -> GateContext:
    """Session user plus profiles row. Query errors fail open to the "no profile" branch."""
    token = extract_access_token(request)
    user = AuthService(SupabaseClient.get_client()).resolve_user(token)
    if user is None:
        return GateContext()

    try:
        result = SupabaseClient.get_user_client(token).table("profiles")\
            .select(GATE_PROFILE_COLUMNS)\
            .eq("id", user.id)\
            .maybe_single()\
            .execute()
        profile = maybe_row(result)
    except Exception as e:
        if not is_no_rows_error(e):
            logger.error(f"Gate profile query error for {user.id} on {request.url.path}: {e}")
        profile = None

    return GateContext(user=user, profile=profile)


class AccessGateMiddleware:
    """Per-request navigation gate in front of every page route."""

    def __init__(self, app, context_loader: Optional[Callable[[Request], GateContext]] = None):
        self.app = app
        self.context_loader = context_loader or load_gate_context

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or is_passthrough_path(scope["path"]):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        context = await run_in_threadpool(self.context_loader, request)
        decision = evaluate_request(request.url.path, request.query_params, context, request.url.query)

        if isinstance(decision, Redirect):
            logger.debug(f"Gate redirect {request.url.path} -> {decision.to}")
            response = RedirectResponse(decision.to, status_code=307)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
