from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from idp.api.views import render_error, render_form
from idp.models.authorization_request import AuthorizationRequest
from idp.services.authorize_service import AuthorizeService, FormView, Redirect
from idp.services.errors import InternalError, InvalidRequest

# ---------------------------------------------------------------------------
# Authorization endpoint — OAuth 2.0 / OIDC authorization code grant
#
#   GET  /authorize  — render the sign-in (or sign-up, prompt=create) form
#   POST /authorize  — authenticate or register, then 302 back with a code
#
# Any other method renders the form like GET.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


def get_authorize_service(request: Request) -> AuthorizeService:
    return request.app.state.authorize_service


def _form_action(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _render(request: Request, view: FormView) -> HTMLResponse:
    page = render_form(
        sign_up=view.sign_up,
        action=_form_action(request),
        email=view.email,
        password=view.password,
        error=view.error,
    )
    return HTMLResponse(page, status_code=view.status_code)


@router.api_route(
    "/authorize",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=None,
)
async def authorize(request: Request) -> HTMLResponse | RedirectResponse:
    service = get_authorize_service(request)
    params = AuthorizationRequest.from_query(request.query_params)
    logger.info(
        "Authorization request received  method=%s client_id=%s sign_up=%s",
        request.method,
        params.client_id,
        params.is_sign_up,
    )

    # --- Validate before touching any user data ---------------------------
    try:
        target = await service.validate(params)
    except InvalidRequest as e:
        return HTMLResponse(
            render_error(e.message), status_code=status.HTTP_400_BAD_REQUEST
        )
    except InternalError as e:
        return HTMLResponse(
            render_error(e.message),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if request.method != "POST":
        return _render(request, service.show_form(params))

    # --- Process submission -----------------------------------------------
    form_data = await request.form()
    outcome = await service.submit(params, target, form_data)
    if isinstance(outcome, Redirect):
        return RedirectResponse(url=outcome.location, status_code=status.HTTP_302_FOUND)
    return _render(request, outcome)
