"""HTTP endpoints for the OIDC stub.

- /scenarios  scenario picker form (GET)
- /authorize  code issuance (GET query or POST form)
- /token      signed id_token (POST, GET)

Error responses are generic; details are logged.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from config import Config
from oidc.errors import ConfigurationMissing, InvalidRequest, SigningUnavailable, StoreUnavailable
from oidc.issuer import CodeIssuer, parse_authorization_request
from oidc.signer import TokenSigner, build_token_response
from oidc.templates import render_scenario_page

logger = logging.getLogger(__name__)


async def _request_params(request: Request) -> dict:
    """Query parameters, overlaid with form fields on POST."""
    params = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})
    return params


def build_router(config: Config, code_issuer: CodeIssuer, token_signer: Optional[TokenSigner]) -> APIRouter:
    """Create the OIDC router around already constructed dependencies.

    token_signer may be None when no signing service is configured; /token
    then fails closed.
    """
    router = APIRouter(tags=["oidc"])

    @router.get("/scenarios")
    async def select_scenario(state: str = "", nonce: str = "", redirect_uri: str = ""):
        """Show the scenario picker."""
        return HTMLResponse(render_scenario_page(state=state, nonce=nonce, redirect_uri=redirect_uri))

    @router.api_route("/authorize", methods=["GET", "POST"])
    async def authorize(request: Request):
        """Issue an authorization code and redirect back to the relying party."""
        params = await _request_params(request)
        try:
            auth_request = parse_authorization_request(params, request.cookies)
            issued = await code_issuer.issue(auth_request)
        except InvalidRequest as e:
            logger.info(f"[AUTHORIZE] Rejected: {e}")
            return HTMLResponse(f"<h1>Invalid request. {e}</h1>", status_code=400)
        except StoreUnavailable as e:
            logger.error(f"[AUTHORIZE] Failed: {e}")
            return HTMLResponse("<h1>Internal Server Error</h1>", status_code=500)

        return RedirectResponse(url=issued.location, status_code=302)

    @router.api_route("/token", methods=["GET", "POST"])
    async def token():
        """Return a token response with a freshly signed id_token."""
        try:
            config.require_token_config()
            if token_signer is None:
                raise ConfigurationMissing(["SIGNER_URL"])
            id_token = await token_signer.sign(
                key_id=config.signing_key_id,
                client_id=config.oidc_client_id,
                environment=config.environment,
            )
        except ConfigurationMissing as e:
            logger.error(f"[TOKEN] {e}")
            return JSONResponse({"error": "server_error"}, status_code=500)
        except SigningUnavailable as e:
            logger.error(f"[TOKEN] Signing failed: {e}")
            return JSONResponse({"error": "server_error"}, status_code=500)

        logger.debug(f"[TOKEN] id_token: {id_token}")
        return JSONResponse(build_token_response(id_token))

    return router
