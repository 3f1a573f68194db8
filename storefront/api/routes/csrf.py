# storefront/api/routes/csrf.py

from fastapi import APIRouter, Request, Response

from storefront.core.config import config
from storefront.core.security.csrf import set_csrf_cookie

router = APIRouter(tags=["Security"])


@router.get("/csrf-token")
def get_csrf_token(request: Request, response: Response):
    """
    Issues the double-submit CSRF token.

    An existing cookie token is reused so concurrent tabs keep working; the
    cookie is refreshed either way.
    """
    token = set_csrf_cookie(response, request.cookies.get(config.CSRF_COOKIE_NAME))
    return {"csrfToken": token}
