# storefront/utils/guard.py
import logging
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.utils.tokenJWT import bearer_scheme, decode_session, session_token

logger = logging.getLogger(__name__)


def _redirect(location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        detail="Redirect",
        headers={"Location": location},
    )


def admin_route_guard(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    """Gate every request under the /admin prefix.

    No session sends the caller to /login. With a session the role is looked
    up fresh on each request: a failing lookup also goes to /login, a missing
    profile or a non-admin role goes back to the storefront home.
    """
    email = decode_session(session_token(request, credentials))
    if email is None:
        raise _redirect("/login")

    try:
        profile = db.query(Profile).filter(Profile.email == email).first()
    except SQLAlchemyError:
        logger.exception("Error checking admin status for %s", email)
        raise _redirect("/login")

    if profile is None or profile.role != "admin":
        raise _redirect("/")
    return profile
