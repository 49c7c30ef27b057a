"""Bearer-token privilege checks for the records API.

Two static secrets from config grant READ and WRITE privilege.  There is no
session or token issuance; a request either presents one of the secrets or
it has no privilege.
"""

import enum
import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header

from config import get_settings
from errors import AccessDenied

logger = logging.getLogger(__name__)

AuthorizationHeader = Annotated[str | None, Header(alias="Authorization")]


class Privilege(enum.IntEnum):
    NONE = 0
    READ = 1
    WRITE = 2


def _matches(presented: str, expected: str) -> bool:
    """Constant-time comparison; an unset secret never matches."""
    if not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def resolve_privilege(token: str | None, read_token: str, write_token: str) -> Privilege:
    if not token:
        return Privilege.NONE
    if _matches(token, write_token):
        return Privilege.WRITE
    if _matches(token, read_token):
        return Privilege.READ
    return Privilege.NONE


def bearer_token(authorization: AuthorizationHeader = None) -> str | None:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_privilege(token: str | None = Depends(bearer_token)) -> Privilege:
    settings = get_settings()
    return resolve_privilege(token, settings.read_token, settings.write_token)


def require_read(privilege: Privilege = Depends(current_privilege)) -> Privilege:
    """Require a credential that may read records."""
    if privilege < Privilege.READ:
        raise AccessDenied(
            code="unauthorized",
            message="A valid access token is required",
            status_code=401,
        )
    return privilege


def require_write(privilege: Privilege = Depends(current_privilege)) -> Privilege:
    """Require a credential that may replace records."""
    if privilege is Privilege.NONE:
        raise AccessDenied(
            code="unauthorized",
            message="A valid access token is required",
            status_code=401,
        )
    if privilege < Privilege.WRITE:
        logger.info("Rejected write with read-only credential")
        raise AccessDenied(
            code="write_forbidden",
            message="Write access is required",
        )
    return privilege


def ensure_can_unmask(privilege: Privilege) -> None:
    """Unmasked reads are limited to write-privileged callers."""
    if privilege < Privilege.WRITE:
        logger.info("Rejected unmask request with read-only credential")
        raise AccessDenied(
            code="unmask_forbidden",
            message="Unmasked records require write access",
        )
