"""
Request identity dependencies.

``current_user`` is the only place where a bearer credential becomes an
application user; every authenticated route depends on it.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.security.auth import Credential, require_credential

from tipsy_api.models import User
from tipsy_api.services.domain import IdentityService


def current_user(
    credential: Credential = Depends(require_credential),
    db: Session = Depends(get_db),
) -> User:
    """Resolve (and on first use provision) the caller. 401 without a credential."""
    return IdentityService(db).get_or_provision(credential)
