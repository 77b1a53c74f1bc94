"""
Shared API dependencies: caller identity and engine construction.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ectracc.core import security
from ectracc.core.errors import ServiceUnavailableError
from ectracc.database import get_db
from ectracc.services.catalog_service import CatalogService
from ectracc.services.footprint_service import FootprintService
from ectracc.services.footprint_store import SqlFootprintStore

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Validate the identity provider's access token and return the user id.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = security.decode_access_token(credentials.credentials)
    user_id = payload.get("sub") if payload else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def get_catalog_service(request: Request) -> CatalogService:
    catalog = getattr(request.app.state, "catalog_service", None)
    if catalog is None:
        raise ServiceUnavailableError("Product service temporarily unavailable", "catalog")
    return catalog


def get_footprint_service(db: Session = Depends(get_db)) -> FootprintService:
    return FootprintService(SqlFootprintStore(db))
