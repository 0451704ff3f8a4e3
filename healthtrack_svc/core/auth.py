"""
API key authentication for the HealthTrack API.

Every router under /api/v1 except the public metadata router depends on
verify_api_key. Clients send the shared key in the X-API-Key header.
"""
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from core.config import settings

logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"

api_key_header = APIKeyHeader(
    name=API_KEY_HEADER_NAME,
    auto_error=False,
    description="Shared API key for HealthTrack clients.",
)


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header),
) -> str:
    """
    Check the X-API-Key header against the configured key.

    Raises:
        HTTPException: 401 when the header is absent, 403 when the key is wrong.
    """
    if not api_key:
        logger.warning("Rejected request without API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing API key. Send it in the {API_KEY_HEADER_NAME} header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    # constant-time comparison
    if not secrets.compare_digest(api_key.encode(), settings.healthtrack_api_key.encode()):
        logger.warning("Rejected request with invalid API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key
