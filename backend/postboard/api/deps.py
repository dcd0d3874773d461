from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from postboard.services.credentials import TokenClaims, verify

security = HTTPBearer(auto_error=False)


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    return verify(credentials.credentials if credentials else None)
