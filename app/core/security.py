from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from app.core.config import settings

http_bearer = HTTPBearer(auto_error=False)

class Principal(BaseModel):
    user_id: str

def _decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG], audience=settings.REQUIRED_AUDIENCE)
        return payload
    except JWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")

def issue_token(user_id: str, **claims) -> str:
    # Local/test helper; production tokens come from the identity provider
    data = {"sub": user_id, **claims}
    if settings.REQUIRED_AUDIENCE and "aud" not in data:
        data["aud"] = settings.REQUIRED_AUDIENCE
    return jwt.encode(data, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

async def get_principal(creds: HTTPAuthorizationCredentials | None = Depends(http_bearer)) -> Principal:
    # In local/dev, allow missing token and use the dev user
    if creds is None and settings.ENV == "local":
        return Principal(user_id=settings.DEV_USER_ID)
    if creds is None:
        raise HTTPException(status_code=401, detail="Missing token")

    data = _decode_token(creds.credentials)
    user_id = data.get("sub") or data.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token has no subject")
    return Principal(user_id=str(user_id))
