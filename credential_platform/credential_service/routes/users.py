"""
User Router - register and login.

Rejections from the credential service map to 400 (register) and
401 (login). Nothing here touches the store directly.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_credential_service
from ..schemas import AccountResponse, LoginRequest, RegisterRequest
from ..services import CredentialService

router = APIRouter(prefix="/user", tags=["user"])


@router.post("/register", response_model=AccountResponse)
def register(payload: RegisterRequest, service: CredentialService = Depends(get_credential_service)):
    account = service.register(payload.email, payload.password)
    if account is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Registration failed")
    return account


@router.post("/login", response_model=AccountResponse)
def login(payload: LoginRequest, service: CredentialService = Depends(get_credential_service)):
    account = service.authenticate(payload.email, payload.password)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return account
