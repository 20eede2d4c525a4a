"""
FastAPI dependency providers.

The gateway and the credential service are created once by the
application lifespan and kept on app.state.
"""
from fastapi import Request

from .config import Settings
from .gateway import PersistenceGateway
from .services import CredentialService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> PersistenceGateway:
    return request.app.state.gateway


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credential_service
