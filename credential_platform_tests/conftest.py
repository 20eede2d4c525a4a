"""
Shared fixtures: every test gets its own SQLite file under tmp_path.
"""
import pytest
from sqlalchemy import create_engine

from credential_platform.credential_service.db import init_db
from credential_platform.credential_service.gateway import PersistenceGateway
from credential_platform.credential_service.services import CredentialService


@pytest.fixture
def engine(tmp_path):
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'accounts.db'}",
        connect_args={"check_same_thread": False}
    )
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def gateway(engine):
    return PersistenceGateway(engine)


@pytest.fixture
def service(gateway):
    return CredentialService(gateway)


@pytest.fixture
def unreachable_gateway(tmp_path):
    """Gateway whose SQLite file lives in a directory that does not exist."""
    missing = tmp_path / "missing" / "accounts.db"
    bad_engine = create_engine(f"sqlite:///{missing}", connect_args={"check_same_thread": False})
    yield PersistenceGateway(bad_engine)
    bad_engine.dispose()
