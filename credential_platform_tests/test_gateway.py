"""Tests for the transactional persistence gateway."""
import gc
import logging
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from credential_platform.credential_service.errors import PersistenceError, StoreUnavailableError
from credential_platform.credential_service.gateway import PersistenceGateway, TransactionResult
from credential_platform.credential_service.models import Account


def make_account(email):
    return Account(email=email, password_hash="hash", salt="salt")


def test_add_commits_and_assigns_id(gateway):
    account = make_account("alice@example.com")
    result = gateway.add(account)

    assert result
    assert result.committed is True
    assert result.error is None
    assert account.id is not None

    stored = gateway.find_one(Account, Account.email == "alice@example.com")
    assert stored.id == account.id


def test_use_session_commits_every_change(gateway):
    def work(session):
        session.add(make_account("a@example.com"))
        session.add(make_account("b@example.com"))

    assert gateway.use_session(work)
    assert len(list(gateway.find_many(Account))) == 2


def test_duplicate_insert_is_rolled_back_and_logged(gateway, caplog):
    assert gateway.add(make_account("dup@example.com"))

    with caplog.at_level(logging.ERROR, logger="credential_platform.credential_service.gateway"):
        result = gateway.add(make_account("dup@example.com"))

    assert not result
    assert isinstance(result.error, IntegrityError)
    assert "Could not save changes to database" in caplog.text
    assert len(list(gateway.find_many(Account))) == 1


def test_failed_unit_of_work_writes_nothing(gateway):
    def work(session):
        session.add(make_account("first@example.com"))
        session.flush()
        session.add(make_account("first@example.com"))
        session.flush()

    result = gateway.use_session(work)

    assert result.committed is False
    assert gateway.find_one(Account) is None


def test_commit_failure_is_rolled_back(gateway):
    failure = OperationalError("COMMIT", {}, Exception("disk I/O error"))
    with patch.object(Session, "commit", side_effect=failure):
        result = gateway.add(make_account("alice@example.com"))

    assert result == TransactionResult(committed=False, error=failure)
    assert gateway.find_one(Account) is None


def test_non_database_exception_propagates(gateway):
    def work(session):
        session.add(make_account("alice@example.com"))
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        gateway.use_session(work)

    assert gateway.find_one(Account) is None


def test_find_one_without_criteria_returns_first_row(gateway):
    gateway.add(make_account("first@example.com"))
    gateway.add(make_account("second@example.com"))

    assert gateway.find_one(Account).email == "first@example.com"


def test_find_one_returns_none_when_nothing_matches(gateway):
    gateway.add(make_account("alice@example.com"))

    assert gateway.find_one(Account, Account.email == "bob@example.com") is None


def test_find_one_entity_is_readable_after_session_closed(gateway):
    gateway.add(make_account("alice@example.com"))

    account = gateway.find_one(Account, Account.email == "alice@example.com")
    assert account.password_hash == "hash"
    assert account.salt == "salt"


def test_find_many_returns_all_when_count_is_zero(gateway):
    for i in range(5):
        gateway.add(make_account(f"user{i}@example.com"))

    emails = [account.email for account in gateway.find_many(Account)]
    assert emails == [f"user{i}@example.com" for i in range(5)]


def test_find_many_pages(gateway):
    for i in range(5):
        gateway.add(make_account(f"user{i}@example.com"))

    first = [a.email for a in gateway.find_many(Account, page=0, count=2)]
    second = [a.email for a in gateway.find_many(Account, page=1, count=2)]
    last = [a.email for a in gateway.find_many(Account, page=2, count=2)]
    beyond = list(gateway.find_many(Account, page=3, count=2))

    assert first == ["user0@example.com", "user1@example.com"]
    assert second == ["user2@example.com", "user3@example.com"]
    assert last == ["user4@example.com"]
    assert beyond == []


def test_find_many_with_criteria(gateway):
    gateway.add(make_account("alice@example.com"))
    gateway.add(make_account("bob@example.org"))

    found = list(gateway.find_many(Account, Account.email.like("%@example.org")))
    assert [a.email for a in found] == ["bob@example.org"]


def test_find_many_is_lazy(gateway):
    gateway.add(make_account("alice@example.com"))

    accounts = gateway.find_many(Account)
    assert not isinstance(accounts, list)
    assert next(accounts).email == "alice@example.com"
    accounts.close()


def test_find_many_closed_before_iterating_releases_connection(gateway, engine):
    gateway.add(make_account("alice@example.com"))
    assert engine.pool.checkedout() == 0

    accounts = gateway.find_many(Account)
    assert engine.pool.checkedout() == 1

    accounts.close()
    assert accounts.closed
    assert engine.pool.checkedout() == 0
    assert list(accounts) == []


def test_find_many_exhausted_releases_connection(gateway, engine):
    gateway.add(make_account("alice@example.com"))

    accounts = gateway.find_many(Account)
    assert [a.email for a in accounts] == ["alice@example.com"]
    assert accounts.closed
    assert engine.pool.checkedout() == 0


def test_find_many_dropped_releases_connection(gateway, engine):
    gateway.add(make_account("alice@example.com"))

    accounts = gateway.find_many(Account)
    del accounts
    gc.collect()

    assert engine.pool.checkedout() == 0


@pytest.mark.parametrize("page,count", [(-1, 2), (0, -1)])
def test_find_many_rejects_negative_paging(gateway, page, count):
    with pytest.raises(ValueError):
        gateway.find_many(Account, page=page, count=count)


def test_unreachable_store_raises_on_read(unreachable_gateway):
    with pytest.raises(StoreUnavailableError):
        unreachable_gateway.find_one(Account)

    with pytest.raises(StoreUnavailableError):
        unreachable_gateway.find_many(Account)


def test_unreachable_store_raises_on_write(unreachable_gateway):
    with pytest.raises(StoreUnavailableError):
        unreachable_gateway.add(make_account("alice@example.com"))


def test_query_failure_raises_persistence_error(tmp_path):
    # Schema never created, so the accounts table is missing
    bare_engine = create_engine(f"sqlite:///{tmp_path / 'bare.db'}")
    bare_gateway = PersistenceGateway(bare_engine)

    with pytest.raises(PersistenceError) as exc_info:
        bare_gateway.find_one(Account)

    assert type(exc_info.value) is PersistenceError
    bare_engine.dispose()


@pytest.mark.asyncio
async def test_add_async_commits(gateway):
    account = make_account("alice@example.com")
    result = await gateway.add_async(account)

    assert result
    assert account.id is not None
    assert gateway.find_one(Account).email == "alice@example.com"


@pytest.mark.asyncio
async def test_use_session_async_rolls_back_duplicate(gateway):
    assert await gateway.add_async(make_account("dup@example.com"))

    result = await gateway.use_session_async(lambda session: session.add(make_account("dup@example.com")))

    assert result.committed is False
    assert isinstance(result.error, IntegrityError)
