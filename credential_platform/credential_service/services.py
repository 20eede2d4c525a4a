"""
Credential service - registration and authentication of accounts.
"""
from typing import Optional
import logging

from .auth import SALT_SIZE, generate_salt, hash_password, verify_password
from .gateway import PersistenceGateway
from .models import Account

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively and without surrounding whitespace."""
    return email.strip().lower()


class CredentialService:
    def __init__(self, gateway: PersistenceGateway, salt_size: int = SALT_SIZE):
        self.gateway = gateway
        self.salt_size = salt_size

    def find_account(self, email: str) -> Optional[Account]:
        return self.gateway.find_one(Account, Account.email == normalize_email(email))

    def register(self, email: str, password: str) -> Optional[Account]:
        """
        Create an account for an email that is not registered yet.

        The existence check and the insert are separate steps. Two
        concurrent registrations for the same email can both pass the check;
        the unique constraint on accounts.email then rejects the second
        commit and that caller gets None.

        Args:
            email: Address to register
            password: The plaintext password

        Returns:
            The stored Account, or None if the email is taken or the
            insert was rolled back

        Raises:
            PersistenceError: if the existence check could not be run
        """
        email = normalize_email(email)
        if self.find_account(email) is not None:
            logger.info("Registration rejected, email already registered: %s", email)
            return None

        password_hash, salt = hash_password(password, generate_salt(self.salt_size))
        account = Account(email=email, password_hash=password_hash, salt=salt)

        result = self.gateway.add(account)
        if not result:
            logger.warning("Registration for %s was rolled back", email)
            return None

        logger.info("Registered account: id=%s, email=%s", account.id, email)
        return account

    def authenticate(self, email: str, password: str) -> Optional[Account]:
        """
        Return the account when the password matches, otherwise None.

        An unknown email and a wrong password give the same result.
        """
        account = self.find_account(email)
        if account is None or not verify_password(password, account.password_hash, account.salt):
            logger.info("Authentication failed for %s", normalize_email(email))
            return None

        logger.info("Authenticated account: id=%s", account.id)
        return account
