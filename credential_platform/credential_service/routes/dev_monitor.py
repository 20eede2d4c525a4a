"""
Dev Monitor Router - Development-only endpoints for account inspection.
"""
import logging
from fastapi import APIRouter, Request, Depends, HTTPException

from ..config import Settings
from ..dependencies import get_gateway, get_settings
from ..gateway import PersistenceGateway
from ..models import Account
from ..schemas import AccountPage, AccountResponse

router = APIRouter(prefix="/dev", tags=["dev-monitor"])
logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 1000


@router.get("/accounts", response_model=AccountPage)
def list_accounts(
    request: Request,
    page: int = 0,
    count: int = 50,
    settings: Settings = Depends(get_settings),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    List registered accounts page by page (development only).

    Only ids and emails are returned; hashes and salts never leave the store.

    Args:
        page: Zero-based page index
        count: Page size, 0 returns every account (max 1000)

    Raises:
        404: If DEV_MODE is not enabled
        400: If page or count is out of range
    """
    client_ip = request.client.host if request.client else 'unknown'

    if not settings.DEV_MODE:
        logger.warning("Attempt to access /dev/accounts with DEV_MODE disabled from IP %s", client_ip)
        raise HTTPException(status_code=404, detail="Not found")

    if page < 0 or count < 0 or count > MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"page must be >= 0 and count between 0 and {MAX_PAGE_SIZE}"
        )

    accounts = [
        AccountResponse.model_validate(account)
        for account in gateway.find_many(Account, page=page, count=count)
    ]

    logger.info("Dev account listing: page=%s, count=%s, results=%s, ip=%s",
                page, count, len(accounts), client_ip)

    return AccountPage(page=page, count=count, accounts=accounts)
