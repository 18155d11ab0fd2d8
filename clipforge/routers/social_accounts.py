"""
Social Accounts Router
Connects platform accounts used for publishing.
"""

from typing import List

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..models.social_account import SocialAccount, SocialAccountCreate, StoredSocialAccount
from ..pipeline import Pipeline, get_pipeline
from ..utils.exceptions import SocialAccountNotFoundError
from ..utils.logger import get_logger

router = APIRouter(prefix="/api/social-accounts", tags=["social-accounts"])
logger = get_logger()


@router.post("/", response_model=SocialAccount, status_code=201)
async def create_social_account(
    request: SocialAccountCreate,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Connect an account; one per platform and user."""
    account = StoredSocialAccount(
        platform=request.platform,
        username=request.username,
        password=request.password,
        user_id=user_id,
    )
    await pipeline.store.create_social_account(account)
    logger.info(f"Social account connected: {account.platform.value} ({account.username})")
    return account.public()


@router.get("/", response_model=List[SocialAccount])
async def list_social_accounts(
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    accounts = await pipeline.store.list_social_accounts(user_id)
    return [account.public() for account in accounts]


@router.delete("/{account_id}")
async def delete_social_account(
    account_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    account = await pipeline.store.get_social_account(account_id, user_id=user_id)
    if account is None:
        raise SocialAccountNotFoundError(account_id)

    await pipeline.store.delete_social_account(account.id)
    return {"status": "deleted"}
