from typing import List

from fastapi import APIRouter, Depends, Path

from app.api.v1.dependencies import get_user_service, pagination, require_global_admin
from app.core.config import settings
from app.features.users.schemas import AccountAdminOut, AccountAdminUpdateIn, AccountOut
from app.features.users.services import UserService
from app.security.rate_limit import limit_api

# Console master : réservée aux rôles admin / master
router = APIRouter(
    prefix="/master",
    tags=["master"],
    dependencies=[Depends(limit_api), Depends(require_global_admin)],
    responses={403: {"description": "Rôle admin ou master requis"}},
)


@router.get(
    "/users",
    summary="Lister les comptes avec leurs boards et derniers messages",
    response_model=List[AccountAdminOut],
)
def list_users(
    page=Depends(pagination),
    svc: UserService = Depends(get_user_service),
):
    return svc.list_accounts(
        offset=page["offset"],
        limit=page["limit"],
        recent_limit=settings.RECENT_MESSAGES_LIMIT,
    )


@router.put(
    "/users/{user_id}",
    summary="Modifier un compte (email, rôle, profil)",
    response_model=AccountOut,
)
def update_user(
    payload: AccountAdminUpdateIn,
    user_id: int = Path(..., ge=1),
    svc: UserService = Depends(get_user_service),
):
    return svc.update_account(user_id, payload)
