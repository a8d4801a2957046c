from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status

from app.api.v1.dependencies import get_board_service, get_current_account, pagination
from app.db.models.accounts import Account
from app.features.boards.schemas import (
    AddMemberIn,
    BanIn,
    BanOut,
    BoardCreateIn,
    BoardListOut,
    BoardOut,
    BoardUpdateIn,
    JoinedBoardOut,
    MemberListOut,
    MembershipOut,
)
from app.features.boards.services import BoardService
from app.security.rate_limit import limit_api

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
    dependencies=[Depends(limit_api)],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Boards
# -----------------------------
@router.get(
    "",
    summary="Lister les boards actifs",
    response_model=BoardListOut,
)
def list_boards(
    page=Depends(pagination),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.list_boards(offset=page["offset"], limit=page["limit"])


@router.post(
    "",
    summary="Créer un board (l'appelant en devient l'admin)",
    status_code=status.HTTP_201_CREATED,
    response_model=BoardOut,
)
def create_board(
    payload: BoardCreateIn,
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.create_board(payload, user_id=account.id)


@router.get(
    "/joined",
    summary="Boards rejoints par l'appelant",
    response_model=List[JoinedBoardOut],
)
def list_joined_boards(
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.list_joined_boards(account.id)


@router.get(
    "/{board_id}",
    summary="Détail d'un board",
    response_model=BoardOut,
    responses={403: {"description": "Accès refusé (ban, privé, gelé)"}},
)
def get_board(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.get_board(board_id, user_id=account.id)


@router.patch(
    "/{board_id}",
    summary="Mettre à jour un board (admin du board ou admin global)",
    response_model=BoardOut,
)
def update_board(
    payload: BoardUpdateIn,
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.update_board(board_id, payload, user_id=account.id, role=account.role)


@router.delete(
    "/{board_id}",
    summary="Supprimer un board et tout son contenu",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_board(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    svc.delete_board(board_id, user_id=account.id, role=account.role)
    return None

# -----------------------------
# Adhésions
# -----------------------------
@router.post(
    "/{board_id}/join",
    summary="Rejoindre un board public",
    status_code=status.HTTP_201_CREATED,
    response_model=MembershipOut,
    responses={409: {"description": "Déjà membre"}},
)
def join_board(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.join_board(board_id, user_id=account.id)


@router.delete(
    "/{board_id}/join",
    summary="Quitter un board",
    status_code=status.HTTP_204_NO_CONTENT,
)
def leave_board(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    svc.leave_board(board_id, user_id=account.id)
    return None


@router.get(
    "/{board_id}/members",
    summary="Lister les membres (membres, admin du board, admins globaux)",
    response_model=MemberListOut,
)
def list_members(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.list_members(board_id, user_id=account.id, role=account.role)


@router.post(
    "/{board_id}/members",
    summary="Ajouter un membre (admin du board)",
    status_code=status.HTTP_201_CREATED,
    response_model=MembershipOut,
)
def add_member(
    payload: AddMemberIn,
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.add_member(board_id, payload.user_id, user_id=account.id, role=account.role)

# -----------------------------
# Bans
# -----------------------------
@router.get(
    "/{board_id}/bans",
    summary="Lister les bans d'un board (admin du board)",
    response_model=List[BanOut],
)
def list_bans(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.list_bans(board_id, user_id=account.id, role=account.role)


@router.post(
    "/{board_id}/bans/{user_id}",
    summary="Bannir un utilisateur (retire aussi son adhésion)",
    status_code=status.HTTP_201_CREATED,
    response_model=BanOut,
)
def ban_user(
    payload: Optional[BanIn] = None,
    board_id: int = Path(..., ge=1),
    user_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    return svc.ban_user(
        board_id,
        user_id,
        user_id=account.id,
        role=account.role,
        reason=payload.reason if payload else None,
    )


@router.delete(
    "/{board_id}/bans/{user_id}",
    summary="Lever un ban (l'adhésion n'est pas restaurée)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def unban_user(
    board_id: int = Path(..., ge=1),
    user_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: BoardService = Depends(get_board_service),
):
    svc.unban_user(board_id, user_id, user_id=account.id, role=account.role)
    return None
