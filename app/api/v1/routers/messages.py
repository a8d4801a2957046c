from fastapi import APIRouter, Depends, Path, status

from app.api.v1.dependencies import get_current_account, get_message_service
from app.db.models.accounts import Account
from app.features.messages.schemas import (
    AccessibleBoardsOut,
    BoardMessagesOut,
    MessageCreateIn,
    MessageOut,
    ReplyIn,
    ReplyOut,
)
from app.features.messages.services import MessageService
from app.security.rate_limit import limit_api

router = APIRouter(
    tags=["messages"],
    dependencies=[Depends(limit_api)],
    responses={404: {"description": "Not Found"}},
)


@router.get(
    "/messages",
    summary="Boards accessibles avec leurs derniers messages",
    response_model=AccessibleBoardsOut,
)
def list_accessible_boards(
    account: Account = Depends(get_current_account),
    svc: MessageService = Depends(get_message_service),
):
    return svc.list_accessible_boards_with_recent_messages(account.id)


@router.get(
    "/boards/{board_id}/messages",
    summary="Fil d'un board (ordre chronologique)",
    response_model=BoardMessagesOut,
    responses={403: {"description": "Accès refusé (ban, privé, gelé)"}},
)
def list_board_messages(
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: MessageService = Depends(get_message_service),
):
    return svc.list_board_messages(board_id, user_id=account.id)


@router.post(
    "/boards/{board_id}/messages",
    summary="Publier un message",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageOut,
)
def post_message(
    payload: MessageCreateIn,
    board_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: MessageService = Depends(get_message_service),
):
    return svc.post_message(board_id, payload, user_id=account.id)


@router.post(
    "/messages/{message_id}/replies",
    summary="Répondre à un message",
    status_code=status.HTTP_201_CREATED,
    response_model=ReplyOut,
)
def reply_to_message(
    payload: ReplyIn,
    message_id: int = Path(..., ge=1),
    account: Account = Depends(get_current_account),
    svc: MessageService = Depends(get_message_service),
):
    return svc.reply_to_message(message_id, payload, user_id=account.id)
