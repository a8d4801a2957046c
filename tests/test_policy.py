"""
Tests des décisions d'accès aux boards (fonctions pures, sans base).
"""

import pytest

from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.db.models.boards import Board
from app.db.models.enums import BoardStatus, BoardVisibility, Role
from app.features.boards import policy
from app.features.boards.policy import DenyReason

ADMIN = 1
OTHER = 2


def make_board(**kwargs) -> Board:
    fields = {
        "id": 10,
        "name": "General",
        "admin_id": ADMIN,
        "visibility": BoardVisibility.PUBLIC,
        "status": BoardStatus.ACTIVE,
    }
    fields.update(kwargs)
    return Board(**fields)


PUBLIC = dict(visibility=BoardVisibility.PUBLIC)
PRIVATE = dict(visibility=BoardVisibility.PRIVATE)
FROZEN = dict(status=BoardStatus.FROZEN)


class TestCanView:
    def test_missing_board(self):
        decision = policy.can_view(None, OTHER, is_member=False, is_banned=False)
        assert decision.reason == DenyReason.NOT_FOUND

    @pytest.mark.parametrize(
        "board_kwargs, is_member, is_banned, expected",
        [
            (PUBLIC, False, False, None),
            (PUBLIC, True, False, None),
            (PUBLIC, False, True, DenyReason.BANNED),
            (PRIVATE, False, False, DenyReason.PRIVATE_ACCESS_DENIED),
            (PRIVATE, True, False, None),
            (PRIVATE, False, True, DenyReason.BANNED),
            (FROZEN, False, False, DenyReason.FROZEN_NOT_MEMBER),
            (FROZEN, True, False, None),
            (FROZEN, False, True, DenyReason.BANNED),
        ],
    )
    def test_regular_user(self, board_kwargs, is_member, is_banned, expected):
        decision = policy.can_view(make_board(**board_kwargs), OTHER, is_member=is_member, is_banned=is_banned)
        assert decision.allowed is (expected is None)
        assert decision.reason == expected

    @pytest.mark.parametrize("board_kwargs", [PUBLIC, PRIVATE, FROZEN, dict(PRIVATE, **FROZEN)])
    def test_board_admin_always_sees(self, board_kwargs):
        # même sans adhésion et avec un ban résiduel
        decision = policy.can_view(make_board(**board_kwargs), ADMIN, is_member=False, is_banned=True)
        assert decision.allowed

    def test_ban_checked_before_visibility(self):
        decision = policy.can_view(make_board(**PUBLIC), OTHER, is_member=True, is_banned=True)
        assert decision.reason == DenyReason.BANNED


class TestCanPost:
    def test_missing_board(self):
        assert policy.can_post(None, OTHER, is_member=True, is_banned=False).reason == DenyReason.NOT_FOUND

    def test_frozen_blocks_everyone(self):
        board = make_board(**FROZEN)
        assert policy.can_post(board, ADMIN, is_member=True, is_banned=False).reason == DenyReason.FROZEN_BOARD
        assert policy.can_post(board, OTHER, is_member=True, is_banned=False).reason == DenyReason.FROZEN_BOARD

    def test_member_can_post(self):
        assert policy.can_post(make_board(), OTHER, is_member=True, is_banned=False)

    def test_non_member_cannot_post_on_public_board(self):
        assert policy.can_post(make_board(), OTHER, is_member=False, is_banned=False).reason == DenyReason.NOT_MEMBER

    def test_banned_cannot_post(self):
        assert policy.can_post(make_board(), OTHER, is_member=False, is_banned=True).reason == DenyReason.BANNED

    def test_admin_posts_without_membership(self):
        assert policy.can_post(make_board(**PRIVATE), ADMIN, is_member=False, is_banned=False)


class TestCanJoin:
    @pytest.mark.parametrize(
        "board_kwargs, user_id, is_member, is_banned, expected",
        [
            (PUBLIC, OTHER, False, False, None),
            (PUBLIC, OTHER, True, False, DenyReason.ALREADY_MEMBER),
            (PUBLIC, OTHER, False, True, DenyReason.ALREADY_BANNED),
            (PRIVATE, OTHER, False, False, DenyReason.PRIVATE_JOIN_DENIED),
            (PRIVATE, ADMIN, False, False, None),
            (FROZEN, OTHER, False, False, DenyReason.FROZEN_BOARD),
            (FROZEN, ADMIN, False, False, DenyReason.FROZEN_BOARD),
        ],
    )
    def test_table(self, board_kwargs, user_id, is_member, is_banned, expected):
        decision = policy.can_join(make_board(**board_kwargs), user_id, is_member=is_member, is_banned=is_banned)
        assert decision.reason == expected

    def test_missing_board(self):
        assert policy.can_join(None, OTHER, is_member=False, is_banned=False).reason == DenyReason.NOT_FOUND


class TestBanDeniesEverything:
    @pytest.mark.parametrize("board_kwargs", [PUBLIC, PRIVATE, FROZEN])
    def test_banned_user(self, board_kwargs):
        board = make_board(**board_kwargs)
        for check in (policy.can_view, policy.can_post, policy.can_join):
            assert not check(board, OTHER, is_member=False, is_banned=True)


class TestCanAdminister:
    @pytest.mark.parametrize(
        "user_id, role, allowed",
        [
            (ADMIN, Role.USER, True),
            (OTHER, Role.USER, False),
            (OTHER, Role.ADMIN, True),
            (OTHER, Role.MASTER, True),
        ],
    )
    def test_table(self, user_id, role, allowed):
        decision = policy.can_administer(make_board(), user_id, role)
        assert decision.allowed is allowed
        if not allowed:
            assert decision.reason == DenyReason.NOT_BOARD_ADMIN

    def test_missing_board(self):
        assert policy.can_administer(None, OTHER, Role.MASTER).reason == DenyReason.NOT_FOUND


class TestErrors:
    def test_allow_does_not_raise(self):
        policy.enforce(policy.ALLOW)

    @pytest.mark.parametrize(
        "reason, error_cls",
        [
            (DenyReason.NOT_FOUND, NotFoundError),
            (DenyReason.TARGET_NOT_FOUND, NotFoundError),
            (DenyReason.ALREADY_MEMBER, ConflictError),
            (DenyReason.BANNED, ForbiddenError),
            (DenyReason.NOT_BANNED, ForbiddenError),
            (DenyReason.SELF_BAN, ForbiddenError),
        ],
    )
    def test_reason_maps_to_error(self, reason, error_cls):
        with pytest.raises(error_cls) as exc:
            policy.enforce(policy.deny(reason))
        assert exc.value.code == reason.value

    def test_every_reason_has_a_message(self):
        assert set(policy.DENY_MESSAGES) == set(DenyReason)
