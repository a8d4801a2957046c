"""
Tests du cycle de vie des boards : création, adhésions, bans, suppression.
"""

import pytest

from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.db.models.enums import BoardStatus, BoardVisibility, Role
from app.db.repositories.bans import BanRepository
from app.db.repositories.memberships import MembershipRepository
from app.db.repositories.messages import MessageRepository
from app.features.boards.policy import DenyReason
from app.features.boards.schemas import BoardCreateIn, BoardUpdateIn
from app.features.messages.schemas import MessageCreateIn


@pytest.fixture
def admin(make_account):
    return make_account("Admin")


@pytest.fixture
def alice(make_account):
    return make_account("Alice")


@pytest.fixture
def board(board_svc, admin):
    return board_svc.create_board(BoardCreateIn(name="General"), user_id=admin.id)


class TestCreateAndUpdate:
    def test_creator_becomes_admin(self, board, admin):
        assert board.admin_id == admin.id
        assert board.status == BoardStatus.ACTIVE
        assert board.visibility == BoardVisibility.PUBLIC

    def test_list_boards_hides_frozen(self, board_svc, board, admin):
        board_svc.update_board(board.id, BoardUpdateIn(status=BoardStatus.FROZEN), user_id=admin.id, role=Role.USER)
        other = board_svc.create_board(BoardCreateIn(name="Other"), user_id=admin.id)
        listing = board_svc.list_boards()
        assert [b.id for b in listing.items] == [other.id]
        assert listing.total == 1

    def test_non_admin_cannot_update(self, board_svc, board, alice):
        with pytest.raises(ForbiddenError) as exc:
            board_svc.update_board(board.id, BoardUpdateIn(name="Renamed"), user_id=alice.id, role=Role.USER)
        assert exc.value.code == DenyReason.NOT_BOARD_ADMIN.value

    def test_global_admin_can_update(self, board_svc, board, make_account):
        staff = make_account("Staff", role=Role.ADMIN)
        updated = board_svc.update_board(
            board.id, BoardUpdateIn(visibility=BoardVisibility.PRIVATE), user_id=staff.id, role=Role.ADMIN
        )
        assert updated.visibility == BoardVisibility.PRIVATE

    def test_board_admin_cannot_reassign(self, board_svc, board, admin, alice):
        updated = board_svc.update_board(
            board.id, BoardUpdateIn(name="Renamed", admin_id=alice.id), user_id=admin.id, role=Role.USER
        )
        assert updated.name == "Renamed"
        assert updated.admin_id == admin.id

    def test_master_reassigns_to_existing_account(self, board_svc, board, alice, make_account):
        master = make_account("Master", role=Role.MASTER)
        updated = board_svc.update_board(
            board.id, BoardUpdateIn(admin_id=alice.id), user_id=master.id, role=Role.MASTER
        )
        assert updated.admin_id == alice.id
        with pytest.raises(NotFoundError):
            board_svc.update_board(board.id, BoardUpdateIn(admin_id=9999), user_id=master.id, role=Role.MASTER)

    def test_update_missing_board(self, board_svc, admin):
        with pytest.raises(NotFoundError):
            board_svc.update_board(404, BoardUpdateIn(name="Nope"), user_id=admin.id, role=Role.USER)


class TestMembership:
    def test_join_and_leave(self, board_svc, board, alice, session):
        membership = board_svc.join_board(board.id, user_id=alice.id)
        assert membership.user_id == alice.id
        assert [b.id for b in board_svc.list_joined_boards(alice.id)] == [board.id]

        board_svc.leave_board(board.id, user_id=alice.id)
        assert MembershipRepository(session).get_for(board.id, alice.id) is None

    def test_join_twice_conflicts(self, board_svc, board, alice):
        board_svc.join_board(board.id, user_id=alice.id)
        with pytest.raises(ConflictError):
            board_svc.join_board(board.id, user_id=alice.id)

    def test_leave_without_membership(self, board_svc, board, alice):
        with pytest.raises(ForbiddenError) as exc:
            board_svc.leave_board(board.id, user_id=alice.id)
        assert exc.value.code == DenyReason.NOT_MEMBER.value

    def test_private_board_requires_invitation(self, board_svc, admin, alice):
        private = board_svc.create_board(
            BoardCreateIn(name="Secret", visibility=BoardVisibility.PRIVATE), user_id=admin.id
        )
        with pytest.raises(ForbiddenError) as exc:
            board_svc.join_board(private.id, user_id=alice.id)
        assert exc.value.code == DenyReason.PRIVATE_JOIN_DENIED.value

        board_svc.add_member(private.id, alice.id, user_id=admin.id, role=Role.USER)
        _, decision = board_svc.view_decision(private.id, alice.id)
        assert decision.allowed

    def test_add_member_checks(self, board_svc, board, admin, alice):
        with pytest.raises(NotFoundError) as exc:
            board_svc.add_member(board.id, 9999, user_id=admin.id, role=Role.USER)
        assert exc.value.code == DenyReason.TARGET_NOT_FOUND.value

        board_svc.add_member(board.id, alice.id, user_id=admin.id, role=Role.USER)
        with pytest.raises(ConflictError):
            board_svc.add_member(board.id, alice.id, user_id=admin.id, role=Role.USER)

    def test_add_member_requires_admin(self, board_svc, board, alice, make_account):
        bob = make_account("Bob")
        with pytest.raises(ForbiddenError):
            board_svc.add_member(board.id, bob.id, user_id=alice.id, role=Role.USER)

    def test_list_members(self, board_svc, board, admin, alice, make_account):
        board_svc.join_board(board.id, user_id=alice.id)
        members = board_svc.list_members(board.id, user_id=alice.id, role=Role.USER)
        assert [m.display_name for m in members.members] == ["Alice"]
        assert members.members[0].age is not None

        outsider = make_account("Outsider")
        with pytest.raises(ForbiddenError):
            board_svc.list_members(board.id, user_id=outsider.id, role=Role.USER)
        # l'admin du board n'a pas besoin d'être membre
        assert board_svc.list_members(board.id, user_id=admin.id, role=Role.USER).board_id == board.id


class TestBans:
    def test_ban_removes_membership(self, board_svc, board, admin, alice, session):
        board_svc.join_board(board.id, user_id=alice.id)
        ban = board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER, reason="spam")

        assert ban.reason == "spam"
        assert MembershipRepository(session).get_for(board.id, alice.id) is None
        assert BanRepository(session).get_for(board.id, alice.id) is not None

    def test_banned_user_is_locked_out(self, board_svc, board, admin, alice):
        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        for decide in (board_svc.view_decision, board_svc.post_decision, board_svc.join_decision):
            _, decision = decide(board.id, alice.id)
            assert not decision.allowed

    def test_self_ban_is_refused_without_side_effects(self, board_svc, board, admin, session):
        board_svc.join_board(board.id, user_id=admin.id)
        with pytest.raises(ForbiddenError) as exc:
            board_svc.ban_user(board.id, admin.id, user_id=admin.id, role=Role.USER)
        assert exc.value.code == DenyReason.SELF_BAN.value
        assert BanRepository(session).get_for(board.id, admin.id) is None
        assert MembershipRepository(session).get_for(board.id, admin.id) is not None

    def test_global_admin_cannot_ban_board_admin(self, board_svc, board, admin, make_account, session):
        master = make_account("Master", role=Role.MASTER)
        with pytest.raises(ForbiddenError) as exc:
            board_svc.ban_user(board.id, admin.id, user_id=master.id, role=Role.MASTER)
        assert exc.value.code == DenyReason.ADMIN_BAN.value
        assert BanRepository(session).get_for(board.id, admin.id) is None

    def test_failed_membership_delete_rolls_back_ban(self, board_svc, board, admin, alice, session, monkeypatch):
        board_svc.join_board(board.id, user_id=alice.id)

        def fail_delete(self, entity, *, commit=True):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(MembershipRepository, "delete", fail_delete)
        with pytest.raises(RuntimeError):
            board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        monkeypatch.undo()

        # ni ban sans retrait d'adhésion, ni l'inverse
        assert BanRepository(session).get_for(board.id, alice.id) is None
        assert MembershipRepository(session).get_for(board.id, alice.id) is not None

    def test_ban_twice(self, board_svc, board, admin, alice):
        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        with pytest.raises(ForbiddenError) as exc:
            board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        assert exc.value.code == DenyReason.ALREADY_BANNED.value

    def test_ban_unknown_target(self, board_svc, board, admin):
        with pytest.raises(NotFoundError):
            board_svc.ban_user(board.id, 9999, user_id=admin.id, role=Role.USER)

    def test_ban_requires_admin(self, board_svc, board, alice, make_account):
        bob = make_account("Bob")
        with pytest.raises(ForbiddenError) as exc:
            board_svc.ban_user(board.id, bob.id, user_id=alice.id, role=Role.USER)
        assert exc.value.code == DenyReason.NOT_BOARD_ADMIN.value

    def test_unban_then_reban_keeps_one_row(self, board_svc, board, admin, alice, session):
        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        board_svc.unban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        # l'adhésion n'est pas restaurée
        assert MembershipRepository(session).get_for(board.id, alice.id) is None

        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        assert BanRepository(session).count(board_id=board.id, account_id=alice.id) == 1

    def test_unban_without_ban(self, board_svc, board, admin, alice):
        with pytest.raises(ForbiddenError) as exc:
            board_svc.unban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        assert exc.value.code == DenyReason.NOT_BANNED.value

    def test_banned_user_cannot_be_added(self, board_svc, board, admin, alice):
        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER)
        with pytest.raises(ForbiddenError) as exc:
            board_svc.add_member(board.id, alice.id, user_id=admin.id, role=Role.USER)
        assert exc.value.code == DenyReason.ALREADY_BANNED.value

    def test_list_bans(self, board_svc, board, admin, alice):
        board_svc.ban_user(board.id, alice.id, user_id=admin.id, role=Role.USER, reason="flood")
        bans = board_svc.list_bans(board.id, user_id=admin.id, role=Role.USER)
        assert [(b.user_id, b.display_name, b.reason) for b in bans] == [(alice.id, "Alice", "flood")]


class TestDelete:
    def test_delete_cascades(self, board_svc, message_svc, board, admin, alice, make_account, session):
        board_svc.join_board(board.id, user_id=alice.id)
        message_svc.post_message(board.id, MessageCreateIn(text="hello"), user_id=alice.id)
        board_svc.ban_user(board.id, make_account("Bob").id, user_id=admin.id, role=Role.USER)

        board_id = board.id
        board_svc.delete_board(board_id, user_id=admin.id, role=Role.USER)

        assert board_svc.boards.get(board_id) is None
        assert MessageRepository(session).count(board_id=board_id) == 0
        assert MembershipRepository(session).count(board_id=board_id) == 0
        assert BanRepository(session).count(board_id=board_id) == 0

    def test_delete_requires_admin(self, board_svc, board, alice):
        with pytest.raises(ForbiddenError):
            board_svc.delete_board(board.id, user_id=alice.id, role=Role.USER)
