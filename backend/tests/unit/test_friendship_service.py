import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.friendship import FriendRequest, Friendship, RequestStatus
from services.errors import Conflict, Forbidden, InvalidOperation, NotFound
from services.friendship import (
    are_friends,
    cancel_friend_request,
    directory,
    friend_ids,
    list_friends,
    list_incoming_requests,
    list_outgoing_requests,
    remove_friend,
    respond_to_friend_request,
    search_users,
    send_friend_request,
)


def befriend(session: Session, a, b):
    fr = send_friend_request(session, from_user_id=a.id, to_user_id=b.id)
    return respond_to_friend_request(
        session, request_id=fr.id, status="approved", actor_id=b.id
    )


class TestSendFriendRequest:
    def test_creates_pending_request(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        assert fr.status == RequestStatus.pending
        assert (fr.from_user_id, fr.to_user_id) == (alice.id, bob.id)
        assert (fr.pair_low_id, fr.pair_high_id) == (alice.id, bob.id)

    def test_cannot_befriend_yourself(self, test_session, alice):
        with pytest.raises(InvalidOperation):
            send_friend_request(
                test_session, from_user_id=alice.id, to_user_id=alice.id
            )

    def test_unknown_recipient(self, test_session, alice):
        with pytest.raises(NotFound):
            send_friend_request(test_session, from_user_id=alice.id, to_user_id=999)

    def test_duplicate_request_conflicts(self, test_session, alice, bob):
        send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        with pytest.raises(Conflict, match="already sent"):
            send_friend_request(
                test_session, from_user_id=alice.id, to_user_id=bob.id
            )

    def test_reverse_request_conflicts(self, test_session, alice, bob):
        send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        with pytest.raises(Conflict, match="already sent you"):
            send_friend_request(
                test_session, from_user_id=bob.id, to_user_id=alice.id
            )
        pending = test_session.exec(
            select(FriendRequest).where(FriendRequest.status == RequestStatus.pending)
        ).all()
        assert len(pending) == 1

    def test_already_friends_conflicts(self, test_session, alice, bob):
        befriend(test_session, alice, bob)
        for a, b in ((alice, bob), (bob, alice)):
            with pytest.raises(Conflict, match="Already friends"):
                send_friend_request(test_session, from_user_id=a.id, to_user_id=b.id)

    def test_pending_pair_is_unique_in_the_store(self, test_session, alice, bob):
        send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        # a racing insert that skipped the checks still hits the index
        test_session.add(FriendRequest.between(bob.id, alice.id))
        with pytest.raises(IntegrityError):
            test_session.commit()
        test_session.rollback()

    def test_request_after_rejection_is_allowed(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        respond_to_friend_request(
            test_session, request_id=fr.id, status="rejected", actor_id=bob.id
        )
        again = send_friend_request(
            test_session, from_user_id=alice.id, to_user_id=bob.id
        )
        assert again.id != fr.id
        assert again.status == RequestStatus.pending


class TestRespondToFriendRequest:
    def test_approval_creates_one_canonical_friendship(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=bob.id, to_user_id=alice.id)
        answered = respond_to_friend_request(
            test_session, request_id=fr.id, status="approved", actor_id=alice.id
        )
        assert answered.status == RequestStatus.approved
        assert answered.responded_at is not None

        friendships = test_session.exec(select(Friendship)).all()
        assert len(friendships) == 1
        assert friendships[0].user_id_1 < friendships[0].user_id_2
        assert are_friends(test_session, alice.id, bob.id)
        assert are_friends(test_session, bob.id, alice.id)

    def test_rejection_creates_no_friendship(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        respond_to_friend_request(
            test_session, request_id=fr.id, status="rejected", actor_id=bob.id
        )
        assert not are_friends(test_session, alice.id, bob.id)

    def test_only_recipient_can_respond(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        with pytest.raises(Forbidden):
            respond_to_friend_request(
                test_session, request_id=fr.id, status="approved", actor_id=alice.id
            )

    def test_answered_request_is_final(self, test_session, alice, bob):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        respond_to_friend_request(
            test_session, request_id=fr.id, status="rejected", actor_id=bob.id
        )
        with pytest.raises(InvalidOperation):
            respond_to_friend_request(
                test_session, request_id=fr.id, status="approved", actor_id=bob.id
            )

    @pytest.mark.parametrize("status", ["pending", "maybe", ""])
    def test_invalid_status(self, test_session, alice, bob, status):
        fr = send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        with pytest.raises(InvalidOperation):
            respond_to_friend_request(
                test_session, request_id=fr.id, status=status, actor_id=bob.id
            )

    def test_unknown_request(self, test_session, bob):
        with pytest.raises(NotFound):
            respond_to_friend_request(
                test_session, request_id=404, status="approved", actor_id=bob.id
            )


class TestFriendGraph:
    def test_friendship_is_symmetric(self, test_session, alice, bob, carol):
        befriend(test_session, alice, bob)
        befriend(test_session, carol, alice)

        assert friend_ids(test_session, alice.id) == {bob.id, carol.id}
        assert friend_ids(test_session, bob.id) == {alice.id}
        assert [u.username for u in list_friends(test_session, alice.id)] == [
            "bob",
            "carol",
        ]

    def test_remove_friend_then_request_again(self, test_session, alice, bob):
        befriend(test_session, alice, bob)
        assert remove_friend(test_session, user_id=bob.id, other_id=alice.id)
        assert not are_friends(test_session, alice.id, bob.id)
        assert not remove_friend(test_session, user_id=bob.id, other_id=alice.id)

        # history stays, a new request is possible
        fr = send_friend_request(test_session, from_user_id=bob.id, to_user_id=alice.id)
        assert fr.status == RequestStatus.pending

    def test_cancel_outgoing_request(self, test_session, alice, bob):
        send_friend_request(test_session, from_user_id=alice.id, to_user_id=bob.id)
        # only the sender's pending request can be cancelled
        assert not cancel_friend_request(
            test_session, from_user_id=bob.id, to_user_id=alice.id
        )
        assert cancel_friend_request(
            test_session, from_user_id=alice.id, to_user_id=bob.id
        )
        assert list_outgoing_requests(test_session, alice.id) == []

    def test_incoming_and_outgoing_lists(self, test_session, alice, bob, carol):
        send_friend_request(test_session, from_user_id=bob.id, to_user_id=alice.id)
        send_friend_request(test_session, from_user_id=alice.id, to_user_id=carol.id)

        incoming = list_incoming_requests(test_session, alice.id)
        assert [(fr.from_user_id, user.username) for fr, user in incoming] == [
            (bob.id, "bob")
        ]
        outgoing = list_outgoing_requests(test_session, alice.id)
        assert [(fr.to_user_id, user.username) for fr, user in outgoing] == [
            (carol.id, "carol")
        ]

    def test_directory_flags(self, test_session, alice, bob, carol):
        befriend(test_session, alice, bob)
        send_friend_request(test_session, from_user_id=carol.id, to_user_id=alice.id)

        entries = {e["username"]: e for e in directory(test_session, alice.id)}
        assert set(entries) == {"bob", "carol"}
        assert entries["bob"]["isFriend"] and not entries["bob"]["hasPendingRequest"]
        assert entries["carol"]["hasPendingRequest"]
        assert not entries["carol"]["isFriend"]

    def test_search_users(self, test_session, alice, bob, make_user):
        make_user("bobby")
        found = search_users(test_session, alice.id, "BOB")
        assert [e["username"] for e in found] == ["bob", "bobby"]
        assert search_users(test_session, bob.id, "bob")[0]["username"] == "bobby"

    def test_search_treats_wildcards_literally(self, test_session, alice, bob, make_user):
        make_user("100%_real")
        assert search_users(test_session, alice.id, "%%") == []
        found = search_users(test_session, alice.id, "0%_")
        assert [e["username"] for e in found] == ["100%_real"]

    def test_search_needs_two_characters(self, test_session, alice):
        with pytest.raises(InvalidOperation):
            search_users(test_session, alice.id, "b")
