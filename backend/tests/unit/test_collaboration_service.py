import pytest

from models.friendship import RequestStatus
from services.catalog import add_media_item, create_list
from services.collaboration import (
    is_collaborator,
    list_collaborators,
    list_incoming_for_owner,
    list_outgoing_for_user,
    request_collaboration,
    respond_to_collaboration,
)
from services.errors import Conflict, Forbidden, InvalidOperation, NotFound


@pytest.fixture
def public_list(test_session, alice):
    return create_list(test_session, user_id=alice.id, name="Classics")


def test_request_and_approve(test_session, alice, bob, public_list):
    collaboration = request_collaboration(
        test_session, list_id=public_list.id, user_id=bob.id
    )
    assert collaboration.status == RequestStatus.pending
    assert not is_collaborator(test_session, public_list.id, bob.id)

    respond_to_collaboration(
        test_session, request_id=collaboration.id, status="approved", actor_id=alice.id
    )
    assert is_collaborator(test_session, public_list.id, bob.id)


def test_rejected_request_grants_nothing(test_session, alice, bob, public_list):
    collaboration = request_collaboration(
        test_session, list_id=public_list.id, user_id=bob.id
    )
    answered = respond_to_collaboration(
        test_session, request_id=collaboration.id, status="rejected", actor_id=alice.id
    )
    assert answered.responded_at is not None
    assert not is_collaborator(test_session, public_list.id, bob.id)
    with pytest.raises(Forbidden):
        add_media_item(
            test_session,
            list_id=public_list.id,
            actor_id=bob.id,
            media_type="movie",
            external_id="tt0133093",
            title="The Matrix",
        )


def test_request_rules(test_session, alice, bob):
    private = create_list(test_session, user_id=alice.id, name="Mine", is_public=False)
    with pytest.raises(Forbidden, match="not public"):
        request_collaboration(test_session, list_id=private.id, user_id=bob.id)
    with pytest.raises(NotFound):
        request_collaboration(test_session, list_id=999, user_id=bob.id)

    public = create_list(test_session, user_id=alice.id, name="Shared")
    with pytest.raises(InvalidOperation):
        request_collaboration(test_session, list_id=public.id, user_id=alice.id)

    request_collaboration(test_session, list_id=public.id, user_id=bob.id)
    with pytest.raises(Conflict):
        request_collaboration(test_session, list_id=public.id, user_id=bob.id)


def test_rejected_requester_cannot_ask_again(test_session, alice, bob, public_list):
    collaboration = request_collaboration(
        test_session, list_id=public_list.id, user_id=bob.id
    )
    respond_to_collaboration(
        test_session, request_id=collaboration.id, status="rejected", actor_id=alice.id
    )
    with pytest.raises(Conflict):
        request_collaboration(test_session, list_id=public_list.id, user_id=bob.id)


def test_only_owner_answers(test_session, alice, bob, carol, public_list):
    collaboration = request_collaboration(
        test_session, list_id=public_list.id, user_id=bob.id
    )
    for actor in (bob, carol):
        with pytest.raises(Forbidden):
            respond_to_collaboration(
                test_session,
                request_id=collaboration.id,
                status="approved",
                actor_id=actor.id,
            )
    with pytest.raises(InvalidOperation):
        respond_to_collaboration(
            test_session,
            request_id=collaboration.id,
            status="pending",
            actor_id=alice.id,
        )


def test_listings(test_session, alice, bob, carol, public_list):
    request_collaboration(test_session, list_id=public_list.id, user_id=bob.id)
    request_collaboration(test_session, list_id=public_list.id, user_id=carol.id)

    incoming = list_incoming_for_owner(test_session, alice.id)
    assert {user.username for _, _, user in incoming} == {"bob", "carol"}
    assert {media_list.name for _, media_list, _ in incoming} == {"Classics"}

    outgoing = list_outgoing_for_user(test_session, bob.id)
    assert [media_list.id for _, media_list in outgoing] == [public_list.id]

    collaborators = list_collaborators(
        test_session, list_id=public_list.id, actor_id=alice.id
    )
    assert len(collaborators) == 2
    with pytest.raises(Forbidden):
        list_collaborators(test_session, list_id=public_list.id, actor_id=bob.id)
