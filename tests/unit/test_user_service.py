import sqlite3

import pytest

from social_graph_api.app.schemas.user import UserCreate, UserUpdate
from social_graph_api.app.services.errors import (
    ConflictError,
    DuplicateUsernameError,
    FriendshipExistsError,
    HobbyExistsError,
    InvalidInputError,
    SelfFriendshipError,
    UserHasFriendshipsError,
    UserNotFoundError,
)
from social_graph_api.app.services.user_service import UserService, canonical_pair


def _create(service: UserService, username: str, hobbies, age: int = 25):
    return service.create_user(UserCreate(username=username, age=age, hobbies=hobbies))


def test_create_then_get_round_trip(user_service):
    created = _create(user_service, "alice", ["reading", "gaming"], age=31)

    fetched = user_service.get_user(created.id)
    assert fetched is not None
    assert fetched.username == "alice"
    assert fetched.age == 31
    assert fetched.hobbies == ["reading", "gaming"]
    assert fetched.friends == []
    assert fetched.popularity_score == 0
    assert fetched.created_at == created.created_at


def test_create_duplicate_username_conflicts(user_service):
    _create(user_service, "alice", [])
    with pytest.raises(DuplicateUsernameError):
        _create(user_service, "alice", ["music"])


def test_popularity_example(user_service):
    alice = _create(user_service, "Alice", ["reading", "gaming"])
    bob = _create(user_service, "Bob", ["gaming", "cooking"])
    charlie = _create(user_service, "Charlie", ["reading", "music"])

    user_service.create_friendship(alice.id, bob.id)
    user_service.create_friendship(alice.id, charlie.id)

    assert user_service.compute_popularity(alice.id) == 3.0
    assert user_service.get_user(alice.id).popularity_score == 3.0
    # Bob: one friend, shares "gaming" with Alice.
    assert user_service.compute_popularity(bob.id) == 1.5


def test_popularity_without_shared_hobbies_is_friend_count(user_service):
    u = _create(user_service, "u", ["chess"])
    friends = [_create(user_service, f"f{i}", ["surfing", "art"]) for i in range(3)]
    for friend in friends:
        user_service.create_friendship(u.id, friend.id)

    assert user_service.compute_popularity(u.id) == 3


def test_popularity_counts_friend_hobby_occurrences(user_service):
    u = _create(user_service, "u", ["gaming", "gaming", "reading"])
    v = _create(user_service, "v", ["gaming", "reading", "gaming", "Reading"])
    user_service.create_friendship(v.id, u.id)

    # Three of v's entries match u's hobbies; "Reading" differs by case and
    # u's duplicate "gaming" does not double the credit.
    assert user_service.compute_popularity(u.id) == 1 + 0.5 * 3
    # v's hobbies as a set are {gaming, reading, Reading}; u has
    # gaming, gaming, reading -> three matches.
    assert user_service.compute_popularity(v.id) == 1 + 0.5 * 3


def test_popularity_independent_of_link_order(user_service):
    a = _create(user_service, "a", ["x", "y"])
    b = _create(user_service, "b", ["y", "z"])
    c = _create(user_service, "c", ["x"])

    user_service.create_friendship(c.id, a.id)
    user_service.create_friendship(b.id, a.id)
    first = user_service.compute_popularity(a.id)

    user_service.remove_friendship(a.id, b.id)
    user_service.remove_friendship(a.id, c.id)
    user_service.create_friendship(a.id, b.id)
    user_service.create_friendship(a.id, c.id)

    assert user_service.compute_popularity(a.id) == first == 2 + 0.5 * 2


def test_popularity_of_unknown_user_is_zero(user_service):
    assert user_service.compute_popularity("missing") == 0


def test_popularity_reflects_hobby_updates(user_service):
    a = _create(user_service, "a", ["x"])
    b = _create(user_service, "b", ["y"])
    user_service.create_friendship(a.id, b.id)
    assert user_service.compute_popularity(a.id) == 1

    user_service.update_user(b.id, UserUpdate(hobbies=["x", "y"]))
    assert user_service.compute_popularity(a.id) == 1.5


@pytest.mark.parametrize("reverse", [False, True])
def test_reciprocal_friendship_conflicts(user_service, reverse):
    a = _create(user_service, "a", [])
    b = _create(user_service, "b", [])
    first, second = (b, a) if reverse else (a, b)

    user_service.create_friendship(first.id, second.id)
    with pytest.raises(FriendshipExistsError):
        user_service.create_friendship(second.id, first.id)
    with pytest.raises(ConflictError):
        user_service.create_friendship(first.id, second.id)

    assert user_service.get_friends(a.id) == [b.id]
    assert user_service.get_friends(b.id) == [a.id]


def test_self_friendship_rejected(user_service):
    a = _create(user_service, "a", [])
    with pytest.raises(SelfFriendshipError):
        user_service.create_friendship(a.id, a.id)


def test_friendship_with_unknown_user_not_found(user_service):
    a = _create(user_service, "a", [])
    with pytest.raises(UserNotFoundError):
        user_service.create_friendship(a.id, "missing")
    with pytest.raises(UserNotFoundError):
        user_service.create_friendship("missing", a.id)


def test_friendship_stored_in_canonical_order(user_service, conn):
    a = _create(user_service, "a", [])
    b = _create(user_service, "b", [])
    smaller, larger = canonical_pair(a.id, b.id)

    user_service.create_friendship(larger, smaller)

    rows = conn.execute("SELECT user1_id, user2_id FROM friendships").fetchall()
    assert [(row["user1_id"], row["user2_id"]) for row in rows] == [(smaller, larger)]


def test_remove_friendship_reports_absence(user_service):
    a = _create(user_service, "a", [])
    b = _create(user_service, "b", [])

    assert user_service.remove_friendship(a.id, b.id) is False
    user_service.create_friendship(a.id, b.id)
    assert user_service.remove_friendship(b.id, a.id) is True
    assert user_service.remove_friendship(a.id, b.id) is False


def test_delete_user_with_friendships_then_after_unlink(user_service):
    frank = _create(user_service, "Frank", ["travel"])
    grace = _create(user_service, "Grace", ["photography"])
    user_service.create_friendship(frank.id, grace.id)

    with pytest.raises(UserHasFriendshipsError):
        user_service.delete_user(frank.id)
    assert user_service.get_user(frank.id) is not None

    user_service.remove_friendship(frank.id, grace.id)
    user_service.delete_user(frank.id)
    assert user_service.get_user(frank.id) is None


def test_delete_unknown_user_not_found(user_service):
    with pytest.raises(UserNotFoundError):
        user_service.delete_user("missing")


def test_update_user_partial(user_service):
    user = _create(user_service, "alice", ["reading"], age=20)

    updated = user_service.update_user(user.id, UserUpdate(age=21))
    assert updated.age == 21
    assert updated.username == "alice"
    assert updated.hobbies == ["reading"]

    unchanged = user_service.update_user(user.id, UserUpdate())
    assert unchanged == updated


def test_update_user_errors(user_service):
    _create(user_service, "alice", [])
    bob = _create(user_service, "bob", [])

    with pytest.raises(UserNotFoundError):
        user_service.update_user("missing", UserUpdate(age=3))
    with pytest.raises(DuplicateUsernameError):
        user_service.update_user(bob.id, UserUpdate(username="alice"))
    assert user_service.get_user(bob.id).username == "bob"


def test_add_hobby(user_service):
    user = _create(user_service, "alice", ["reading"])

    updated = user_service.add_hobby(user.id, "chess")
    assert updated.hobbies == ["reading", "chess"]

    with pytest.raises(HobbyExistsError):
        user_service.add_hobby(user.id, "chess")
    with pytest.raises(UserNotFoundError):
        user_service.add_hobby("missing", "chess")


def test_list_users(user_service):
    assert user_service.list_users() == []
    a = _create(user_service, "a", [])
    b = _create(user_service, "b", [])
    user_service.create_friendship(a.id, b.id)

    users = {user.id: user for user in user_service.list_users()}
    assert set(users) == {a.id, b.id}
    assert users[a.id].friends == [b.id]
    assert users[b.id].popularity_score == 1


def test_friendship_table_rejects_non_canonical_rows(user_service, conn):
    a = _create(user_service, "a", [])
    b = _create(user_service, "b", [])
    smaller, larger = canonical_pair(a.id, b.id)

    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO friendships (user1_id, user2_id) VALUES (?, ?)", (larger, smaller))
    conn.rollback()


@pytest.mark.parametrize("hobby", ["", "   "])
def test_add_blank_hobby_rejected(user_service, hobby):
    user = _create(user_service, "alice", ["reading"])

    with pytest.raises(InvalidInputError):
        user_service.add_hobby(user.id, hobby)
    assert user_service.get_user(user.id).hobbies == ["reading"]
