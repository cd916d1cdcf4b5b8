"""Unit tests for the key store, access gate, joke store and user registry."""

import hashlib

import pytest

from app.auth import AccessGate, KeyStore
from app.errors import EmptyCollection, NotFound, Unauthorized, ValidationError
from app.store import JokeStore
from app.users import UserRegistry, hash_password


@pytest.fixture()
def keys():
    return KeyStore()


@pytest.fixture()
def jokes():
    return JokeStore()


# ---- KeyStore / AccessGate ----


class TestKeyStore:
    def test_issued_key_is_valid(self, keys):
        api_key = keys.issue_key()
        assert len(api_key) == 32
        assert keys.is_valid(api_key)
        assert keys.is_valid(api_key)

    @pytest.mark.parametrize("candidate", [None, "", "abc", "0" * 32])
    def test_unissued_values_are_invalid(self, keys, candidate):
        keys.issue_key()
        assert not keys.is_valid(candidate)

    def test_len_counts_keys(self, keys):
        for _ in range(3):
            keys.issue_key()
        assert len(keys) == 3


class TestAccessGate:
    def test_authorize_valid_key(self, keys):
        gate = AccessGate(keys)
        api_key = keys.issue_key()
        assert gate.authorize(api_key) == api_key

    @pytest.mark.parametrize("candidate", [None, "", "unknown"])
    def test_authorize_rejects_uniformly(self, keys, candidate):
        gate = AccessGate(keys)
        with pytest.raises(Unauthorized) as exc_info:
            gate.authorize(candidate)
        assert exc_info.value.message == "Invalid or missing API key."
        assert exc_info.value.status_code == 403


# ---- JokeStore ----


class TestJokeStore:
    def test_starts_empty(self, jokes):
        assert len(jokes) == 0
        assert jokes.list_all() == []

    def test_add_then_get(self, jokes):
        joke = jokes.add("Q", "A", "g")
        fetched = jokes.get(joke.id)
        assert (fetched.question, fetched.answer, fetched.genre) == ("Q", "A", "g")

    def test_add_stores_text_as_given(self, jokes):
        joke = jokes.add(" Q ", "A\n", " g")
        fetched = jokes.get(joke.id)
        assert (fetched.question, fetched.answer, fetched.genre) == (" Q ", "A\n", " g")
        assert jokes.filter_by_genre(" g") == [fetched]
        with pytest.raises(NotFound):
            jokes.filter_by_genre("g")

    def test_update_stores_text_as_given(self, jokes):
        joke = jokes.add("Q", "A", "g")
        jokes.update(joke.id, answer="  spaced  ", genre="   ")
        assert jokes.get(joke.id).answer == "  spaced  "
        assert jokes.get(joke.id).genre == "g"

    @pytest.mark.parametrize(
        "fields",
        [(None, "A", "g"), ("Q", "", "g"), ("Q", "A", "  "), (None, None, None)],
    )
    def test_add_requires_all_fields(self, jokes, fields):
        with pytest.raises(ValidationError):
            jokes.add(*fields)
        assert len(jokes) == 0

    def test_list_returns_copy(self, jokes):
        jokes.add("Q", "A", "g")
        listed = jokes.list_all()
        listed.clear()
        assert len(jokes.list_all()) == 1

    def test_get_missing(self, jokes):
        with pytest.raises(NotFound):
            jokes.get(1)

    def test_pick_random_empty(self, jokes):
        with pytest.raises(EmptyCollection):
            jokes.pick_random()

    def test_pick_random_returns_stored_joke(self, jokes):
        added = [jokes.add(f"Q{i}", "A", "g") for i in range(5)]
        assert jokes.pick_random() in added

    def test_filter_by_genre_exact(self, jokes):
        jokes.add("Q1", "A", "engracadas")
        jokes.add("Q2", "A", "other")
        assert [j.question for j in jokes.filter_by_genre("engracadas")] == ["Q1"]
        with pytest.raises(NotFound):
            jokes.filter_by_genre("Engracadas")

    def test_update_only_answer(self, jokes):
        joke = jokes.add("Q", "A", "g")
        updated = jokes.update(joke.id, answer="new")
        assert (updated.question, updated.answer, updated.genre) == ("Q", "new", "g")

    def test_update_skips_blank_fields(self, jokes):
        joke = jokes.add("Q", "A", "g")
        jokes.update(joke.id, question="", genre="h")
        assert jokes.get(joke.id).question == "Q"
        assert jokes.get(joke.id).genre == "h"

    def test_update_without_fields(self, jokes):
        joke = jokes.add("Q", "A", "g")
        with pytest.raises(ValidationError):
            jokes.update(joke.id)

    def test_update_missing_is_not_found_before_validation(self, jokes):
        with pytest.raises(NotFound):
            jokes.update(7)

    def test_remove(self, jokes):
        joke = jokes.add("Q", "A", "g")
        assert jokes.remove(joke.id) == joke
        with pytest.raises(NotFound):
            jokes.get(joke.id)
        with pytest.raises(NotFound):
            jokes.remove(joke.id)

    def test_remove_keeps_order_and_ids(self, jokes):
        for question in ("one", "two", "three"):
            jokes.add(question, "A", "g")
        jokes.remove(2)
        assert [(j.id, j.question) for j in jokes.list_all()] == [
            (1, "one"),
            (3, "three"),
        ]

    def test_ids_never_reused(self, jokes):
        for question in ("one", "two", "three"):
            jokes.add(question, "A", "g")
        jokes.remove(2)
        jokes.remove(3)
        assert jokes.add("four", "A", "g").id == 4
        ids = [j.id for j in jokes.list_all()]
        assert len(ids) == len(set(ids))


# ---- UserRegistry ----


class TestUserRegistry:
    def test_register_issues_valid_key(self, keys):
        registry = UserRegistry(keys)
        api_key = registry.register("alice", "pw")
        assert keys.is_valid(api_key)
        assert len(registry) == 1

    def test_password_is_hashed(self, keys):
        registry = UserRegistry(keys)
        registry.register("alice", "pw")
        (user,) = registry.users()
        assert user.password_hash == hashlib.sha256(b"pw").hexdigest()
        assert user.password_hash == hash_password("pw")

    @pytest.mark.parametrize(
        "username,password", [("alice", ""), ("", "pw"), (None, "pw"), ("alice", None)]
    )
    def test_failed_registration_has_no_side_effects(self, keys, username, password):
        registry = UserRegistry(keys)
        with pytest.raises(ValidationError):
            registry.register(username, password)
        assert len(registry) == 0
        assert len(keys) == 0

    def test_each_registration_gets_its_own_key(self, keys):
        registry = UserRegistry(keys)
        first = registry.register("bob", "pw")
        second = registry.register("bob", "pw")
        assert first != second
        assert len(registry) == 2
