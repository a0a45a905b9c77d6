import pytest

from errors import ValidationError
from repository import UserRepository
from security import get_password_hash, is_password_hash


@pytest.fixture
def users(mongo):
    return UserRepository(mongo)


def test_create_user_defaults_role_to_admin(users, mongo):
    user = users.create({"name": "Aminah", "email": "aminah@example.com", "password": "s3cret"})
    assert user["role"] == "admin"
    assert mongo["users"].count_documents({}) == 1


def test_password_is_stored_hashed(users):
    user = users.create({"name": "Aminah", "email": "aminah@example.com", "password": "s3cret"})
    assert user["password"] != "s3cret"
    assert is_password_hash(user["password"])


def test_prehashed_password_is_kept(users):
    hashed = get_password_hash("s3cret")
    user = users.create({"name": "Aminah", "email": "aminah@example.com", "password": hashed})
    assert user["password"] == hashed


def test_duplicate_email_is_rejected(users):
    users.create({"name": "Aminah", "email": "aminah@example.com", "password": "a"})
    with pytest.raises(ValidationError) as exc:
        users.create({"name": "Other", "email": "aminah@example.com", "password": "b"})
    assert exc.value.errors[0]["loc"] == ("email",)
    assert users.count() == 1


def test_unique_index_backs_up_email_check(users, mongo):
    index_keys = [list(spec["key"]) for spec in mongo["users"].index_information().values()]
    assert [("email", 1)] in index_keys


@pytest.mark.parametrize("role", ["driver", "superuser"])
def test_role_outside_set_is_rejected(users, role):
    with pytest.raises(ValidationError):
        users.create({"name": "Aminah", "email": "aminah@example.com", "password": "a", "role": role})


@pytest.mark.parametrize("missing", ["name", "email", "password"])
def test_required_fields(users, missing):
    data = {"name": "Aminah", "email": "aminah@example.com", "password": "a"}
    data.pop(missing)
    with pytest.raises(ValidationError):
        users.create(data)


def test_update_email_to_taken_address(users):
    users.create({"name": "Aminah", "email": "aminah@example.com", "password": "a"})
    other = users.create({"name": "Bakar", "email": "bakar@example.com", "password": "b"})
    with pytest.raises(ValidationError):
        users.update(other["_id"], {"email": "aminah@example.com"})
    # re-saving one's own email is not a conflict
    assert users.update(other["_id"], {"email": "bakar@example.com", "role": "finance"})["role"] == "finance"


def test_update_rehashes_new_password(users):
    user = users.create({"name": "Aminah", "email": "aminah@example.com", "password": "old"})
    users.update(user["_id"], {"password": "new"})
    assert users.authenticate("aminah@example.com", "new") is not None
    assert users.authenticate("aminah@example.com", "old") is None


def test_authenticate(users):
    users.create({"name": "Aminah", "email": "aminah@example.com", "password": "s3cret", "role": "cs"})
    assert users.authenticate("aminah@example.com", "s3cret")["role"] == "cs"
    assert users.authenticate("aminah@example.com", "wrong") is None
    assert users.authenticate("nobody@example.com", "s3cret") is None
    assert users.find_by_email("aminah@example.com")["name"] == "Aminah"


def test_loosely_shaped_stored_user_is_still_listed(users, mongo):
    users.create({"name": "Aminah", "email": "aminah@example.com", "password": "a"})
    mongo["users"].insert_one({"name": "Ops desk", "email": "ops", "password": "plain"})

    listed = users.find()
    assert [u["email"] for u in listed] == ["aminah@example.com", "ops"]
    assert listed[1]["role"] == "admin"
    assert users.authenticate("ops", "plain") is None
