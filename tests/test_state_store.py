"""Test module for resource state persistence."""

import pytest
from cryptography.fernet import Fernet
from peewee import SqliteDatabase

from src.utils import create_tables


@pytest.fixture(autouse=True)
def setup_teardown_database(tmp_path, monkeypatch):
    """Setup and teardown test database."""
    from src.db_models import ResourceState

    monkeypatch.delenv("STATE_ENCRYPTION_KEY_FILE", raising=False)
    monkeypatch.delenv("REQUIRE_STATE_ENCRYPTION", raising=False)

    db_path = tmp_path / "test.db"
    test_db = SqliteDatabase(db_path)
    test_db.bind([ResourceState])
    test_db.connect()
    create_tables([ResourceState])

    yield

    test_db.drop_tables([ResourceState])
    test_db.close()


@pytest.fixture()
def encryption_key_file(tmp_path, monkeypatch):
    """Write a Fernet key file and configure it."""
    key_file = tmp_path / "state.key"
    key_file.write_text(Fernet.generate_key().decode() + "\n", encoding="utf-8")
    monkeypatch.setenv("STATE_ENCRYPTION_KEY_FILE", str(key_file))
    return key_file


def created_state():
    """Create a user nkey state."""
    from src.nkey_resource.service import NkeyResource
    from src.operations import CreateRequest
    from src.state import Plan

    resource = NkeyResource()
    plan = Plan(resource.schema, resource.schema.apply_defaults({"type": "user"}))
    return resource.Create(CreateRequest(plan=plan)).state


def test_save_and_load_state():
    """Test state round trips through the store."""
    from src.state_store import find_state, load_state, save_state

    state = created_state()
    save_state("nats_nkey.app", "nats_nkey", state)

    record = find_state("nats_nkey.app")
    assert record.type_name == "nats_nkey"
    assert record.resource_id == state.values["public_key"]
    assert record.encrypted is False

    loaded = load_state("nats_nkey.app", state.schema)
    assert loaded == state


def test_private_key_not_in_plain_attributes():
    """Test sensitive values are kept out of the plain attribute column."""
    from src.state_store import find_state, save_state

    state = created_state()
    save_state("nats_nkey.app", "nats_nkey", state)

    record = find_state("nats_nkey.app")
    assert state.values["private_key"] not in record.attributes
    assert state.values["public_key"] in record.attributes


def test_encrypted_state(encryption_key_file):
    """Test sensitive values are encrypted when a key is configured."""
    from src.state_store import find_state, load_state, save_state

    state = created_state()
    save_state("nats_nkey.app", "nats_nkey", state)

    record = find_state("nats_nkey.app")
    assert record.encrypted is True
    assert state.values["private_key"].encode() not in bytes(
        record.sensitive_attributes
    )

    assert load_state("nats_nkey.app", state.schema) == state


def test_encrypted_state_needs_key(encryption_key_file, monkeypatch):
    """Test encrypted state cannot be read without the key."""
    from src.state_store import StateEncryptionRequiredError, load_state, save_state

    state = created_state()
    save_state("nats_nkey.app", "nats_nkey", state)
    monkeypatch.delenv("STATE_ENCRYPTION_KEY_FILE")

    with pytest.raises(StateEncryptionRequiredError):
        load_state("nats_nkey.app", state.schema)


def test_require_state_encryption(monkeypatch):
    """Test plaintext sensitive values are refused when encryption is required."""
    from src.state_store import StateEncryptionRequiredError, find_state, save_state

    monkeypatch.setenv("REQUIRE_STATE_ENCRYPTION", "true")

    with pytest.raises(StateEncryptionRequiredError):
        save_state("nats_nkey.app", "nats_nkey", created_state())

    assert find_state("nats_nkey.app") is None


def test_save_replaces_previous_state():
    """Test saving twice keeps one record with the latest values."""
    from src.db_models import ResourceState
    from src.state_store import load_state, save_state

    first = created_state()
    second = created_state()
    save_state("nats_nkey.app", "nats_nkey", first)
    save_state("nats_nkey.app", "nats_nkey", second)

    assert ResourceState.select().count() == 1
    assert load_state("nats_nkey.app", second.schema) == second


def test_save_null_state_fails():
    """Test a null state cannot be saved."""
    from src.nkey_resource.model import nkey_schema
    from src.state import State
    from src.state_store import save_state

    with pytest.raises(ValueError):
        save_state("nats_nkey.app", "nats_nkey", State(nkey_schema()))


def test_imported_state_has_no_sensitive_payload():
    """Test a state without key material stores no sensitive payload."""
    from src.nkey_resource.model import nkey_schema
    from src.state import State
    from src.state_store import find_state, load_state, save_state

    schema = nkey_schema()
    state = State(schema, dict(schema.empty_values(), id="abc123"))
    save_state("nats_nkey.imported", "nats_nkey", state)

    assert find_state("nats_nkey.imported").sensitive_attributes is None
    assert load_state("nats_nkey.imported", schema) == state


def test_delete_state():
    """Test deleting removes the record."""
    from src.state_store import delete_state, find_state, save_state

    save_state("nats_nkey.app", "nats_nkey", created_state())

    assert delete_state("nats_nkey.app") is True
    assert find_state("nats_nkey.app") is None
    assert delete_state("nats_nkey.app") is False


def test_load_missing_state():
    """Test loading an unknown address returns None."""
    from src.nkey_resource.model import nkey_schema
    from src.state_store import load_state

    assert load_state("nats_nkey.missing", nkey_schema()) is None
