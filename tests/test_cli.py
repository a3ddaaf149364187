"""Test module for the provider CLI."""

import json

import pytest
from cryptography.fernet import Fernet
from peewee import SqliteDatabase

from scripts.cli import main
from src.utils import create_tables


@pytest.fixture(autouse=True)
def setup_teardown_database(tmp_path, monkeypatch):
    """Setup and teardown test database."""
    from src.db_models import ResourceState

    monkeypatch.delenv("PROVIDER_TYPE_NAME", raising=False)
    monkeypatch.delenv("STATE_ENCRYPTION_KEY_FILE", raising=False)
    monkeypatch.delenv("REQUIRE_STATE_ENCRYPTION", raising=False)

    test_db = SqliteDatabase(tmp_path / "test.db")
    test_db.bind([ResourceState])
    test_db.connect()
    create_tables([ResourceState])

    yield

    test_db.drop_tables([ResourceState])
    test_db.close()


def run(capsys, *argv):
    """Run the CLI and return (exit code, parsed stdout or None, stderr)."""
    code = main(list(argv))
    captured = capsys.readouterr()
    output = json.loads(captured.out) if captured.out.strip() else None
    return code, output, captured.err


def test_schema_command(capsys):
    """Test the schema command lists the nkey resource."""
    code, output, _ = run(capsys, "schema")

    assert code == 0
    attributes = output["nats_nkey"]["attributes"]
    assert attributes["private_key"]["sensitive"] is True
    assert attributes["type"]["default"] == "account"


def test_schema_unknown_type(capsys):
    """Test the schema command rejects unknown types."""
    code, _, _ = run(capsys, "schema", "nats_jwt")

    assert code == 1


def test_apply_create_redacts_private_key(capsys):
    """Test apply creates an nkey and hides the private key."""
    code, output, _ = run(capsys, "apply", "nats_nkey.app", "--type", "user")

    assert code == 0
    assert output["type"] == "user"
    assert output["public_key"].startswith("U")
    assert output["private_key"] == "(sensitive value)"


def test_apply_is_stable_then_regenerates(capsys):
    """Test re-applying keeps keys until the type changes."""
    _, created, _ = run(capsys, "apply", "nats_nkey.app", "--type", "user")
    _, same, _ = run(capsys, "apply", "nats_nkey.app", "--type", "user")
    _, changed, _ = run(capsys, "apply", "nats_nkey.app", "--type", "operator")

    assert same["public_key"] == created["public_key"]
    assert changed["public_key"].startswith("O")
    assert changed["public_key"] != created["public_key"]


def test_apply_default_type(capsys):
    """Test apply without a type generates an account nkey."""
    code, output, _ = run(capsys, "apply", "nats_nkey.app")

    assert code == 0
    assert output["type"] == "account"
    assert output["public_key"].startswith("A")


def test_apply_invalid_type(capsys):
    """Test apply reports an invalid type and stores nothing."""
    from src.state_store import find_state

    code, output, err = run(capsys, "apply", "nats_nkey.app", "--type", "bogus")

    assert code == 1
    assert output is None
    assert "Invalid attribute value" in err
    assert find_state("nats_nkey.app") is None


def test_show_sensitive(capsys):
    """Test show prints the seed only when asked to."""
    run(capsys, "apply", "nats_nkey.app", "--type", "server")

    _, redacted, _ = run(capsys, "show", "nats_nkey.app")
    code, full, _ = run(capsys, "show", "nats_nkey.app", "--show-sensitive")

    assert code == 0
    assert redacted["private_key"] == "(sensitive value)"
    assert full["private_key"].startswith("SN")
    assert full["public_key"] == redacted["public_key"]


def test_show_missing(capsys):
    """Test show fails for an unknown address."""
    code, _, _ = run(capsys, "show", "nats_nkey.missing")

    assert code == 1


def test_import(capsys):
    """Test import records the identifier only."""
    code, output, _ = run(capsys, "import", "nats_nkey.legacy", "abc123")

    assert code == 0
    assert output["id"] == "abc123"
    assert output["public_key"] is None
    assert output["private_key"] is None

    code, _, _ = run(capsys, "import", "nats_nkey.legacy", "abc123")
    assert code == 1


def test_destroy(capsys):
    """Test destroy removes the stored state."""
    from src.state_store import find_state

    run(capsys, "apply", "nats_nkey.app")
    code, output, _ = run(capsys, "destroy", "nats_nkey.app")

    assert code == 0
    assert output is None
    assert find_state("nats_nkey.app") is None


@pytest.mark.parametrize("address", ["nats_nkey", "nats_jwt.app"])
def test_invalid_address(capsys, address):
    """Test malformed or unknown addresses are rejected."""
    code, _, _ = run(capsys, "apply", address)

    assert code == 1


def write_key_file(path, key):
    """Write ``key`` to ``path`` and return the path as a string."""
    path.write_text(key + "\n", encoding="utf-8")
    return str(path)


def test_apply_requires_state_encryption(capsys, monkeypatch):
    """Test apply refuses to store the seed unencrypted when required."""
    from src.state_store import find_state

    monkeypatch.setenv("REQUIRE_STATE_ENCRYPTION", "true")

    code, output, _ = run(capsys, "apply", "nats_nkey.app", "--type", "user")

    assert code == 1
    assert output is None
    assert find_state("nats_nkey.app") is None


def test_apply_with_malformed_key_file(capsys, monkeypatch, tmp_path):
    """Test a key file of the wrong length fails the command."""
    from src.state_store import find_state

    monkeypatch.setenv(
        "STATE_ENCRYPTION_KEY_FILE", write_key_file(tmp_path / "state.key", "short")
    )

    code, output, _ = run(capsys, "apply", "nats_nkey.app")

    assert code == 1
    assert output is None
    assert find_state("nats_nkey.app") is None


def test_apply_with_missing_key_file(capsys, monkeypatch, tmp_path):
    """Test a configured key file that does not exist fails the command."""
    from src.state_store import find_state

    monkeypatch.setenv("STATE_ENCRYPTION_KEY_FILE", str(tmp_path / "missing.key"))

    code, _, _ = run(capsys, "apply", "nats_nkey.app")

    assert code == 1
    assert find_state("nats_nkey.app") is None


def test_show_with_wrong_key(capsys, monkeypatch, tmp_path):
    """Test encrypted state read with another key fails the command."""
    monkeypatch.setenv(
        "STATE_ENCRYPTION_KEY_FILE",
        write_key_file(tmp_path / "first.key", Fernet.generate_key().decode()),
    )
    code, _, _ = run(capsys, "apply", "nats_nkey.app", "--type", "user")
    assert code == 0

    monkeypatch.setenv(
        "STATE_ENCRYPTION_KEY_FILE",
        write_key_file(tmp_path / "second.key", Fernet.generate_key().decode()),
    )
    code, output, _ = run(capsys, "show", "nats_nkey.app")

    assert code == 1
    assert output is None


def test_show_encrypted_state_without_key(capsys, monkeypatch, tmp_path):
    """Test encrypted state cannot be shown once the key is unset."""
    monkeypatch.setenv(
        "STATE_ENCRYPTION_KEY_FILE",
        write_key_file(tmp_path / "state.key", Fernet.generate_key().decode()),
    )
    run(capsys, "apply", "nats_nkey.app")
    monkeypatch.delenv("STATE_ENCRYPTION_KEY_FILE")

    code, output, _ = run(capsys, "show", "nats_nkey.app")

    assert code == 1
    assert output is None


def test_apply_after_import_generates_keys(capsys):
    """Test the first apply on an imported resource generates keys."""
    run(capsys, "import", "nats_nkey.legacy", "abc123")

    code, output, _ = run(capsys, "apply", "nats_nkey.legacy", "--type", "user")

    assert code == 0
    assert output["public_key"].startswith("U")
    assert output["id"] == output["public_key"]
