import logging
import pytest

from migrations.config import MigrationConfig, configure_logging
from migrations.errors import MigrationError

KEYS = ["NETWORK", "RPC_URL", "PRIVATE_KEY", "CHAIN_ID", "DEPLOYMENT_FILE", "ARTIFACTS_DIR",
        "GAS_LIMIT", "TX_TIMEOUT", "POA_MIDDLEWARE", "LOG_FILE", "USER_CONTRACT", "MIGRATION_OPTIONS"]


def clear_env(monkeypatch):
    for key in KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_defaults(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    config = MigrationConfig.from_env(str(tmp_path / "missing.env"))
    assert config.network == "development"
    assert config.rpc_url == "http://localhost:8545"
    assert config.private_key is None
    assert config.chain_id is None
    assert config.tx_timeout == 300
    assert config.poa_middleware is True
    assert config.options == ()
    assert config.aliases == {"UserContract": "Roles2LibraryAdapter"}


def test_from_environment(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.setenv("NETWORK", "kovan")
    monkeypatch.setenv("CHAIN_ID", "42")
    monkeypatch.setenv("GAS_LIMIT", "6700000")
    monkeypatch.setenv("POA_MIDDLEWARE", "false")
    monkeypatch.setenv("USER_CONTRACT", "Marketplace")
    monkeypatch.setenv("MIGRATION_OPTIONS", "events_history, user_contract_storage_access,")

    config = MigrationConfig.from_env(str(tmp_path / "missing.env"))
    assert config.network == "kovan"
    assert config.chain_id == 42
    assert config.gas_limit == 6700000
    assert config.poa_middleware is False
    assert config.aliases["UserContract"] == "Marketplace"
    assert config.options == ("events_history", "user_contract_storage_access")


def test_dotenv_file(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    env_file = tmp_path / ".env"
    env_file.write_text("RPC_URL=http://node:8545\nTX_TIMEOUT=60\n")
    config = MigrationConfig.from_env(str(env_file))
    assert config.rpc_url == "http://node:8545"
    assert config.tx_timeout == 60


@pytest.mark.parametrize("key", ["TX_TIMEOUT", "GAS_LIMIT", "CHAIN_ID"])
def test_non_integer_setting_is_rejected(monkeypatch, tmp_path, key):
    clear_env(monkeypatch)
    monkeypatch.setenv(key, "soon")
    with pytest.raises(MigrationError) as excinfo:
        MigrationConfig.from_env(str(tmp_path / "missing.env"))
    assert key in str(excinfo.value)


def test_configure_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved, level = root.handlers[:], root.level
    root.handlers = []
    try:
        log_file = tmp_path / "migrations.log"
        configure_logging(str(log_file))
        logging.getLogger("migrations.test").info("[MIGRATION] [1] Roles Library: #deployed")
        for handler in root.handlers:
            handler.flush()
        assert "Roles Library: #deployed" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved
        root.setLevel(level)
