import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple
from dotenv import load_dotenv

from .errors import MigrationError

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise MigrationError(f"{name} must be an integer, got '{value}'") from None


@dataclass
class MigrationConfig:
    """Settings for a migration run, read from the environment (and .env)."""

    network: str = "development"
    rpc_url: str = "http://localhost:8545"
    private_key: Optional[str] = None
    chain_id: Optional[int] = None
    deployment_file: str = "deployment.json"
    artifacts_dir: str = os.path.join("build", "contracts")
    gas_limit: Optional[int] = None
    tx_timeout: int = 300
    poa_middleware: bool = True
    log_file: str = "migrations.log"
    user_contract: str = "Roles2LibraryAdapter"
    options: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "MigrationConfig":
        # Load environment variables from .env file
        load_dotenv(dotenv_path)

        options = tuple(
            opt.strip() for opt in os.getenv("MIGRATION_OPTIONS", "").split(",") if opt.strip()
        )
        return cls(
            network=os.getenv("NETWORK", "development"),
            rpc_url=os.getenv("RPC_URL", "http://localhost:8545"),
            private_key=os.getenv("PRIVATE_KEY") or None,
            chain_id=_env_int("CHAIN_ID"),
            deployment_file=os.getenv("DEPLOYMENT_FILE", "deployment.json"),
            artifacts_dir=os.getenv("ARTIFACTS_DIR", os.path.join("build", "contracts")),
            gas_limit=_env_int("GAS_LIMIT"),
            tx_timeout=_env_int("TX_TIMEOUT", 300),
            poa_middleware=_env_flag("POA_MIDDLEWARE", "true"),
            log_file=os.getenv("LOG_FILE", "migrations.log"),
            user_contract=os.getenv("USER_CONTRACT", "Roles2LibraryAdapter"),
            options=options,
        )

    @property
    def aliases(self):
        return {"UserContract": self.user_contract}


def configure_logging(log_file: Optional[str] = None, level: int = logging.INFO):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, handlers=handlers)
