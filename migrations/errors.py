from typing import Optional


class MigrationError(Exception):
    """Base class for everything that aborts a migration step."""


class ArtifactNotFoundError(MigrationError):
    pass


class DependencyNotFoundError(MigrationError):
    """Raised when a step needs a contract that was never deployed on the network."""

    def __init__(self, contract: str, network: str):
        super().__init__(f"{contract} has not been deployed to network '{network}'")
        self.contract = contract
        self.network = network


class TransactionFailedError(MigrationError):
    def __init__(self, description: str, tx_hash: Optional[str] = None):
        message = f"Transaction failed: {description}"
        if tx_hash:
            message += f" (tx {tx_hash})"
        super().__init__(message)
        self.description = description
        self.tx_hash = tx_hash
