import logging
from typing import Any, Dict, List, Optional, Sequence
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ContractArtifact
from .config import MigrationConfig
from .errors import MigrationError, TransactionFailedError

logger = logging.getLogger(__name__)


class ChainClient:
    """
    Blocking web3 client used by the deployer.

    Every call waits for its receipt before returning, so transactions land
    in program order.
    """

    def __init__(self, w3: Web3, account: Optional[Any] = None, gas_limit: Optional[int] = None,
                 chain_id: Optional[int] = None, tx_timeout: int = 300):
        self.w3 = w3
        self.account = account
        self.gas_limit = gas_limit
        self.chain_id = chain_id
        self.tx_timeout = tx_timeout

    @classmethod
    def from_config(cls, config: MigrationConfig) -> "ChainClient":
        """Connect to the node configured in RPC_URL"""
        try:
            w3 = Web3(Web3.HTTPProvider(config.rpc_url))
            if config.poa_middleware:
                w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            if not w3.is_connected():
                raise MigrationError(f"Could not connect to RPC URL: {config.rpc_url}")
            logger.info(f"Connected to blockchain at {config.rpc_url}")
        except MigrationError as e:
            logger.error(f"Failed to initialize Web3: {e}")
            raise

        account = None
        if config.private_key:
            account = w3.eth.account.from_key(config.private_key)
            logger.info(f"Using deployer account: {account.address}")

        return cls(w3, account=account, gas_limit=config.gas_limit,
                   chain_id=config.chain_id, tx_timeout=config.tx_timeout)

    def accounts(self) -> List[str]:
        if self.account is not None:
            return [self.account.address]
        accounts = list(self.w3.eth.accounts)
        if not accounts:
            raise MigrationError("Node exposes no unlocked accounts; set PRIVATE_KEY")
        return accounts

    def deploy(self, artifact: ContractArtifact, args: Sequence[Any]) -> str:
        if not artifact.deployable:
            raise MigrationError(f"{artifact.name} has no bytecode; is it an interface or abstract contract?")
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        receipt = self._send(factory.constructor(*args), f"deploy {artifact.name}")
        address = receipt['contractAddress']
        if not address:
            raise TransactionFailedError(f"deploy {artifact.name} returned no contract address")
        return address

    def transact(self, address: str, abi: List[Dict[str, Any]], function: str, args: Sequence[Any]):
        contract = self.w3.eth.contract(address=self.w3.to_checksum_address(address), abi=abi)
        return self._send(contract.functions[function](*args), f"{function} on {address}")

    def _tx_params(self, sender: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {'from': sender}
        if self.gas_limit is not None:
            params['gas'] = self.gas_limit
        if self.chain_id is not None:
            params['chainId'] = self.chain_id
        return params

    def _send(self, fn, description: str):
        if self.account is not None:
            params = self._tx_params(self.account.address)
            params['nonce'] = self.w3.eth.get_transaction_count(self.account.address)
            params['gasPrice'] = self.w3.eth.gas_price
            tx = fn.build_transaction(params)
            signed_tx = self.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        else:
            tx_hash = fn.transact(self._tx_params(self.accounts()[0]))

        logger.info(f"-> {description}: sent {tx_hash.hex()}")
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        if receipt['status'] != 1:
            raise TransactionFailedError(description, tx_hash.hex())
        logger.info(f"-> {description}: confirmed in block {receipt['blockNumber']}")
        return receipt
