import logging
from typing import Any, Dict, Iterable, Optional

from .artifacts import ArtifactStore, ContractArtifact
from .registry import DeploymentRegistry

logger = logging.getLogger(__name__)


class ContractHandle:
    """A deployed contract: its address plus the interface to call it."""

    def __init__(self, deployer: "Deployer", name: str, artifact: ContractArtifact, address: str):
        self.deployer = deployer
        self.name = name
        self.artifact = artifact
        self.address = address

    def transact(self, function: str, *args):
        logger.info(f"{self.name}.{function}{args}")
        encoded = self.artifact.function_args(function, args)
        return self.deployer.client.transact(self.address, self.artifact.abi, function, encoded)

    def selector(self, function: str) -> bytes:
        return self.artifact.selector(function)

    def __repr__(self):
        return f"<ContractHandle {self.name} at {self.address}>"


class Deployer:
    """
    Handle passed to every migration step.

    Lives for one migration run and replaces the process-wide contract
    registry: deployments are looked up and recorded through `registry`.
    """

    def __init__(self, client, registry: DeploymentRegistry, artifacts: ArtifactStore,
                 aliases: Optional[Dict[str, str]] = None, options: Iterable[str] = ()):
        self.client = client
        self.registry = registry
        self.artifacts = artifacts
        self.aliases = dict(aliases or {})
        self.options = frozenset(options)

    @property
    def network(self) -> str:
        return self.registry.network

    def resolve_name(self, name: str) -> str:
        return self.aliases.get(name, name)

    def enabled(self, option: Optional[str]) -> bool:
        return option is None or option in self.options

    def deployed(self, name: str) -> ContractHandle:
        contract_name = self.resolve_name(name)
        address = self.registry.require_address(contract_name)
        return ContractHandle(self, contract_name, self.artifacts.require(contract_name), address)

    def deploy(self, name: str, *args: Any) -> ContractHandle:
        """
        Deploy a contract unless this network already has one registered.

        Args:
            name: Artifact name (or alias such as UserContract)
            *args: Constructor arguments

        Returns:
            Handle of the new or previously deployed instance
        """
        contract_name = self.resolve_name(name)
        existing = self.registry.address_of(contract_name)
        if existing is not None:
            logger.info(f"{contract_name} already deployed at {existing}, reusing")
            return self.deployed(contract_name)

        artifact = self.artifacts.require(contract_name)
        logger.info(f"Deploying {contract_name}...")
        address = self.client.deploy(artifact, artifact.constructor_args(args))
        self.registry.register(contract_name, address)
        self.registry.save()
        return self.deployed(contract_name)
