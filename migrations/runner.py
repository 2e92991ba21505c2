import pkgutil
import logging
import importlib
from typing import List, Optional, Sequence

from .deployer import Deployer
from .errors import MigrationError
from .manifest import Migration

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "migrations.templates"


def load_migrations(package: str = DEFAULT_PACKAGE) -> List[Migration]:
    """Collects the `migration` object of every step module in `package`, ordered by number."""
    pkg = importlib.import_module(package)
    migrations = []
    for module_info in pkgutil.iter_modules(pkg.__path__):
        module = importlib.import_module(f"{package}.{module_info.name}")
        migration = getattr(module, "migration", None)
        if isinstance(migration, Migration):
            migrations.append(migration)

    migrations.sort(key=lambda m: m.number)
    numbers = [m.number for m in migrations]
    duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
    if duplicates:
        raise MigrationError(f"Duplicate migration numbers in {package}: {duplicates}")
    return migrations


class MigrationRunner:
    def __init__(self, deployer: Deployer, accounts: Sequence[str], migrations: Sequence[Migration]):
        self.deployer = deployer
        self.accounts = list(accounts)
        self.migrations = sorted(migrations, key=lambda m: m.number)

    @property
    def registry(self):
        return self.deployer.registry

    def pending(self, from_step: Optional[int] = None, to_step: Optional[int] = None) -> List[Migration]:
        start = from_step if from_step is not None else self.registry.last_completed + 1
        return [
            m for m in self.migrations
            if m.number >= start and (to_step is None or m.number <= to_step)
        ]

    def _execute(self, migration: Migration):
        try:
            migration(self.deployer, self.deployer.network, self.accounts)
        except Exception as e:
            logger.error(f"Migration {migration.number} failed: {e}")
            raise

    def run(self, from_step: Optional[int] = None, to_step: Optional[int] = None) -> List[int]:
        """
        Execute pending steps in ascending order.

        Args:
            from_step: Re-run starting at this step even if it already completed
            to_step: Stop after this step

        Returns:
            Numbers of the steps that ran
        """
        todo = self.pending(from_step, to_step)
        if not todo:
            logger.info(f"Network '{self.deployer.network}' is up to date")
            return []

        executed = []
        for migration in todo:
            self._execute(migration)
            if migration.number > self.registry.last_completed:
                self.registry.mark_completed(migration.number)
            self.registry.save()
            executed.append(migration.number)
        return executed

    def run_step(self, number: int):
        matches = [m for m in self.migrations if m.number == number]
        if not matches:
            raise MigrationError(f"No migration numbered {number}")
        self._execute(matches[0])
        if number > self.registry.last_completed:
            self.registry.mark_completed(number)
        self.registry.save()
