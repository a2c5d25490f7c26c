# staking_indexer/cli/context.py

from typing import Optional, Type, TypeVar

from ..core.container import IndexerContainer
from ..core.logging import IndexerLogger

T = TypeVar('T')


class CLIContext:
    """
    Lazily builds the indexer container for CLI commands.

    Commands may add overrides (batch size, start block, ...) until the first
    service is requested; after that the configuration is fixed.
    """

    def __init__(self, **overrides):
        self.logger = IndexerLogger.get_logger('cli.context')
        self._overrides = {k: v for k, v in overrides.items() if v is not None}
        self._container: Optional[IndexerContainer] = None

    def override(self, **overrides) -> None:
        if self._container is not None:
            raise RuntimeError("Indexer already created; overrides must come first")
        self._overrides.update({k: v for k, v in overrides.items() if v is not None})

    @property
    def container(self) -> IndexerContainer:
        if self._container is None:
            from .. import create_indexer
            self._container = create_indexer(**self._overrides)
        return self._container

    @property
    def config(self):
        return self.container.config

    def get(self, service_type: Type[T]) -> T:
        return self.container.get(service_type)

    def shutdown(self) -> None:
        if self._container is not None:
            self._container.shutdown()
            self._container = None
