# staking_indexer/database/connection.py

from typing import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, Engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from ..core.logging import IndexerLogger, log_with_context, INFO, DEBUG, ERROR
from ..types import DatabaseConfig
from .base import Base


class DatabaseManager:
    def __init__(self, config: DatabaseConfig):
        if not config:
            raise ValueError("DatabaseConfig is required")

        self.config = config
        self.logger = IndexerLogger.get_logger(f'database.{self.__class__.__name__.lower()}')
        self._engine = None
        self._session_factory = None
        self._repositories = {}  # Cache for repository instances

        log_with_context(self.logger, INFO, "DatabaseManager initialized",
                         db_url_host=self._extract_host_from_url(config.url))

    def _extract_host_from_url(self, url: str) -> str:
        if url.startswith("sqlite"):
            return "sqlite"
        if '@' in url and '/' in url:
            after_at = url.split('@')[1]
            return after_at.split('/')[0]
        return "unknown"

    @property
    def is_sqlite(self) -> bool:
        return self.config.url.startswith("sqlite")

    def initialize(self) -> None:
        if self._engine is not None:
            self.logger.warning("Database already initialized")
            return

        try:
            self.logger.info("Initializing database engine")

            if self.is_sqlite:
                engine_kwargs = {"connect_args": {"check_same_thread": False}}
                if self.config.url in ("sqlite://", "sqlite:///:memory:"):
                    # One shared connection, otherwise every session sees an empty database
                    engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs = {
                    "poolclass": QueuePool,
                    "pool_size": self.config.pool_size,
                    "max_overflow": self.config.max_overflow,
                    "pool_timeout": 30,
                    "pool_recycle": 3600,  # Recycle connections after 1 hour
                }

            self._engine = create_engine(self.config.url, echo=self.config.echo, **engine_kwargs)

            self._session_factory = sessionmaker(
                bind=self._engine,
                expire_on_commit=False,  # Keep objects accessible after commit
            )

            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            log_with_context(self.logger, INFO, "Database initialized successfully",
                             pool_size=self.config.pool_size,
                             max_overflow=self.config.max_overflow)

        except Exception as e:
            log_with_context(self.logger, ERROR, "Failed to initialize database",
                             error=str(e),
                             exception_type=type(e).__name__)
            self._engine = None
            raise

    def create_schema(self) -> None:
        """Create all ledger tables that do not exist yet"""
        Base.metadata.create_all(self.engine)
        log_with_context(self.logger, INFO, "Database schema created",
                         tables=",".join(sorted(Base.metadata.tables)))

    def shutdown(self) -> None:
        self.logger.info("Shutting down database connections")

        if self._engine:
            self._engine.dispose()
            self._engine = None

        self._session_factory = None
        self._repositories.clear()

        self.logger.info("Database shutdown completed")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._session_factory

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        session = self.session_factory()
        try:
            log_with_context(self.logger, DEBUG, "Database session created")
            yield session
        except Exception as e:
            log_with_context(self.logger, ERROR, "Database session error, rolling back",
                             error=str(e),
                             exception_type=type(e).__name__)
            session.rollback()
            raise
        finally:
            session.close()
            log_with_context(self.logger, DEBUG, "Database session closed")

    @contextmanager
    def get_transaction(self) -> Generator[Session, None, None]:
        with self.get_session() as session:
            try:
                yield session
                session.commit()
                log_with_context(self.logger, DEBUG, "Database transaction committed")
            except Exception as e:
                session.rollback()
                log_with_context(self.logger, ERROR, "Database transaction rolled back",
                                 error=str(e),
                                 exception_type=type(e).__name__)
                raise

    def health_check(self) -> bool:
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            log_with_context(self.logger, ERROR, "Database health check failed",
                             error=str(e),
                             exception_type=type(e).__name__)
            return False

    # === Repositories ===

    def _get_or_create_repository(self, repo_class, repo_name):
        """Get cached repository or create new instance"""
        if repo_name not in self._repositories:
            self._repositories[repo_name] = repo_class(self)
        return self._repositories[repo_name]

    def get_staker_repo(self):
        from .repositories.staker_repository import StakerRepository
        return self._get_or_create_repository(StakerRepository, 'staker')

    def get_contract_repo(self):
        from .repositories.contract_repository import ContractRepository
        return self._get_or_create_repository(ContractRepository, 'contract')

    def get_transaction_repo(self):
        from .repositories.transaction_repository import TransactionRepository
        return self._get_or_create_repository(TransactionRepository, 'transaction')

    def get_checkpoint_repo(self):
        from .repositories.checkpoint_repository import CheckpointRepository
        return self._get_or_create_repository(CheckpointRepository, 'checkpoint')
