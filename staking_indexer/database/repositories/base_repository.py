# staking_indexer/database/repositories/base_repository.py

from typing import TypeVar, Generic, Type, List, Optional, Any, Dict, Iterable, Set

from sqlalchemy.orm import Session

from ...core.logging import IndexerLogger

T = TypeVar('T')


class BaseRepository(Generic[T]):
    def __init__(self, db_manager, model_class: Type[T]):
        self.db_manager = db_manager
        self.model_class = model_class
        self.logger = IndexerLogger.get_logger(f'database.repository.{model_class.__name__.lower()}')

    def get_by_id(self, session: Session, id: Any) -> Optional[T]:
        try:
            return session.get(self.model_class, id)
        except Exception as e:
            self.logger.error(f"Error getting {self.model_class.__name__} by ID {id}: {e}")
            raise

    def get_by_ids(self, session: Session, ids: Iterable[Any]) -> List[T]:
        ids = list(ids)
        if not ids:
            return []
        try:
            return session.query(self.model_class).filter(self.model_class.id.in_(ids)).all()
        except Exception as e:
            self.logger.error(f"Error getting {len(ids)} {self.model_class.__name__} records by ID: {e}")
            raise

    def existing_ids(self, session: Session, ids: Iterable[Any]) -> Set[Any]:
        ids = list(ids)
        if not ids:
            return set()
        try:
            rows = session.query(self.model_class.id).filter(self.model_class.id.in_(ids)).all()
            return {row[0] for row in rows}
        except Exception as e:
            self.logger.error(f"Error checking existing {self.model_class.__name__} IDs: {e}")
            raise

    def merge(self, session: Session, instance: T) -> T:
        """Insert or update by primary key"""
        try:
            return session.merge(instance)
        except Exception as e:
            self.logger.error(f"Error merging {self.model_class.__name__}: {e}")
            raise

    def bulk_create_skip_existing(self, session: Session, items: List[Dict]) -> int:
        if not items:
            return 0

        try:
            existing = self.existing_ids(session, [item['id'] for item in items])
            new_items = [item for item in items if item['id'] not in existing]

            if new_items:
                session.add_all(self.model_class(**item) for item in new_items)
                session.flush()

            self.logger.debug(
                f"Bulk created {len(new_items)} {self.model_class.__name__} records, "
                f"skipped {len(items) - len(new_items)} existing"
            )
            return len(new_items)

        except Exception as e:
            self.logger.error(f"Error bulk creating {self.model_class.__name__}: {e}")
            raise

    def count(self, session: Session) -> int:
        try:
            return session.query(self.model_class).count()
        except Exception as e:
            self.logger.error(f"Error counting {self.model_class.__name__}: {e}")
            raise
