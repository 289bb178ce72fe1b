"""
Document-style store interface over a SQLAlchemy session.

Collections are mapped model classes, predicates are SQLAlchemy filter
expressions and patches are plain dicts of attribute -> value. Every write
commits on its own; bulk_update and delete_many apply all their changes in a
single transaction. A failed write rolls the session back and surfaces as
InternalError.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from errors import InternalError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Store:
    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------

    def find_by_id(self, collection: Type[ModelT], id: Optional[str]) -> Optional[ModelT]:
        if not id:
            return None
        return self.db.get(collection, id)

    def find_one(self, collection: Type[ModelT], *predicates) -> Optional[ModelT]:
        return self.db.query(collection).filter(*predicates).first()

    def find_many(
        self,
        collection: Type[ModelT],
        *predicates,
        sort: Optional[Sequence[Any]] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
        options: Optional[Sequence[Any]] = None,
    ) -> List[ModelT]:
        query = self.db.query(collection).filter(*predicates)
        if options:
            query = query.options(*options)
        if sort:
            query = query.order_by(*sort)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_matching(self, collection: Type[ModelT], *predicates) -> int:
        return self.db.query(collection).filter(*predicates).count()

    # ---------- writes ----------

    def insert(self, doc: ModelT) -> ModelT:
        self.db.add(doc)
        self._commit(f"insert {type(doc).__name__}")
        self.db.refresh(doc)
        return doc

    def update_one(self, collection: Type[ModelT], id: str, patch: Dict[str, Any]) -> Optional[ModelT]:
        doc = self.find_by_id(collection, id)
        if doc is None:
            return None
        for key, value in patch.items():
            setattr(doc, key, value)
        self._commit(f"update {collection.__name__} {id}")
        self.db.refresh(doc)
        return doc

    def delete_one(self, collection: Type[ModelT], id: str) -> bool:
        doc = self.find_by_id(collection, id)
        if doc is None:
            return False
        self.db.delete(doc)
        self._commit(f"delete {collection.__name__} {id}")
        return True

    def delete_many(self, collection: Type[ModelT], *predicates) -> int:
        deleted = self.db.query(collection).filter(*predicates).delete(synchronize_session="fetch")
        self._commit(f"delete_many {collection.__name__}")
        return deleted

    def bulk_update(self, collection: Type[ModelT], updates: Iterable[Tuple[str, Dict[str, Any]]]) -> int:
        """
        Apply several patches as one all-or-nothing transaction.

        Raises:
            InternalError: if any referenced document is missing or the commit fails;
                no patch is applied in that case
        """
        count = 0
        try:
            for id, patch in updates:
                doc = self.db.get(collection, id)
                if doc is None:
                    raise InternalError(f"{collection.__name__} {id} disappeared during bulk update")
                for key, value in patch.items():
                    setattr(doc, key, value)
                count += 1
        except InternalError:
            self.db.rollback()
            raise
        self._commit(f"bulk_update {collection.__name__} ({count} documents)")
        return count

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store {operation} failed: {e}")
            raise InternalError("Database error") from e


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)
