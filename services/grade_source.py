"""
services/grade_source.py

- 집계 파이프라인에 원본 성적 문서를 공급하는 저장소 어댑터
- 조회 범위(GradeScope): 전체 / 반(class_id) / 학생(student_id)
- 저장소 오류는 SourceUnavailable 하나로 감싸서 올림 (재시도 없음)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.grades import GradeDocument
from services.exceptions import SourceUnavailable
from services.grade_aggregator import same_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeScope:
    class_id: Optional[Union[int, str]] = None
    student_id: Optional[int] = None


class GradeSource(ABC):
    @abstractmethod
    def fetch(self, scope: GradeScope) -> List[Any]: ...


class SqlGradeSource(GradeSource):
    """grade_documents / grade_scores 테이블에서 문서 조회"""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, scope: GradeScope) -> List[GradeDocument]:
        try:
            query = self.db.query(GradeDocument).options(selectinload(GradeDocument.scores))
            if scope.class_id is not None:
                query = query.filter(GradeDocument.class_id == str(scope.class_id))
            if scope.student_id is not None:
                query = query.filter(GradeDocument.student_id == scope.student_id)
            documents = query.order_by(GradeDocument.id).all()
        except SQLAlchemyError as e:
            logger.error(f"성적 문서 조회 실패: scope={scope} error={e}")
            raise SourceUnavailable(f"Failed to load grade documents: {e.__class__.__name__}") from e

        logger.debug(f"성적 문서 {len(documents)}건 조회: scope={scope}")
        return documents


class InMemoryGradeSource(GradeSource):
    """메모리 상의 문서 목록 (dict / pydantic) 에서 범위 필터링"""

    def __init__(self, documents: Iterable[Any]):
        self.documents = list(documents)

    @staticmethod
    def _get(doc: Any, name: str) -> Any:
        return doc.get(name) if isinstance(doc, dict) else getattr(doc, name, None)

    def fetch(self, scope: GradeScope) -> List[Any]:
        result = self.documents
        if scope.class_id is not None:
            result = [d for d in result if same_id(self._get(d, "class_id"), scope.class_id)]
        if scope.student_id is not None:
            result = [d for d in result if same_id(self._get(d, "student_id"), scope.student_id)]
        return result
