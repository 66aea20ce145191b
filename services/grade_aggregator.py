"""
services/grade_aggregator.py

- 학생별 원본 성적 문서 → 가중 평균 / 반 통계 계산 파이프라인
- 단계:
  1) expand_records       : 문서의 scores 배열을 (학생, 반, 유형, 점수) 레코드로 펼침
  2) average_by_category  : (학생, 반, 유형) 단위 평균
  3) compose_weighted     : 유형별 가중치(시험 50% / 퀴즈 30% / 과제 20%) 합산
  4) summarize_cohort     : 70점 초과 학생 수 / 비율 (Mode A)
     list_class_averages  : 특정 학생의 반별 가중 평균 (Mode B)
- DB/HTTP 와 무관한 순수 함수들로만 구성
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from schemas.grades import ClassAverage, CohortSummary
from services.exceptions import EmptyCohortError, MalformedRecordError

logger = logging.getLogger(__name__)

ClassId = Union[int, str]


class Category(str, Enum):
    EXAM = "exam"
    QUIZ = "quiz"
    HOMEWORK = "homework"


# ==========================================================
# [가중치] 시험 50% / 퀴즈 30% / 과제 20%
# - 목록에 없는 유형은 0
# ==========================================================
CATEGORY_WEIGHTS: Dict[str, float] = {
    Category.EXAM.value: 0.5,
    Category.QUIZ.value: 0.3,
    Category.HOMEWORK.value: 0.2,
}

# 고득점 기준 (초과만 인정, 설정값 아님)
HIGH_SCORE_THRESHOLD = 70


@dataclass(frozen=True)
class ScoreRecord:
    student_id: int
    class_id: ClassId
    category: str
    score: float


@dataclass(frozen=True)
class CategoryAverage:
    student_id: int
    class_id: ClassId
    category: str
    average_score: float


@dataclass(frozen=True)
class CompositeScore:
    student_id: int
    class_id: ClassId
    weighted_average: float


def category_weight(category: Any) -> float:
    """유형 → 가중치. 알 수 없는 유형은 예외 없이 0"""
    if isinstance(category, Category):
        category = category.value
    return CATEGORY_WEIGHTS.get(category, 0.0)


# ==========================================================
# [내부] dict / ORM 객체 / pydantic 모델 공통 필드 접근
# ==========================================================
_MISSING = object()


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, _MISSING)
    return getattr(obj, name, _MISSING)


def _required(obj: Any, name: str, index: int) -> Any:
    value = _field(obj, name)
    if value is _MISSING or value is None:
        raise MalformedRecordError(name, index)
    return value


def same_id(left: Any, right: Any) -> bool:
    # 경로 파라미터는 문자열, 저장값은 정수일 수 있음
    return left == right or str(left) == str(right)


# ==========================================================
# [1단계] Record Expansion
# ==========================================================
def expand_records(documents: Iterable[Any]) -> List[ScoreRecord]:
    """
    학생 문서의 scores 배열을 펼쳐서 ScoreRecord 목록으로 반환
    - scores 가 빈 학생은 레코드 0개 (이후 집계에서 자연스럽게 제외)
    - 필수 필드 누락 시 MalformedRecordError
    """
    records: List[ScoreRecord] = []
    for index, doc in enumerate(documents):
        student_id = _required(doc, "student_id", index)
        class_id = _required(doc, "class_id", index)
        scores = _required(doc, "scores", index)

        for entry in scores:
            category = _required(entry, "type", index)
            score = _required(entry, "score", index)
            if isinstance(category, Category):
                category = category.value
            records.append(ScoreRecord(student_id, class_id, category, float(score)))

    logger.debug(f"expanded {len(records)} score records")
    return records


# ==========================================================
# [2단계] Category Averager
# ==========================================================
def average_by_category(
    records: Iterable[ScoreRecord],
    class_id: Optional[ClassId] = None,
    student_id: Optional[int] = None,
) -> List[CategoryAverage]:
    """
    (학생, 반, 유형) 단위 산술 평균
    - class_id / student_id 범위 필터는 그룹핑 전에 적용
    """
    totals: Dict[Tuple[int, ClassId, str], List[float]] = defaultdict(lambda: [0.0, 0])

    for record in records:
        if class_id is not None and not same_id(record.class_id, class_id):
            continue
        if student_id is not None and not same_id(record.student_id, student_id):
            continue
        acc = totals[(record.student_id, record.class_id, record.category)]
        acc[0] += record.score
        acc[1] += 1

    averages = [
        CategoryAverage(sid, cid, category, total / count)
        for (sid, cid, category), (total, count) in totals.items()
    ]
    logger.debug(f"computed {len(averages)} category averages")
    return averages


# ==========================================================
# [3단계] Weighted Composer
# ==========================================================
def compose_weighted(averages: Iterable[CategoryAverage]) -> List[CompositeScore]:
    """
    (학생, 반) 별로 유형 평균 × 가중치를 합산
    - 없는 유형은 0으로 취급 (가중치 재정규화 없음)
    """
    sums: Dict[Tuple[int, ClassId], float] = {}
    for avg in averages:
        key = (avg.student_id, avg.class_id)
        sums[key] = sums.get(key, 0.0) + avg.average_score * category_weight(avg.category)

    return [CompositeScore(sid, cid, total) for (sid, cid), total in sums.items()]


# ==========================================================
# [4단계] Cohort Summarizer
# ==========================================================
def summarize_cohort(composites: Iterable[CompositeScore]) -> CohortSummary:
    """Mode A: 전체/반 단위 고득점자 통계. 대상이 없으면 EmptyCohortError"""
    scores = [c.weighted_average for c in composites]
    total = len(scores)
    if total == 0:
        raise EmptyCohortError()

    high = sum(1 for s in scores if s > HIGH_SCORE_THRESHOLD)
    return CohortSummary(
        total_students=total,
        high_scorers=high,
        percentage_high_scorers=high / total * 100,
    )


def list_class_averages(
    averages: Iterable[CategoryAverage], student_id: int
) -> List[ClassAverage]:
    """Mode B: 한 학생의 반별 가중 평균 (처음 등장한 반 순서 유지)"""
    own = [a for a in averages if same_id(a.student_id, student_id)]
    return [
        ClassAverage(class_id=c.class_id, avg=c.weighted_average)
        for c in compose_weighted(own)
    ]


# ==========================================================
# [진입점] 조회 범위별 파이프라인
# ==========================================================
def compute_cohort_stats(
    documents: Iterable[Any], class_id: Optional[ClassId] = None
) -> List[CohortSummary]:
    """
    전체(class_id=None) 또는 반 단위 통계
    - 학생이 0명이면 빈 리스트 반환
    """
    averages = average_by_category(expand_records(documents), class_id=class_id)
    try:
        summary = summarize_cohort(compose_weighted(averages))
    except EmptyCohortError:
        logger.info(f"empty cohort: class_id={class_id}")
        return []

    logger.info(
        f"cohort stats: class_id={class_id} "
        f"total={summary.total_students} high={summary.high_scorers}"
    )
    return [summary]


def compute_learner_class_averages(
    documents: Iterable[Any], student_id: int
) -> List[ClassAverage]:
    """학생 단위 반별 가중 평균"""
    averages = average_by_category(expand_records(documents), student_id=student_id)
    result = list_class_averages(averages, student_id)
    logger.info(f"learner {student_id}: {len(result)} class averages")
    return result
