from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.common import SuccessEnvelope
from schemas.grades import ClassAverage, CohortSummary
from services.grade_aggregator import compute_cohort_stats, compute_learner_class_averages
from services.grade_source import GradeScope, SqlGradeSource

router = APIRouter(prefix="/grades", tags=["grades-aggregation"])


# ✅ [STATS] 전체 학생 중 가중 평균 70점 초과 학생 수/비율
@router.get("/stats", response_model=SuccessEnvelope[List[CohortSummary]])
def get_stats(db: Session = Depends(get_db)):
    documents = SqlGradeSource(db).fetch(GradeScope())
    return SuccessEnvelope(data=compute_cohort_stats(documents))


# ✅ [STATS/CLASS] 특정 반 기준 동일 통계
# - 학생이 없는 반이면 빈 리스트
@router.get("/stats/{class_id}", response_model=SuccessEnvelope[List[CohortSummary]])
def get_class_stats(class_id: str, db: Session = Depends(get_db)):
    documents = SqlGradeSource(db).fetch(GradeScope(class_id=class_id))
    return SuccessEnvelope(data=compute_cohort_stats(documents, class_id=class_id))


# ✅ [LEARNER] 학생 한 명의 반별 가중 평균
# - 성적이 없는 학생이면 빈 리스트
@router.get("/learner/{learner_id}/avg-class", response_model=SuccessEnvelope[List[ClassAverage]])
def get_learner_class_averages(learner_id: int, db: Session = Depends(get_db)):
    documents = SqlGradeSource(db).fetch(GradeScope(student_id=learner_id))
    return SuccessEnvelope(data=compute_learner_class_averages(documents, learner_id))
