from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import List, Union


class ScoreEntry(BaseModel):
    type: str                                # 점수 유형 (exam / quiz / homework, 그 외는 가중치 0)
    score: float                             # 점수 (0~100 기대, 강제하지 않음)

    model_config = ConfigDict(from_attributes=True)


class GradeDocumentIn(BaseModel):
    # 원본 컬렉션의 learner_id 키도 허용
    student_id: int = Field(validation_alias=AliasChoices("student_id", "learner_id"))
    class_id: Union[int, str]                # 반 ID (숫자 또는 문자열)
    scores: List[ScoreEntry] = []            # 점수 목록 (비어 있으면 집계에서 제외)

    model_config = ConfigDict(from_attributes=True)


class CohortSummary(BaseModel):
    total_students: int                      # 집계 대상 학생 수
    high_scorers: int                        # 가중 평균 70점 초과 학생 수
    percentage_high_scorers: float           # 고득점자 비율 (%)


class ClassAverage(BaseModel):
    class_id: Union[int, str]                # 반 ID
    avg: float                               # 해당 반 가중 평균
