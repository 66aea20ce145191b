"""
services/exceptions.py

- 성적 집계 파이프라인에서 사용하는 예외 모음
- middlewares/error_handler.py 에서 code 값을 그대로 에러 응답에 사용
"""

from typing import Optional


class GradeAggregationError(Exception):
    """집계 관련 예외의 공통 부모"""
    code = "AGGREGATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyCohortError(GradeAggregationError):
    """집계 대상 학생이 0명 (비율 계산 불가)"""
    code = "EMPTY_COHORT"

    def __init__(self, message: str = "No students in cohort"):
        super().__init__(message)


class MalformedRecordError(GradeAggregationError):
    """원본 성적 문서에 필수 필드가 없음"""
    code = "MALFORMED_RECORD"

    def __init__(self, field: str, record_index: Optional[int] = None):
        where = f" (record #{record_index})" if record_index is not None else ""
        super().__init__(f"Missing required field '{field}'{where}")
        self.field = field
        self.record_index = record_index


class SourceUnavailable(GradeAggregationError):
    """성적 저장소 조회 실패 - 재시도 없이 그대로 전달"""
    code = "SOURCE_UNAVAILABLE"

    def __init__(self, message: str = "Grade source unavailable"):
        super().__init__(message)
