from sqlalchemy import Column, Integer, Float, String, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base


class GradeDocument(Base):
    __tablename__ = "grade_documents"  # 학생-반 단위 성적 문서

    id = Column(Integer, primary_key=True, index=True)     # 문서 고유 ID (Primary Key)
    student_id = Column(Integer, nullable=False, index=True)  # 학생 ID
    class_id = Column(String(50), nullable=False, index=True)  # 반 ID

    # ==========================================================
    # [관계 설정]
    # ==========================================================

    # ✅ 점수 목록 (1:N)
    #    - 문서 삭제 시 점수도 함께 삭제
    scores = relationship(
        "GradeScore",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="GradeScore.id",
    )


class GradeScore(Base):
    __tablename__ = "grade_scores"  # 개별 점수 테이블

    id = Column(Integer, primary_key=True, index=True)     # 점수 고유 ID
    document_id = Column(Integer, ForeignKey("grade_documents.id"), nullable=False)
    type = Column(String(30), nullable=False)              # 유형 (exam / quiz / homework ...)
    score = Column(Float, nullable=False)                  # 점수

    document = relationship("GradeDocument", back_populates="scores")
