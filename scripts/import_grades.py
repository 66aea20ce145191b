import argparse
import json
import logging
from pathlib import Path
from typing import List

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.grades import GradeDocument, GradeScore  # ✅ 모델 import
from schemas.grades import GradeDocumentIn
from services.grade_aggregator import compute_cohort_stats
from services.grade_source import GradeScope, InMemoryGradeSource

logger = logging.getLogger(__name__)

JSON_PATH = "data/grades.json"  # ✅ 기본 파일 경로


def load_documents(path: str) -> List[GradeDocumentIn]:
    """
    JSON 배열 또는 JSON Lines 파일 → GradeDocumentIn 목록
    - 원본 컬렉션 형식: {"student_id", "class_id", "scores": [{"type", "score"}]}
    - learner_id 키는 student_id 로 취급
    """
    text = Path(path).read_text(encoding="utf-8-sig").strip()
    if not text:
        return []
    if text.startswith("["):
        rows = json.loads(text)
    else:
        rows = [json.loads(line) for line in text.splitlines() if line.strip()]
    return [GradeDocumentIn.model_validate(row) for row in rows]


def migrate_grades(documents: List[GradeDocumentIn], db: Session) -> int:
    for doc in documents:
        db.add(
            GradeDocument(
                student_id=doc.student_id,                  # 학생 ID
                class_id=str(doc.class_id),                 # 반 ID
                scores=[GradeScore(type=s.type, score=s.score) for s in doc.scores],
            )
        )
    db.commit()
    return len(documents)


def main(argv=None):
    parser = argparse.ArgumentParser(description="성적 문서 JSON → DB 적재")
    parser.add_argument("path", nargs="?", default=JSON_PATH)
    parser.add_argument("--dry-run", action="store_true", help="DB 적재 없이 전체 통계만 출력")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    documents = load_documents(args.path)

    if args.dry_run:
        source = InMemoryGradeSource(documents)
        stats = compute_cohort_stats(source.fetch(GradeScope()))
        print(json.dumps([s.model_dump() for s in stats], ensure_ascii=False, indent=2))
        return

    init_db()
    db: Session = SessionLocal()
    try:
        count = migrate_grades(documents, db)
    finally:
        db.close()
    print(f"✅ 성적 문서 {count}건 → DB 적재 완료")


if __name__ == "__main__":
    main()
