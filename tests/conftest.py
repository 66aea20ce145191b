import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from main import app
from models.grades import GradeDocument, GradeScore


@pytest.fixture
def db_session():
    # 테스트마다 독립된 인메모리 SQLite
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def add_document(db_session):
    def _add(student_id, class_id, scores):
        doc = GradeDocument(
            student_id=student_id,
            class_id=str(class_id),
            scores=[GradeScore(type=t, score=s) for t, s in scores],
        )
        db_session.add(doc)
        db_session.commit()
        return doc

    return _add
