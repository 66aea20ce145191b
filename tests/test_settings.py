from config.settings import Settings


def test_sqlite_url_when_no_db_host(monkeypatch):
    monkeypatch.delenv("DB_HOST", raising=False)
    s = Settings(_env_file=None, SQLITE_PATH="/tmp/test.db")
    assert s.DATABASE_URL == "sqlite:////tmp/test.db"


def test_mysql_url_from_parts():
    s = Settings(
        _env_file=None,
        DB_USER="grader",
        DB_PASSWORD="pw",
        DB_HOST="db.local",
        DB_PORT=3307,
        DB_NAME="school",
    )
    assert s.DATABASE_URL == "mysql+pymysql://grader:pw@db.local:3307/school"


def test_cors_origins_split_from_string():
    s = Settings(_env_file=None, CORS_ORIGINS="http://a.com, http://b.com ,")
    assert s.CORS_ORIGINS == ["http://a.com", "http://b.com"]
