import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from lendtrack.main import app
from lendtrack.database import Base, get_db
from lendtrack.models.user import User
from lendtrack.routers import auth
from lendtrack.services.user_service import hash_password

TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def client():
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Ensure all connections share same in-memory DB
    )
    Base.metadata.create_all(engine)
    TestSession = sessionmaker(bind=engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    auth._login_attempts.clear()

    # Výchozí admin (id=1) a běžný uživatel bez práva zápisu (id=2)
    db = TestSession()
    db.add(User(username="admin", name="Administrátor", email="admin@test.com",
                hashed_password=hash_password("admin123"), role="admin"))
    db.add(User(username="host", name="Petr Svoboda", email="host@test.com",
                hashed_password=hash_password("host1234"), role="user"))
    db.commit()
    db.close()

    with TestClient(app) as c:
        res = c.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        assert res.status_code == 200
        yield c

    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)
