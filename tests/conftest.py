import json
import os
from unittest.mock import Mock

# Point the app at an in-memory database and leave Cal.com unconfigured before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CALCOM_API_KEY"] = ""
os.environ["CALCOM_WEBHOOK_SECRET"] = ""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dentistry_api.database import Base, SessionLocal, engine, get_db
from dentistry_api.main import app
from dentistry_api.routes.calcom import get_calcom_service
from dentistry_api.services.calcom_service import CalcomService

CALCOM_TEST_URL = "https://cal.test/v2"


@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class FakeCalcom:
    """Stands in for the Cal.com API: records requests and answers from a route table"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response] = {}

    def respond(self, method: str, path: str, status_code: int = 200, json_body=None, text=None):
        if text is not None:
            self.routes[(method, path)] = httpx.Response(status_code, text=text)
        else:
            self.routes[(method, path)] = httpx.Response(status_code, json=json_body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_calcom():
    return FakeCalcom()


@pytest.fixture
def calcom_service(fake_calcom):
    service = CalcomService(
        api_key="test-key",
        api_url=CALCOM_TEST_URL,
        transport=httpx.MockTransport(fake_calcom.handler),
    )
    app.dependency_overrides[get_calcom_service] = lambda: service
    return service


@pytest.fixture
def broken_db():
    """Real session served to the app, whose statements can be made to fail like a dropped connection"""
    session = SessionLocal()
    session.rollback = Mock(wraps=session.rollback)
    app.dependency_overrides[get_db] = lambda: session
    try:
        yield session
    finally:
        session.close()
