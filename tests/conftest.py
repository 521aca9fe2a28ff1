"""
Comanda test fixtures

The app runs in-process over httpx's ASGITransport against a throwaway
SQLite file. Redis is replaced by an in-memory double and Celery runs
tasks eagerly, so no external services are needed.
"""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="comanda-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'comanda.db')}"
os.environ["DATABASE_POOL_ENABLED"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["METRICS_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["TIMEZONE"] = "America/Lima"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from jose import jwt  # noqa: E402

from comanda.core import redis_client  # noqa: E402
from comanda.core.config import get_settings  # noqa: E402
from comanda.db.database import AsyncSessionLocal, Base, engine  # noqa: E402
from comanda.main import app  # noqa: E402
from comanda.models.employee import Employee, EmployeeRole  # noqa: E402

settings = get_settings()


# ─── Redis double ──────────────────────────────────────────────────────────────
class FakePubSub:
    def __init__(self, redis: "FakeRedis"):
        self.redis = redis
        self.channels: set[str] = set()
        self.queue: list[dict] = []

    async def subscribe(self, *channels):
        self.channels.update(channels)
        self.redis.subscribers.append(self)

    async def unsubscribe(self, *channels):
        self.channels.difference_update(channels)

    async def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        return self.queue.pop(0) if self.queue else None

    async def aclose(self):
        if self in self.redis.subscribers:
            self.redis.subscribers.remove(self)


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.published: list[tuple[str, str]] = []
        self.subscribers: list[FakePubSub] = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis is down")

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def set(self, key, value):
        self._check()
        self.store[key] = value

    async def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value

    async def delete(self, *keys):
        self._check()
        for key in keys:
            self.store.pop(key, None)

    async def publish(self, channel, message):
        self._check()
        self.published.append((channel, message))
        receivers = [sub for sub in self.subscribers if channel in sub.channels]
        for sub in receivers:
            sub.queue.append({"type": "message", "channel": channel, "data": message})
        return len(receivers)

    async def ping(self):
        self._check()
        return True

    def pubsub(self):
        return FakePubSub(self)

    async def aclose(self):
        pass


# ─── Auth helpers ──────────────────────────────────────────────────────────────
def make_token(role: str = "admin", sub: str = "admin", name: str = "Admin User") -> str:
    return jwt.encode(
        {"sub": sub, "name": name, "role": role},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


def auth_headers(role: str = "admin", sub: str | None = None, name: str | None = None) -> dict:
    sub = sub or role
    name = name or f"{role.title()} User"
    return {"Authorization": f"Bearer {make_token(role, sub, name)}"}


# ─── Fixtures ──────────────────────────────────────────────────────────────────
# Directory rows behind the tokens the tests send.
STAFF = [
    ("admin", EmployeeRole.ADMIN, "Admin User"),
    ("manager", EmployeeRole.MANAGER, "Manager User"),
    ("employee", EmployeeRole.EMPLOYEE, "Employee User"),
    ("carla", EmployeeRole.EMPLOYEE, "Carla Rios"),
    ("boss", EmployeeRole.MANAGER, "The Boss"),
    ("mgr", EmployeeRole.MANAGER, "Maria"),
]


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_client, "_redis_client", fake)
    return fake


@pytest_asyncio.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        db.add_all([Employee(username=u, role=role, name=name) for u, role, name in STAFF])
        await db.commit()
    yield


@pytest_asyncio.fixture
async def client():
    """Client authenticated as an admin."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", headers=auth_headers("admin")) as c:
        yield c


@pytest_asyncio.fixture
async def anon_client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def menu_items(client):
    """Three dishes keyed by name; 'Ceviche' is not available."""
    created = {}
    for body in (
        {"name": "Lomo Saltado", "price": 25.50, "category": "Main Courses", "type": "food"},
        {"name": "Chicha Morada", "price": 6.00, "category": "Drinks", "type": "drink"},
        {"name": "Ceviche", "price": 32.00, "category": "Main Courses", "type": "food", "available": False},
    ):
        r = await client.post("/menu/items", json=body)
        assert r.status_code == 201, r.text
        created[body["name"]] = r.json()
    return created


def order_body(menu_items: dict, **overrides) -> dict:
    body = {
        "customer_name": "Rosa Quispe",
        "phone": "987654321",
        "source": "walk-in",
        "table_number": "4",
        "payment_method": "cash",
        "items": [
            {"menu_item_id": menu_items["Lomo Saltado"]["id"], "quantity": 2, "notes": "no onion"},
            {"menu_item_id": menu_items["Chicha Morada"]["id"], "quantity": 1},
        ],
    }
    body.update(overrides)
    return body
