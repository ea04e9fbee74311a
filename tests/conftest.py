import os
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PUBLIC_BASE_URL"] = "https://coupons.example.com"
os.environ["AI_PROXY_URL"] = ""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.supabase_client import get_supabase, get_admin_supabase, get_session_supabase
from app.modules.auth.service import clear_auth_cache

# Foreign keys declared ON DELETE CASCADE: parent table -> [(child table, column)]
CASCADES = {
    "users": [("coupons", "user_id")],
    "products": [("coupons", "product_id")],
}

TABLE_DEFAULTS = {
    "products": {"is_active": True, "description": None},
    "coupons": {"status": "active", "note": None, "expires_at": None},
    "users": {"role": "sales", "coupon_limit_per_month": 10, "full_name": None},
}

UNIQUE = {"coupons": ["code"]}


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _comparable(value):
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return value


def _split_top_level(text):
    parts, depth, current = [], 0, ""
    for char in text:
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        parts.append(current)
    return parts


def _condition_matches(row, expression):
    """Evaluate one PostgREST logic-tree term, e.g. ``and(a.eq.1,b.is.null)``."""
    for joiner, combine in (("and(", all), ("or(", any)):
        if expression.startswith(joiner):
            terms = _split_top_level(expression[len(joiner):-1])
            return combine(_condition_matches(row, term) for term in terms)
    column, op, value = expression.split(".", 2)
    current = row.get(column)
    if op == "is":
        return current is None if value == "null" else str(current).lower() == value
    if op == "eq":
        return str(current) == value
    if op == "neq":
        return str(current) != value
    if current is None:
        return False
    a, b = _comparable(current), _comparable(value)
    return {"gt": a > b, "gte": a >= b, "lt": a < b, "lte": a <= b}[op]


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Subset of the postgrest query builder used by the services."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.count = None
        self.payload = None
        self.filters = []
        self.ordering = []
        self._limit = None
        self._offset = 0
        self._single = False
        self.range_bounds = None

    def select(self, columns="*", count=None):
        self.action, self.columns, self.count = "select", columns, count
        return self

    def insert(self, rows):
        self.action, self.payload = "insert", rows
        return self

    def update(self, values):
        self.action, self.payload = "update", values
        return self

    def delete(self):
        self.action = "delete"
        return self

    def _filter(self, op, column, value):
        self.filters.append((op, column, value))
        return self

    def eq(self, column, value):
        return self._filter("eq", column, value)

    def neq(self, column, value):
        return self._filter("neq", column, value)

    def in_(self, column, values):
        return self._filter("in", column, list(values))

    def gt(self, column, value):
        return self._filter("gt", column, value)

    def gte(self, column, value):
        return self._filter("gte", column, value)

    def lt(self, column, value):
        return self._filter("lt", column, value)

    def lte(self, column, value):
        return self._filter("lte", column, value)

    def or_(self, filters):
        self.filters.append(("or", None, filters))
        return self

    def order(self, column, desc=False):
        self.ordering.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def offset(self, n):
        self._offset = n
        return self

    def range(self, start, end):
        self.range_bounds = (start, end)
        self._offset = start
        self._limit = end - start + 1
        return self

    def maybe_single(self):
        self._single = True
        return self

    def _matches(self, row):
        for op, column, value in self.filters:
            current = row.get(column)
            if op == "eq" and current != value:
                return False
            if op == "neq" and current == value:
                return False
            if op == "in" and current not in value:
                return False
            if op == "or" and not any(_condition_matches(row, t) for t in _split_top_level(value)):
                return False
            if op in ("gt", "gte", "lt", "lte"):
                if current is None:
                    return False
                a, b = _comparable(current), _comparable(value)
                if op == "gt" and not a > b:
                    return False
                if op == "gte" and not a >= b:
                    return False
                if op == "lt" and not a < b:
                    return False
                if op == "lte" and not a <= b:
                    return False
        return True

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def execute(self):
        self.db.queries.append(self)
        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            if self.table in self.db.fail_inserts:
                raise Exception(f"insert into {self.table} failed")
            return FakeResponse(self.db.insert(self.table, self.payload))
        matched = [r for r in rows if self._matches(r)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in matched])
        if self.action == "delete":
            self.db.delete(self.table, matched)
            return FakeResponse([dict(r) for r in matched])

        for column, desc in reversed(self.ordering):
            matched.sort(key=lambda r: (r.get(column) is None, _comparable(r.get(column))), reverse=desc)
        total = len(matched)
        matched = matched[self._offset:]
        if self._limit is not None:
            matched = matched[:self._limit]
        data = [self._project(r) for r in matched]
        if self._single:
            if not data:
                return None
            return FakeResponse(data[0])
        return FakeResponse(data, count=total if self.count else None)


class FakeAdmin:
    def __init__(self, auth):
        self.auth = auth

    def list_users(self, page=None, per_page=None):
        users = [u for u, _ in self.auth.users.values()]
        per_page = per_page or 50
        start = ((page or 1) - 1) * per_page
        return users[start:start + per_page]

    def get_user_by_id(self, user_id):
        if user_id not in self.auth.users:
            raise Exception("User not found")
        return SimpleNamespace(user=self.auth.users[user_id][0])

    def create_user(self, attributes):
        email = attributes["email"]
        if any(u.email == email for u, _ in self.auth.users.values()):
            raise Exception("A user with this email address has already been registered")
        user = self.auth.add_user(email, attributes.get("password"))
        return SimpleNamespace(user=user)

    def update_user_by_id(self, user_id, attributes):
        if user_id not in self.auth.users:
            raise Exception("User not found")
        user, password = self.auth.users[user_id]
        self.auth.users[user_id] = (user, attributes.get("password", password))
        return SimpleNamespace(user=user)

    def delete_user(self, user_id):
        if user_id not in self.auth.users:
            raise Exception("User not found")
        del self.auth.users[user_id]
        self.auth.tokens = {t: uid for t, uid in self.auth.tokens.items() if uid != user_id}
        profiles = [r for r in self.auth.db.tables.get("users", []) if r["id"] == user_id]
        self.auth.db.delete("users", profiles)

    def sign_out(self, jwt, scope="global"):
        self.auth.tokens.pop(jwt, None)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.users = {}
        self.tokens = {}
        self.admin = FakeAdmin(self)

    def add_user(self, email, password):
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            created_at=_now_iso(),
            user_metadata={},
            app_metadata={},
        )
        self.users[user.id] = (user, password)
        return user

    def issue_token(self, user_id):
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def get_user(self, jwt=None):
        user_id = self.tokens.get(jwt)
        if user_id is None or user_id not in self.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id][0])

    def sign_in_with_password(self, credentials):
        for user, password in self.users.values():
            if user.email == credentials["email"] and password == credentials["password"]:
                session = SimpleNamespace(access_token=self.issue_token(user.id))
                return SimpleNamespace(user=user, session=session)
        raise Exception("Invalid login credentials")

    def sign_out(self):
        return None


class FakeSupabase:
    """In-memory stand-in for supabase.Client: tables, FK cascades, Auth."""

    def __init__(self):
        self.tables = {"users": [], "products": [], "coupons": []}
        self.queries = []
        self.fail_inserts = set()
        self.auth = FakeAuth(self)

    def table(self, name):
        return FakeQuery(self, name)

    def insert(self, table, payload):
        rows = payload if isinstance(payload, list) else [payload]
        created = []
        for row in rows:
            new_row = {**TABLE_DEFAULTS.get(table, {}), **row}
            new_row.setdefault("id", str(uuid.uuid4()))
            if table != "users":
                new_row.setdefault("created_at", _now_iso())
            for column in UNIQUE.get(table, []):
                if any(r.get(column) == new_row[column] for r in self.tables[table]):
                    raise Exception(f'duplicate key value violates unique constraint "{table}_{column}_key"')
            self.tables.setdefault(table, []).append(new_row)
            created.append(dict(new_row))
        return created

    def delete(self, table, rows):
        ids = {r["id"] for r in rows}
        self.tables[table] = [r for r in self.tables[table] if r["id"] not in ids]
        for child, column in CASCADES.get(table, []):
            children = [r for r in self.tables.get(child, []) if r.get(column) in ids]
            if children:
                self.delete(child, children)

    # helpers for tests
    def create_account(self, email, role="sales", limit=10, full_name=None, password="secret123"):
        user = self.auth.add_user(email, password)
        self.insert("users", {
            "id": user.id,
            "full_name": full_name or email.split("@")[0],
            "role": role,
            "coupon_limit_per_month": limit,
        })
        token = self.auth.issue_token(user.id)
        return SimpleNamespace(id=user.id, email=email, token=token, headers={"Authorization": f"Bearer {token}"})

    def add_product(self, name="Huawei Fiber Modem", price=150, is_active=True):
        return self.insert("products", {"name": name, "description": "", "price": price, "is_active": is_active})[0]

    def add_coupon(self, product, user, **fields):
        row = {
            "code": fields.pop("code", f"TEST-OFF10-{uuid.uuid4().hex[:6]}"),
            "discount_percent": fields.pop("discount_percent", 10),
            "product_id": product["id"],
            "user_id": user.id,
            **fields,
        }
        return self.insert("coupons", row)[0]


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_admin_supabase] = lambda: fake_db
    app.dependency_overrides[get_session_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def manager(fake_db):
    return fake_db.create_account("manager@example.com", role="manager", limit=999, full_name="Manager")


@pytest.fixture
def agent(fake_db):
    return fake_db.create_account("agent1@example.com", role="sales", limit=3, full_name="Agent One")


@pytest.fixture
def other_agent(fake_db):
    return fake_db.create_account("agent2@example.com", role="sales", limit=5, full_name="Agent Two")


@pytest.fixture
def product(fake_db):
    return fake_db.add_product()
