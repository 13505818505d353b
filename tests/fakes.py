# tests/fakes.py
"""In-memory stand-ins for the Supabase client, HTTP session and device storage."""
from types import SimpleNamespace
from typing import Any

from postgrest.exceptions import APIError

from app.core.local_storage import LocalStorage, StorageQuotaExceeded

PRIMARY_KEYS = {
    "user_profiles": "id",
    "order_tracking": "order_id",
}


def api_error(message: str = "permission denied", code: str = "42501") -> APIError:
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, Any]] = []
        self.ordering: tuple[str, bool] | None = None
        self.single = False

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def upsert(self, payload: dict[str, Any]):
        self.op = "upsert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.ordering = (column, desc)
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(col) == val for col, val in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op, self.payload, tuple(self.filters)))
        if self.table in self.db.failing_tables:
            raise api_error()

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "upsert":
            key = PRIMARY_KEYS.get(self.table, "id")
            existing = next((r for r in rows if r.get(key) == self.payload[key]), None)
            if existing is None:
                rows.append(dict(self.payload))
            else:
                existing.update(self.payload)
            return FakeResponse([self.payload])

        if self.op == "update":
            matched = [r for r in rows if self._matches(r)]
            for row in matched:
                row.update(self.payload)
            return FakeResponse(matched)

        found = [r for r in rows if self._matches(r)]
        if self.ordering:
            column, desc = self.ordering
            found.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self.columns != "*":
            wanted = [c.strip() for c in self.columns.split(",")]
            found = [{c: r.get(c) for c in wanted} for r in found]
        if self.single:
            return FakeResponse(found[0] if found else None)
        return FakeResponse(found)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def execute(self):
        self.db.calls.append(("rpc", self.name, None, ()))
        if self.db.rpc_error:
            raise api_error("function is_admin() does not exist", "42883")
        return FakeResponse(self.db.rpc_results.get(self.name))


class FakeBucket:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def upload(self, path: str, data: bytes, options: dict[str, str]):
        if self.db.storage_error:
            raise self.db.storage_error
        self.db.uploads.append((self.name, path, data, options))

    def remove(self, paths: list[str]):
        self.db.removed.append((self.name, list(paths)))
        if self.db.storage_error:
            raise self.db.storage_error

    def get_public_url(self, path: str) -> str:
        return f"https://proj.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.db, bucket)


class FakeAuthError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FakeAuth:
    """Password accounts: email -> (password, user id)."""

    def __init__(self, token: str):
        self.accounts: dict[str, tuple[str, str]] = {}
        self.session = None
        self.token = token
        self.sign_out_calls = 0
        self.unavailable = False

    def add_account(self, email: str, password: str, user_id: str) -> None:
        self.accounts[email] = (password, user_id)

    def login_as(self, user_id: str, email: str = "client@example.com") -> None:
        self.session = SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=email),
            access_token=self.token,
        )

    def sign_in_with_password(self, credentials: dict[str, str]):
        if self.unavailable:
            raise FakeAuthError("Service unavailable")
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        self.login_as(account[1], credentials["email"])
        return SimpleNamespace(user=self.session.user, session=self.session)

    def get_session(self):
        return self.session

    def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.session = None


class FakeSupabase:
    """The subset of supabase.Client used by the storefront."""

    def __init__(self, token: str = "token"):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple] = []
        self.failing_tables: set[str] = set()
        self.rpc_results: dict[str, Any] = {"is_admin": False}
        self.rpc_error = False
        self.uploads: list[tuple] = []
        self.removed: list[tuple] = []
        self.storage_error: Exception | None = None
        self.auth = FakeAuth(token)
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str) -> FakeRpc:
        return FakeRpc(self, name)

    def calls_to(self, table: str, op: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == table and c[1] == op]


class MemoryLocalStorage(LocalStorage):
    """
    Dict-backed device storage; `fail_writes` rejects the next N writes
    with a quota error, `error` makes every read and write raise it.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail_writes = 0
        self.error: Exception | None = None
        self.writes: list[str] = []
        self.cleared = 0

    def get_item(self, key: str) -> str | None:
        if self.error:
            raise self.error
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.error:
            raise self.error
        if self.fail_writes > 0:
            self.fail_writes -= 1
            raise StorageQuotaExceeded(key, len(value), 0)
        self.writes.append(value)
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.cleared += 1
        if self.error:
            raise self.error
        self.data.clear()


class FakeHttpResponse:
    def __init__(self, status_code: int, body: Any = None, text: str | None = None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeHttp:
    def __init__(self, response: FakeHttpResponse | None = None):
        self.response = response or FakeHttpResponse(200, {"url": "https://checkout.stripe.com/c/pay/cs_test"})
        self.requests: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def post(self, url: str, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response
