import itertools
import os
from types import SimpleNamespace
from typing import Optional

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")


GEO_QUIZ_JSON = (
    '{"name":"Geo","description":"d","questions":[{"questionText":"Capital of France?",'
    '"answers":[{"answerText":"Paris","isCorrect":true},{"answerText":"Lyon","isCorrect":false}]}]}'
)


class _Query:
    """Just enough of the postgrest builder for QuizRepository."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_n = None

    def select(self, *_columns):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.action))
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            self.db.maybe_fail(self.table)
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in payload:
                row = {"id": next(self.db.ids[self.table]), **item}
                if self.table == "quizz_submissions":
                    row.setdefault("created_at", "2026-01-01T00:00:00+00:00")
                rows.append(row)
                inserted.append(dict(row))
            return SimpleNamespace(data=inserted)

        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)

        found = [dict(r) for r in rows if self._matches(r)]
        if self.order_by:
            column, desc = self.order_by
            found.sort(key=lambda r: r.get(column), reverse=desc)
        if self.limit_n is not None:
            found = found[: self.limit_n]
        return SimpleNamespace(data=found)


class _FakeAuth:
    def __init__(self, sessions: dict) -> None:
        self.sessions = sessions

    def get_user(self, token):
        if token not in self.sessions:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.sessions[token]))


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict = {}
        self.ids = {
            name: itertools.count(1)
            for name in ("quizzes", "questions", "answers", "quizz_submissions")
        }
        self.calls = []
        self.sessions = {"good-token": "user-1", "other-token": "user-2"}
        self.auth = _FakeAuth(self.sessions)
        # table -> number of successful inserts allowed before raising
        self.fail_after: dict = {}

    def table(self, name: str) -> _Query:
        return _Query(self, name)

    def maybe_fail(self, table: str) -> None:
        if table not in self.fail_after:
            return
        if self.fail_after[table] == 0:
            raise RuntimeError(f"insert into {table} rejected")
        self.fail_after[table] -= 1

    def rows(self, table: str) -> list:
        return self.tables.get(table, [])


class ScriptedModelClient:
    """Replays a list of responses; exceptions in the list are raised instead."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.prompts = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingSleep:
    def __init__(self) -> None:
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_pdf(*pages: Optional[str]) -> bytes:
    """Builds a PDF in memory; ``None`` gives a blank page."""
    import fitz

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            y = 72
            for line in text.split("\n"):
                page.insert_text((72, y), line)
                y += 18
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def sleep():
    return RecordingSleep()
