"""Fake remote store for testing.

FakeStoreBackend answers the auth and table endpoints the StoreClient
talks to, entirely in memory, through an httpx.MockTransport. Tests get a
real StoreClient (real headers, real status handling, real breaker) with
no network.

Design principles:
- Never mock the StoreClient itself in collection tests; drive it through this
- Deterministic: ids count up, timestamps come from a fake clock one second apart
- Inspectable: every request is recorded, rows are plain dicts
- Faults are injected per method and path and are consumed once
"""
import asyncio
import itertools
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from jose import jwt

from notekeep.backend.core.store import SINGLE_OBJECT, StoreClient

BASE_URL = "http://store.test"
ANON_KEY = "anon-key"
SIGNING_KEY = "fake-signing-key"
CLOCK_START = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_token(user_id: str, expires_in: int = 3600) -> str:
    """Signed JWT with sub and exp claims, like the store issues."""
    exp = int(datetime.now(timezone.utc).timestamp()) + expires_in
    return jwt.encode({"sub": user_id, "exp": exp, "jti": uuid.uuid4().hex}, SIGNING_KEY, algorithm="HS256")


@dataclass
class Fault:
    method: str
    path: str
    status: int = 500
    message: str = "Internal error"
    exception: type[Exception] | None = None


@dataclass
class Hold:
    """Parks one matching request until released."""

    method: str
    path: str
    arrived: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)


class FakeStoreBackend:
    """In-memory auth users, profiles and notes behind a mock transport."""

    def __init__(self, confirm_signups: bool = True) -> None:
        self.confirm_signups = confirm_signups
        self.users: dict[str, dict[str, Any]] = {}
        self.tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.notes: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.recovery_emails: list[str] = []
        self._ids = itertools.count(1)
        self._ticks = itertools.count(0)
        self._faults: list[Fault] = []
        self._holds: list[Hold] = []

    # ------------------------------------------------------------------
    # wiring
    # ------------------------------------------------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, **kwargs: Any) -> StoreClient:
        """A StoreClient bound to this backend."""
        return StoreClient(
            base_url=BASE_URL,
            api_key=ANON_KEY,
            timeout=kwargs.pop("timeout", 5.0),
            transport=self.transport(),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # seeding
    # ------------------------------------------------------------------

    def now(self) -> str:
        return (CLOCK_START + timedelta(seconds=next(self._ticks))).isoformat()

    def add_user(
        self,
        email: str = "jane@example.com",
        password: str = "secret123",
        full_name: str = "Jane Doe",
        phone: str | None = "555-0100",
        with_profile: bool = True,
    ) -> str:
        user_id = f"user-{next(self._ids)}"
        self.users[user_id] = {"id": user_id, "email": email, "password": password}
        if with_profile:
            self.profiles[user_id] = {
                "id": user_id,
                "full_name": full_name,
                "email": email,
                "phone": phone,
            }
        return user_id

    def issue_token(self, user_id: str, expires_in: int = 3600) -> str:
        token = make_token(user_id, expires_in)
        self.tokens[token] = user_id
        return token

    def issue_refresh_token(self, user_id: str) -> str:
        refresh_token = f"refresh-{uuid.uuid4().hex}"
        self.refresh_tokens[refresh_token] = user_id
        return refresh_token

    def add_note(self, user_id: str, title: str, content: str, created_at: str | None = None) -> dict[str, Any]:
        stamp = created_at or self.now()
        row = {
            "id": f"note-{next(self._ids)}",
            "user_id": user_id,
            "title": title,
            "content": content,
            "created_at": stamp,
            "updated_at": stamp,
        }
        self.notes.append(row)
        return row

    def notes_of(self, user_id: str) -> list[dict[str, Any]]:
        return [row for row in self.notes if row["user_id"] == user_id]

    # ------------------------------------------------------------------
    # fault injection
    # ------------------------------------------------------------------

    def fail_next(self, method: str, path: str, status: int = 500, message: str = "Internal error") -> None:
        """Answer the next matching request with an error status."""
        self._faults.append(Fault(method, path, status=status, message=message))

    def disconnect_next(self, method: str, path: str, exception: type[Exception] = httpx.ConnectError) -> None:
        """Raise a transport error for the next matching request."""
        self._faults.append(Fault(method, path, exception=exception))

    def hold_next(self, method: str, path: str) -> Hold:
        """Park the next matching request until hold.release is set."""
        hold = Hold(method, path)
        self._holds.append(hold)
        return hold

    def _take(self, items: list, request: httpx.Request) -> Any:
        for item in items:
            if item.method == request.method and request.url.path.endswith(item.path):
                items.remove(item)
                return item
        return None

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        hold = self._take(self._holds, request)
        if hold is not None:
            hold.arrived.set()
            await hold.release.wait()

        fault = self._take(self._faults, request)
        if fault is not None:
            if fault.exception is not None:
                raise fault.exception("injected transport failure", request=request)
            return httpx.Response(fault.status, json={"message": fault.message})

        path = request.url.path
        if path.startswith("/auth/v1/"):
            return self._auth(request, path.removeprefix("/auth/v1/"))
        if path.startswith("/rest/v1/"):
            return self._rest(request, path.removeprefix("/rest/v1/"))
        return httpx.Response(404, json={"message": f"No route for {path}"})

    def _bearer_user(self, request: httpx.Request) -> str | None:
        header = request.headers.get("Authorization", "")
        token = header.removeprefix("Bearer ").strip()
        return self.tokens.get(token)

    def _session(self, user_id: str) -> dict[str, Any]:
        token = self.issue_token(user_id)
        user = self.users[user_id]
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_in": 3600,
            "expires_at": jwt.get_unverified_claims(token)["exp"],
            "refresh_token": self.issue_refresh_token(user_id),
            "user": {"id": user_id, "email": user["email"]},
        }

    # ------------------------------------------------------------------
    # auth endpoints
    # ------------------------------------------------------------------

    def _auth(self, request: httpx.Request, endpoint: str) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}

        if endpoint == "signup" and request.method == "POST":
            if any(u["email"] == body["email"] for u in self.users.values()):
                return httpx.Response(422, json={"msg": "User already registered"})
            user_id = self.add_user(body["email"], body["password"], with_profile=False)
            self.users[user_id]["user_metadata"] = body.get("data", {})
            if self.confirm_signups:
                return httpx.Response(200, json=self._session(user_id))
            return httpx.Response(200, json={"id": user_id, "email": body["email"]})

        if endpoint == "token" and request.method == "POST":
            grant_type = request.url.params.get("grant_type")
            if grant_type == "refresh_token":
                user_id = self.refresh_tokens.pop(body.get("refresh_token", ""), None)
                if user_id is None:
                    return httpx.Response(
                        400,
                        json={"error": "invalid_grant", "error_description": "Invalid Refresh Token"},
                    )
                return httpx.Response(200, json=self._session(user_id))
            if grant_type != "password":
                return httpx.Response(400, json={"error": "unsupported_grant_type"})
            for user in self.users.values():
                if user["email"] == body.get("email") and user["password"] == body.get("password"):
                    return httpx.Response(200, json=self._session(user["id"]))
            return httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
            )

        if endpoint == "user" and request.method == "GET":
            user_id = self._bearer_user(request)
            if user_id is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json={"id": user_id, "email": self.users[user_id]["email"]})

        if endpoint == "logout" and request.method == "POST":
            header = request.headers.get("Authorization", "")
            self.tokens.pop(header.removeprefix("Bearer ").strip(), None)
            return httpx.Response(204)

        if endpoint == "recover" and request.method == "POST":
            self.recovery_emails.append(body["email"])
            return httpx.Response(200, json={})

        return httpx.Response(404, json={"msg": f"Unknown auth endpoint {endpoint}"})

    # ------------------------------------------------------------------
    # table endpoints
    # ------------------------------------------------------------------

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        if self._bearer_user(request) is None:
            return httpx.Response(401, json={"message": "JWT expired"})

        if table == "notes":
            rows = self.notes
        elif table == "profiles":
            rows = list(self.profiles.values())
        else:
            return httpx.Response(404, json={"message": f"relation {table} does not exist"})

        filters = {
            key: value.removeprefix("eq.")
            for key, value in request.url.params.items()
            if key not in ("select", "order")
        }

        def matching() -> list[dict[str, Any]]:
            return [row for row in rows if all(str(row.get(k)) == v for k, v in filters.items())]

        prefer = request.headers.get("Prefer", "")
        representation = "return=representation" in prefer

        if request.method == "GET":
            found = matching()
            order = request.url.params.get("order")
            if order:
                column, _, direction = order.partition(".")
                found = sorted(found, key=lambda row: row[column], reverse=direction == "desc")
            if request.headers.get("Accept") == SINGLE_OBJECT:
                if len(found) != 1:
                    return httpx.Response(
                        406, json={"message": "JSON object requested, multiple (or no) rows returned"},
                    )
                return httpx.Response(200, json=found[0])
            return httpx.Response(200, json=found)

        body = json.loads(request.content) if request.content else {}

        if request.method == "POST":
            if table == "profiles":
                merged = {**self.profiles.get(body["id"], {}), **body}
                self.profiles[body["id"]] = merged
                return httpx.Response(201, json=[merged] if representation else None)
            row = self.add_note(body["user_id"], body["title"], body["content"])
            return httpx.Response(201, json=[row] if representation else None)

        if request.method == "PATCH":
            changed = []
            for row in matching():
                row.update(body)
                if "updated_at" not in body:
                    row["updated_at"] = self.now()
                changed.append(dict(row))
            return httpx.Response(200, json=changed if representation else None)

        if request.method == "DELETE":
            doomed = matching()
            if table == "notes":
                self.notes = [row for row in self.notes if row not in doomed]
            return httpx.Response(204)

        return httpx.Response(405, json={"message": "Method not allowed"})


def note_row(note_id: str = "note-1", **overrides: Any) -> dict[str, Any]:
    """A notes table row as the store returns it."""
    row = {
        "id": note_id,
        "user_id": "user-1",
        "title": "Title",
        "content": "Content",
        "created_at": "2025-01-01T10:00:00+00:00",
        "updated_at": "2025-01-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row
