"""Tests for inbox endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def _post(client: TestClient, headers: dict[str, str], content: str, to: list[str]) -> str:
    r = client.post("/api/v1/activities/notes", json={"content": content, "to": to}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()["id"]


def test_inbox_requires_auth(client: TestClient) -> None:
    assert client.get("/api/v1/inbox").status_code == status.HTTP_401_UNAUTHORIZED


def test_list_and_paginate(client: TestClient, alice, bob, auth_headers) -> None:
    ids = {_post(client, auth_headers(alice), f"note {n}", [f"user:{bob.id}"]) for n in range(3)}

    first = client.get("/api/v1/inbox", params={"limit": 2}, headers=auth_headers(bob))
    assert first.status_code == status.HTTP_200_OK
    body = first.json()
    assert len(body["items"]) == 2
    assert body["next_cursor"] == body["items"][-1]["id"]

    second = client.get(
        "/api/v1/inbox",
        params={"limit": 2, "cursor": body["next_cursor"]},
        headers=auth_headers(bob),
    ).json()
    assert len(second["items"]) == 1
    assert second["next_cursor"] is None

    seen = {item["activity_id"] for item in body["items"] + second["items"]}
    assert seen == ids


def test_mentions_and_unread_counts(client: TestClient, alice, bob, auth_headers) -> None:
    _post(client, auth_headers(alice), "hey @bob", ["public"])
    client.post(f"/api/v1/activities/follow/{bob.id}", headers=auth_headers(alice))

    counts = client.get("/api/v1/inbox/unread-counts", headers=auth_headers(bob)).json()
    assert counts["total"] == 2
    assert counts["mentions"] == 1
    assert counts["follows"] == 1

    mentions = client.get("/api/v1/inbox", params={"category": "mentions"}, headers=auth_headers(bob))
    items = mentions.json()["items"]
    assert [item["category"] for item in items] == ["MENTION"]
    assert items[0]["priority"] > 0

    bad = client.get("/api/v1/inbox", params={"category": "bogus"}, headers=auth_headers(bob))
    assert bad.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_mark_read_endpoints(client: TestClient, alice, bob, carol, auth_headers) -> None:
    first = _post(client, auth_headers(alice), "one", [f"user:{bob.id}"])
    _post(client, auth_headers(alice), "two", [f"user:{bob.id}"])
    client.post(f"/api/v1/activities/follow/{bob.id}", headers=auth_headers(carol))

    r = client.post(f"/api/v1/inbox/{first}/read", headers=auth_headers(bob))
    assert r.status_code == status.HTTP_204_NO_CONTENT
    r = client.post(f"/api/v1/inbox/{first}/read", headers=auth_headers(carol))
    assert r.status_code == status.HTTP_404_NOT_FOUND

    unread = client.get("/api/v1/inbox", params={"unread_only": True}, headers=auth_headers(bob)).json()
    assert len(unread["items"]) == 2

    r = client.post("/api/v1/inbox/read-all", json={"category": "follows"}, headers=auth_headers(bob))
    assert r.json() == {"updated": 1}

    remaining = [item["id"] for item in client.get(
        "/api/v1/inbox", params={"unread_only": True}, headers=auth_headers(bob)
    ).json()["items"]]
    assert len(remaining) == 1

    r = client.post("/api/v1/inbox/read", json={"ids": remaining}, headers=auth_headers(bob))
    assert r.json() == {"updated": 1}

    r = client.post("/api/v1/inbox/read", json={"ids": []}, headers=auth_headers(bob))
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    assert client.post("/api/v1/inbox/read-all", headers=auth_headers(bob)).json() == {"updated": 0}
    assert client.get("/api/v1/inbox/unread-counts", headers=auth_headers(bob)).json()["total"] == 0
