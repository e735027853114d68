"""Seed script: creates sample documents with history and comments via the REST API.

Usage:
    python scripts/seed.py              # uses http://localhost:8000
    python scripts/seed.py http://host  # custom base URL

Tokens are minted locally, so JWT_SECRET must match the server's.
"""

import sys

import httpx

from identity.application.services import issue_token

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

USERS = ["alice", "bob"]

DOCUMENTS = [
    {
        "name": "Project Proposal",
        "owner": "alice",
        "content": "This is a collaborative document for the project proposal.",
        "revision": "This is a collaborative document for the project proposal. "
        "It outlines the key objectives and deliverables.",
        "comment": ("bob", "I think we should expand on the budget section."),
    },
    {
        "name": "Architecture Notes",
        "owner": "bob",
        "content": "Services talk to the document store only through repositories.",
        "revision": None,
        "comment": ("alice", "The timeline looks too aggressive."),
    },
]


def headers(user: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user)}"}


def create_document(client: httpx.Client, doc: dict) -> str:
    resp = client.post(
        f"{BASE_URL}/api/documents/",
        json={"name": doc["name"], "content": doc["content"], "collaborators": USERS},
        headers=headers(doc["owner"]),
    )
    resp.raise_for_status()
    doc_id = resp.json()["id"]
    print(f"  Created document '{doc['name']}' ({doc_id})")
    return doc_id


def revise(client: httpx.Client, doc_id: str, user: str, content: str) -> None:
    auth = headers(user)
    resp = client.post(f"{BASE_URL}/api/documents/{doc_id}/lock", headers=auth)
    resp.raise_for_status()
    if not resp.json()["acquired"]:
        print(f"  Document {doc_id} is locked by {resp.json()['locked_by']}, skipping edit")
        return
    try:
        resp = client.put(
            f"{BASE_URL}/api/documents/{doc_id}/content",
            json={"content": content},
            headers=auth,
        )
        resp.raise_for_status()
        print(f"  Saved version {resp.json()['version']} of {doc_id}")
    finally:
        client.post(f"{BASE_URL}/api/documents/{doc_id}/unlock", headers=auth)


def comment(client: httpx.Client, doc_id: str, user: str, text: str) -> None:
    resp = client.post(
        f"{BASE_URL}/api/documents/{doc_id}/comments",
        json={"content": text},
        headers=headers(user),
    )
    resp.raise_for_status()
    print(f"  {user} commented on {doc_id}")


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")

    with httpx.Client(timeout=10) as client:
        print("Documents:")
        for doc in DOCUMENTS:
            doc_id = create_document(client, doc)
            if doc["revision"]:
                revise(client, doc_id, doc["owner"], doc["revision"])
            author, text = doc["comment"]
            comment(client, doc_id, author, text)

    print("\nDone!")


if __name__ == "__main__":
    main()
