from __future__ import annotations

import os
import time

import requests
from rich import print

from seed import seed

BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

def post(path: str, *, jwt: str | None = None, json: dict | None = None) -> requests.Response:
    headers = {"content-type": "application/json"}
    if jwt:
        headers["authorization"] = f"bearer {jwt}"
    return requests.post(f"{BASE}{path}", headers=headers, json=json, timeout=10)

def put(path: str, *, jwt: str, json: dict) -> requests.Response:
    headers = {"content-type": "application/json", "authorization": f"bearer {jwt}"}
    return requests.put(f"{BASE}{path}", headers=headers, json=json, timeout=10)

def get(path: str, *, jwt: str | None = None) -> requests.Response:
    headers = {}
    if jwt:
        headers["authorization"] = f"bearer {jwt}"
    return requests.get(f"{BASE}{path}", headers=headers, timeout=10)

def sign_in(email: str, password: str) -> str:
    r = post("/auth/sign-in", json={"email": email, "password": password})
    r.raise_for_status()
    return r.json()["access_token"]

def move(jwt: str, task_id: str, status: str) -> requests.Response:
    return put(f"/tasks/{task_id}", jwt=jwt, json={"status": status})

def wait_ready(timeout_s: float = 30.0) -> None:
    deadline = time.time() + timeout_s
    last_err: requests.RequestException | None = None

    while time.time() < deadline:
        try:
            r = get("/ready")
            if r.status_code == 200:
                return
        except requests.RequestException as e:
            last_err = e
        time.sleep(0.5)

    if last_err:
        raise RuntimeError(f"api not ready after {timeout_s}s (last error: {last_err})")
    raise RuntimeError(f"api not ready after {timeout_s}s")

def main() -> None:
    print("[bold]demo: sign in -> project -> task -> review -> validate -> invoice[/bold]")

    wait_ready()
    print("[green]ready ok[/green]")

    s = seed()
    owner_jwt = sign_in(s.owner_email, s.password)
    collab_jwt = sign_in(s.collaborator_email, s.password)
    print("owner and collaborator signed in")

    collab_id = get("/users/me", jwt=collab_jwt).json()["id"]

    r = post("/projects", jwt=owner_jwt, json={"name": f"demo project {int(time.time())}"})
    r.raise_for_status()
    project_id = r.json()["id"]
    print("created project:", project_id)

    post(f"/projects/{project_id}/members", jwt=owner_jwt, json={"user_id": collab_id}).raise_for_status()
    print("added collaborator to project")

    r = post(
        "/tasks",
        jwt=collab_jwt,
        json={"project_id": project_id, "title": "demo task", "size": "M", "assigned_to": collab_id},
    )
    r.raise_for_status()
    task_id = r.json()["id"]
    print("created task:", task_id)

    move(collab_jwt, task_id, "IN_PROGRESS").raise_for_status()
    move(collab_jwt, task_id, "IN_REVIEW").raise_for_status()
    print("collaborator sent task to review")

    r = move(collab_jwt, task_id, "VALIDATED")
    print(f"collaborator validate attempt -> [yellow]{r.status_code}[/yellow] {r.json()['detail']}")

    r = get(f"/tasks/{task_id}/transitions", jwt=owner_jwt)
    r.raise_for_status()
    print("owner may move it to:", r.json()["allowed"])

    r = move(owner_jwt, task_id, "VALIDATED")
    r.raise_for_status()
    print("owner validated task at", r.json()["validated_at"])

    today = time.strftime("%Y-%m-%d")
    r = post("/invoices", jwt=collab_jwt, json={"period_start": today, "period_end": today})
    r.raise_for_status()
    inv = r.json()
    print(f"draft invoice {inv['id']}: {len(inv['lines'])} lines, total {inv['total_amount']}")
    print("[bold green]demo complete[/bold green]")

if __name__ == "__main__":
    main()
