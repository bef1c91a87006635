"""
Data Loader Script - seeds the student registry through its HTTP API.

Reads sample_students.json and POSTs each record to /api/students.
Records the registry rejects are reported and make the script exit 1.

Usage:
    python load_data.py                              # Uses default URL
    python load_data.py http://localhost:8000         # Custom API URL
    python load_data.py http://backend:8000 data.json # Custom data file
"""

import json
import sys
import os

import httpx

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_students.json")


def _error_reason(resp: httpx.Response) -> str:
    """Registry errors carry JSON {"detail": ...}; proxies may answer with HTML or plain text."""
    if resp.headers.get("content-type", "").startswith("application/json"):
        try:
            return resp.json().get("detail", resp.text)
        except ValueError:
            pass
    return resp.text


def load_students(client: httpx.Client, api_url: str, students: list) -> dict:
    """
    Create each student and collect per-record outcomes.

    A 4xx/5xx response or a transport error marks that record as
    rejected; loading carries on with the rest.
    """
    create_url = f"{api_url.rstrip('/')}/api/students"
    summary = {"total": len(students), "created": 0, "rejected": 0, "details": []}

    for student in students:
        try:
            resp = client.post(create_url, json=student)
        except httpx.RequestError as e:
            summary["rejected"] += 1
            summary["details"].append({"name": student.get("name"), "status": "REJECTED",
                                       "reason": f"{type(e).__name__}: {e}"})
            continue

        if resp.is_success:
            summary["created"] += 1
            summary["details"].append({"name": student.get("name"), "status": "CREATED",
                                       "id": resp.json().get("id")})
        else:
            summary["rejected"] += 1
            summary["details"].append({"name": student.get("name"), "status": "REJECTED",
                                       "reason": _error_reason(resp)})
    return summary


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    api_url = argv[0] if argv else os.getenv("API_URL", "http://localhost:8000")
    data_file = argv[1] if len(argv) > 1 else DEFAULT_DATA_FILE

    if not os.path.exists(data_file):
        print(f"Error: Could not find {data_file}")
        return 1

    print(f"Loading data from: {data_file}")
    with open(data_file, 'r', encoding='utf-8') as f:
        students = json.load(f)

    print(f"Found {len(students)} students, sending to {api_url}")
    print()

    with httpx.Client(timeout=30.0) as client:
        summary = load_students(client, api_url, students)

    print("=" * 60)
    print("LOAD SUMMARY")
    print("=" * 60)
    print(f"  Total:    {summary['total']}")
    print(f"  Created:  {summary['created']}")
    print(f"  Rejected: {summary['rejected']}")
    print("=" * 60)
    for d in summary["details"]:
        extra = d.get("id") if d["status"] == "CREATED" else d.get("reason")
        print(f"  {d['name']}: {d['status']} ({extra})")

    return 1 if summary["rejected"] else 0


if __name__ == "__main__":
    sys.exit(main())
