"""
Script to add sample data to the academic registry via the REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py [--owner OWNER]
"""

import argparse
import json
import os
import sys

import requests


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"

CALLER_HEADER = "X-Caller-Identity"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `REGISTRY_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("REGISTRY_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://127.0.0.1:8888",
        "http://localhost:8000",
        "http://localhost:8888",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running at {BASE_URL}")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m academic_registry.main --owner owner --rest-port 8000")
    return False


def call(method, path, caller=None, data=None, label=""):
    """Send one registry call and report the outcome."""
    headers = {CALLER_HEADER: caller} if caller else {}
    try:
        response = requests.request(method, f"{BASE_URL}{path}", json=data,
                                    headers=headers, timeout=5)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} {label}: {e}")
        return None

    if response.status_code in (200, 201, 204):
        print(f"{_OK_CHAR} {label}")
        return response.json() if response.content else {}

    try:
        error = response.json()["error"]
        print(f"{_FAIL_CHAR} {label}: {error['code']} {error['message']}")
    except (ValueError, KeyError):
        print(f"{_FAIL_CHAR} {label}: HTTP {response.status_code} {response.text}")
    return None


def main():
    """Main execution."""
    parser = argparse.ArgumentParser(description="Seed a running academic registry")
    parser.add_argument("--owner", default="owner", help="Identity the server was started with")
    args = parser.parse_args()

    print("=" * 60)
    print("Academic Registry - Data Addition Script")
    print("=" * 60)
    print()

    if not check_server():
        sys.exit(1)

    inst = "inst-state-university"
    call("POST", "/institutions", args.owner,
         {"identity": inst, "name": "State University", "document": "11.111.111/0001-11"},
         label=f"Registered institution {inst}")

    call("POST", f"/institutions/{inst}/courses", inst,
         {"code": "CS", "name": "Computer Science", "course_type": "bachelor", "semesters": 8},
         label="Added course CS")

    disciplines = [("CS101", "Introduction to Programming", 60, 4),
                   ("CS201", "Data Structures", 60, 4),
                   ("CS301", "Database Systems", 80, 5)]
    for code, name, workload, credits in disciplines:
        call("POST", f"/institutions/{inst}/courses/CS/disciplines", inst,
             {"code": code, "name": name, "syllabus": f"{name} syllabus",
              "workload": workload, "credits": credits},
             label=f"Added discipline {code}")

    students = ["student-alice", "student-bob", "student-carol"]
    for student in students:
        call("POST", f"/institutions/{inst}/students", inst, {"identity": student},
             label=f"Registered student {student}")
        for code, _, _, _ in disciplines[:2]:
            call("POST", f"/institutions/{inst}/students/{student}/enrollments", inst,
                 {"course_code": "CS", "discipline_code": code},
                 label=f"Enrolled {student} in {code}")

    call("POST", f"/institutions/{inst}/students/{students[0]}/grades/batch", inst,
         {"grades": [
             {"discipline_code": "CS101", "period": 1, "score": 91, "attendance": 98, "passed": True},
             {"discipline_code": "CS201", "period": 1, "score": 67, "attendance": 85, "passed": True},
         ]},
         label=f"Graded {students[0]}")

    call("PUT", "/students/me/information", students[0],
         {"encrypted_information": "ciphertext:alice", "public_key": "pk:alice"},
         label=f"{students[0]} stored profile")

    transcript = call("GET", f"/students/{students[0]}/transcript", students[0],
                      label=f"Fetched transcript of {students[0]}")
    if transcript:
        print(json.dumps(transcript, indent=2))

    stats = call("GET", "/statistics", label="Fetched statistics")
    if stats:
        print(json.dumps(stats["records"], indent=2))

    print("\n" + "=" * 60)
    print(f"{_OK_CHAR} Sample data added")
    print("=" * 60)
    print(f"\n  - View API docs: {BASE_URL}/docs")
    print(f"  - List institutions: curl {BASE_URL}/institutions")
    print(f"  - Notifications: curl {BASE_URL}/events")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
