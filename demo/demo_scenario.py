#!/usr/bin/env python3
"""
Demo scenario for the academic registry.
"""

import sys
import os
import threading

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from academic_registry.main import RegistryPlatform
from academic_registry.core.entities import GradeInput
from academic_registry.core.enums import EventType
from academic_registry.core.exceptions import RegistryError

OWNER = "0xOWNER"
UNIVERSITY = "0xUNIVERSITY"
COLLEGE = "0xCOLLEGE"
STUDENTS = ["0xALICE", "0xBOB", "0xCAROL"]
EMPLOYER = "0xEMPLOYER"


def run_demo():
    """Run a walkthrough of the registry."""
    print("=" * 60)
    print("ACADEMIC REGISTRY - DEMO")
    print("=" * 60)

    platform = RegistryPlatform({'owner': OWNER, 'log_format': 'text', 'log_level': 'WARNING'})
    registry = platform.registry

    received = []
    registry.event_service.subscribe("demo", set(EventType), received.append)

    try:
        print("\n1. Registering institutions and catalog...")
        create_catalog(registry)

        print("\n2. Registering and enrolling students...")
        enroll_students(registry)

        print("\n3. Recording grades...")
        record_grades(registry)

        print("\n4. Demonstrating access control...")
        demonstrate_access_control(registry)

        print("\n5. Demonstrating rejected calls...")
        demonstrate_rejections(registry)

        print("\n6. Concurrent grading...")
        demonstrate_concurrency(registry)

        print("\n7. Notifications...")
        counts = {}
        for event in received:
            counts[event.event_type.value] = counts.get(event.event_type.value, 0) + 1
        for event_type, count in sorted(counts.items()):
            print(f"  {event_type:20} {count}")

        print("\n8. Registry statistics...")
        print(f"  {registry.get_statistics()['records']}")

        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    except RegistryError as e:
        print(f"\nDemo failed with error: {e.error_code}: {e.message}")
        import traceback
        traceback.print_exc()

    finally:
        platform.stop_platform()


def create_catalog(registry):
    registry.add_institution(OWNER, UNIVERSITY, "State University", "11.111.111/0001-11")
    registry.add_institution(OWNER, COLLEGE, "City College", "22.222.222/0001-22")

    registry.add_course(UNIVERSITY, UNIVERSITY, "CS", "Computer Science", "bachelor", 8)
    registry.add_course(UNIVERSITY, UNIVERSITY, "MATH", "Mathematics", "bachelor", 8)
    # Same code under another institution is a different course
    registry.add_course(COLLEGE, COLLEGE, "CS", "Computing", "technologist", 6)

    for code, name, workload in [("CS101", "Programming I", 60),
                                 ("CS102", "Data Structures", 60),
                                 ("CS201", "Databases", 80)]:
        registry.add_discipline_to_course(UNIVERSITY, UNIVERSITY, "CS", code, name,
                                          f"Syllabus of {name}", workload, workload // 15)
    registry.add_discipline_to_course(UNIVERSITY, UNIVERSITY, "MATH", "MA101", "Calculus I",
                                      "Limits, derivatives", 90, 6)

    for institution in registry.get_institution_list():
        courses = registry.get_courses_from_institution(institution.identity)
        print(f"  {institution.name}: {', '.join(c.code for c in courses)}")


def enroll_students(registry):
    for student in STUDENTS:
        registry.add_student(UNIVERSITY, UNIVERSITY, student)
        registry.enroll_student_in_discipline(UNIVERSITY, UNIVERSITY, student, "CS101", "CS")
        registry.enroll_student_in_discipline(UNIVERSITY, UNIVERSITY, student, "CS102", "CS")

    # Bound course stays CS even when enrolling in a MATH discipline later
    registry.enroll_student_in_discipline(UNIVERSITY, UNIVERSITY, STUDENTS[0], "MA101", "MATH")
    institution, course = registry.get_student_institution_data(STUDENTS[0])
    print(f"  {STUDENTS[0]} bound to {institution.name} / {course.name}")


def record_grades(registry):
    registry.add_grade(UNIVERSITY, UNIVERSITY, STUDENTS[0], "CS101", 1, 92, 100, True)
    registry.add_grades(UNIVERSITY, UNIVERSITY, STUDENTS[0], [
        GradeInput("CS102", 1, 48, 75, False),
        GradeInput("CS102", 2, 81, 95, True),
        GradeInput("MA101", 1, 70, 80, True),
    ])

    transcript = registry.get_student_transcript(STUDENTS[0], STUDENTS[0])
    for grade, discipline in transcript.pairs():
        label = discipline.name if not discipline.is_empty else "(unresolved)"
        print(f"  {grade.discipline_code:6} p{grade.period} {grade.score:3} {label}")


def demonstrate_access_control(registry):
    student = STUDENTS[0]
    registry.add_student_information(student, "ciphertext:profile-v1", "pk:alice")

    try:
        registry.retrieve_student_information(EMPLOYER, student)
    except RegistryError as e:
        print(f"  Employer before grant: {e.error_code}")

    registry.add_allowed_address(student, EMPLOYER, student)
    info = registry.retrieve_student_information(EMPLOYER, student)
    print(f"  Employer after grant: {info.encrypted_information}")
    print(f"  Readers of {student}: {registry.get_allowed_readers(student, student)}")
    print(f"  Role of {EMPLOYER}: {registry.get_permission(EMPLOYER).value}")


def demonstrate_rejections(registry):
    attempts = [
        ("duplicate institution",
         lambda: registry.add_institution(OWNER, UNIVERSITY, "Again", "x")),
        ("course on unknown institution",
         lambda: registry.add_course("0xNOBODY", "0xNOBODY", "X", "X", "x", 1)),
        ("grade without enrollment",
         lambda: registry.add_grade(UNIVERSITY, UNIVERSITY, STUDENTS[1], "CS201", 1, 50, 50, False)),
        ("college grading university student",
         lambda: registry.add_grade(COLLEGE, COLLEGE, STUDENTS[1], "CS101", 1, 50, 50, False)),
    ]
    for label, attempt in attempts:
        try:
            attempt()
            print(f"  {label}: accepted (unexpected)")
        except RegistryError as e:
            print(f"  {label}: {e.error_code}")


def demonstrate_concurrency(registry):
    results = {'ok': 0, 'rejected': 0}
    lock = threading.Lock()

    def worker():
        # Every thread races for the same grade key; exactly one wins
        try:
            registry.add_grade(UNIVERSITY, UNIVERSITY, STUDENTS[2], "CS101", 1, 75, 90, True)
            outcome = 'ok'
        except RegistryError:
            outcome = 'rejected'
        with lock:
            results[outcome] += 1

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    print(f"  20 racing writers: {results['ok']} accepted, {results['rejected']} rejected")


if __name__ == "__main__":
    run_demo()
