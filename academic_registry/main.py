"""
Main entry point for the academic registry.
"""

import logging
import threading
import time
from typing import Optional

from .core.entities import GradeInput
from .core.exceptions import ConfigurationError
from .observability import setup_logging
from .persistence import EventStoreFactory
from .services import AcademicRegistry, ConcurrencyManager, EventService
from .api.rest_api import RegistryRestAPI

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'owner': 'owner',
    'event_store_type': 'memory',
    'event_store_config': {},
    'log_level': 'INFO',
    'log_format': 'json',
    'cors_origins': ['*'],
}


class RegistryPlatform:
    """Main platform class that wires the registry, its journal and its API."""

    def __init__(self, config: Optional[dict] = None, configure_logging: bool = True):
        self._config = dict(DEFAULT_CONFIG)
        self._config.update(config or {})
        self._configure_logging = configure_logging
        self._event_store = None
        self._concurrency_manager = None
        self._event_service = None
        self._registry = None
        self._rest_api = None
        self._rest_thread = None
        self._running = False

        self._initialize_platform()

    @property
    def registry(self) -> AcademicRegistry:
        return self._registry

    @property
    def app(self):
        return self._rest_api.app

    @property
    def config(self) -> dict:
        return dict(self._config)

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        if self._configure_logging:
            setup_logging(self._config['log_level'], self._config['log_format'])

        owner = self._config.get('owner')
        if not owner or not isinstance(owner, str):
            raise ConfigurationError("'owner' must be a non-empty identity string")

        store_type = self._config['event_store_type']
        store_config = self._config.get('event_store_config') or {}
        self._event_store = EventStoreFactory.create_event_store(store_type, **store_config)
        logger.info("Event store initialized: %s", store_type)

        self._concurrency_manager = ConcurrencyManager()
        self._event_service = EventService(self._event_store)
        self._registry = AcademicRegistry(
            owner=owner,
            event_service=self._event_service,
            concurrency_manager=self._concurrency_manager,
        )
        self._rest_api = RegistryRestAPI(self._registry, self._config.get('cors_origins'))
        logger.info("Academic registry initialized with owner %s", owner)

    def start_rest_server(self, host: str = "0.0.0.0", port: int = 8000):
        """Start the REST server."""
        import uvicorn

        def run_server():
            uvicorn.run(
                self._rest_api.app,
                host=host,
                port=port,
                log_level=self._config['log_level'].lower(),
            )

        self._rest_thread = threading.Thread(target=run_server, daemon=True)
        self._rest_thread.start()
        self._running = True

        print(f"✓ REST server started on {host}:{port}")
        print(f"  - API Docs: http://localhost:{port}/docs")

    def stop_platform(self):
        """Stop the platform."""
        if not self._running:
            return
        self._running = False
        print("✓ Academic registry stopped")

    def run_demo(self):
        """Run the end-to-end registration scenario."""
        registry = self._registry
        owner = registry.owner
        institution = "inst-a"
        student = "student-s1"
        reader = "reader-x"

        print("Running academic registry demonstration...")

        registry.add_institution(owner, institution, "Institution A", "00.000.000/0001-00")
        print(f"✓ {owner} registered {institution}")

        registry.add_course(institution, institution, "A101", "Computer Science", "bachelor", 4)
        registry.add_discipline_to_course(institution, institution, "A101", "D1", "Algorithms",
                                          "Sorting, searching, graphs", 60, 4)
        registry.add_discipline_to_course(institution, institution, "A101", "D2", "Databases",
                                          "Relational model, SQL", 60, 4)
        print("✓ Course A101 with disciplines D1, D2")

        registry.add_student(institution, institution, student, "Student One", "123.456.789-00")
        registry.enroll_student_in_discipline(institution, institution, student, "D1", "A101")
        registry.enroll_student_in_discipline(institution, institution, student, "D2", "A101")
        print(f"✓ {student} enrolled in D1 and D2")

        registry.add_grade(institution, institution, student, "D1", 1, 85, 90, True)
        registry.add_grades(institution, institution, student, [
            GradeInput("D2", 1, 55, 70, False),
            GradeInput("D2", 2, 78, 88, True),
        ])

        registry.add_student_information(student, "<encrypted profile>", "<public key>")
        registry.add_allowed_address(student, reader, student)
        print(f"✓ {student} granted read access to {reader}")

        transcript = registry.get_student_transcript(reader, student)
        print("\n=== Transcript ===")
        for grade, discipline in transcript.pairs():
            status = "passed" if grade.passed else "failed"
            print(f"  {discipline.code:4} {discipline.name:12} period {grade.period}: "
                  f"{grade.score} ({grade.attendance}% attendance, {status})")

        print("\n=== Registry Statistics ===")
        print(registry.get_statistics())
        print("\n✓ Demo completed")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Academic Registry")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="REST server host")
    parser.add_argument("--rest-port", type=int, default=8000, help="REST server port")
    parser.add_argument("--owner", type=str, help="Identity of the registry owner")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--config", type=str, help="Configuration file path")

    args = parser.parse_args()

    config = {}
    if args.config:
        import json
        with open(args.config, 'r') as f:
            config = json.load(f)
    if args.owner:
        config['owner'] = args.owner

    platform = RegistryPlatform(config)

    try:
        if args.demo:
            platform.run_demo()
        else:
            platform.start_rest_server(args.host, args.rest_port)
            print("\nRegistry is running. Press Ctrl+C to stop.")
            while True:
                time.sleep(1)

    except KeyboardInterrupt:
        print("\nShutting down...")
        platform.stop_platform()


if __name__ == "__main__":
    main()
