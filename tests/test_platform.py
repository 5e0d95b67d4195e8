"""Platform: tests for configuration, wiring and the demo scenario.

Tests cover:
    - invalid owner and event store settings raise ConfigurationError
    - file journal configuration and restart from the journal
    - run_demo completes and leaves the expected records
    - JSON log formatter
"""

import json
import logging

import pytest

from academic_registry.core.exceptions import ConfigurationError
from academic_registry.main import DEFAULT_CONFIG, RegistryPlatform
from academic_registry.observability import JSONFormatter


def test_defaults_are_applied():
    platform = RegistryPlatform(configure_logging=False)
    assert platform.registry.owner == DEFAULT_CONFIG["owner"]
    assert platform.config["event_store_type"] == "memory"


@pytest.mark.parametrize("owner", ["", None, 42])
def test_invalid_owner_rejected(owner):
    with pytest.raises(ConfigurationError):
        RegistryPlatform({"owner": owner}, configure_logging=False)


def test_unknown_event_store_rejected():
    with pytest.raises(ConfigurationError):
        RegistryPlatform({"event_store_type": "cassandra"}, configure_logging=False)


def test_file_event_store_config(tmp_path):
    platform = RegistryPlatform({
        "owner": "root",
        "event_store_type": "file",
        "event_store_config": {"base_path": str(tmp_path)},
    }, configure_logging=False)
    platform.registry.add_institution("root", "inst", "Inst", "doc")
    assert (tmp_path / "journal.jsonl").exists()


def test_file_journal_platform_restores_after_restart(tmp_path):
    config = {
        "owner": "root",
        "event_store_type": "file",
        "event_store_config": {"base_path": str(tmp_path)},
    }
    RegistryPlatform(config, configure_logging=False).run_demo()

    restarted = RegistryPlatform(config, configure_logging=False).registry
    assert [i.identity for i in restarted.get_institution_list()] == ["inst-a"]
    assert len(restarted.get_student_transcript("reader-x", "student-s1")) == 3


def test_run_demo(capsys):
    platform = RegistryPlatform(configure_logging=False)
    platform.run_demo()

    out = capsys.readouterr().out
    assert "Demo completed" in out
    transcript = platform.registry.get_student_transcript("reader-x", "student-s1")
    assert len(transcript) == 3
    assert all(not d.is_empty for d in transcript.disciplines)


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("academic_registry", logging.WARNING, __file__, 1,
                               "rejected %s", ("call",), None)
    record.error_code = "NOT_FOUND"
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "rejected call"
    assert payload["level"] == "WARNING"
    assert payload["error_code"] == "NOT_FOUND"
