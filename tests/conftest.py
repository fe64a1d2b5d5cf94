"""Shared pytest fixtures for pikesre tests."""
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from pikesre.infrastructure.config_manager import set_global_config
from pikesre.infrastructure.logger import LogLevel, Logger, set_global_logger
from pikesre.rules.engine import PatternEngine
from pikesre.rules.template import IdGenerator


class ListHandler(logging.Handler):
    """Logging handler collecting formatted messages in memory."""

    def __init__(self):
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> List[str]:
        return [record.getMessage() for record in self.records]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def log_capture() -> ListHandler:
    """In-memory handler for asserting on log output."""
    return ListHandler()


@pytest.fixture
def debug_logger(log_capture: ListHandler) -> Logger:
    """DEBUG logger writing only to log_capture."""
    return Logger(name="pikesre", level=LogLevel.DEBUG, handlers=[log_capture])


@pytest.fixture
def id_factory() -> IdGenerator:
    """Deterministic identifier source."""
    return IdGenerator(seed=42, clock=lambda: 1700000000.0)


@pytest.fixture
def engine(id_factory: IdGenerator, debug_logger: Logger) -> PatternEngine:
    """Empty pattern engine with deterministic ids."""
    return PatternEngine(id_factory=id_factory, logger=debug_logger)


@pytest.fixture
def audit_def() -> Dict[str, Any]:
    """Rule deriving an audit record from each user document."""
    return {
        "name": "audit",
        "watch": "/users/**",
        "emit": "audit@v1",
        "emit_path": "/audit/${path.1}",
        "template": {"user_id": "${path.1}"},
    }


@pytest.fixture
def sample_pattern_defs(audit_def: Dict[str, Any]) -> List[Dict[str, Any]]:
    """A small rule set with an extractor and a guarded rule."""
    return [
        audit_def,
        {
            "name": "emails",
            "watch": "/inbox/*",
            "x": r"([\w.]+)@([\w.]+)",
            "emit": "email@v1",
            "emit_path": "/emails/${2}/${1}",
            "template": {"address": "${0}"},
        },
        {
            "name": "errors",
            "watch": "/logs/**",
            "g": "ERROR",
            "v": "IGNORE",
            "emit": "alert@v1",
            "emit_path": "/alerts/${path.1}",
            "template": "${input}",
        },
    ]


@pytest.fixture
def patterns_file(temp_dir: Path, sample_pattern_defs: List[Dict[str, Any]]) -> Path:
    """YAML file holding sample_pattern_defs under a patterns key."""
    path = temp_dir / "patterns.yaml"
    with open(path, "w") as f:
        yaml.dump({"patterns": sample_pattern_defs}, f)
    return path


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the global logger and configuration between tests."""
    set_global_logger(None)
    set_global_config(None)
    yield
    set_global_logger(None)
    set_global_config(None)
