"""
Pytest configuration and fixtures for helpview tests

Provides reusable fixtures for testing helpview, including:
- Isolated HOME and config file
- A throwaway Vim runtime directory with doc/tags
- A rich Console that records output
"""

import os
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

import helpview.config
from helpview.config import ConfigManager
from helpview.output import OutputSink

ENV_VARS = (
    "HELPVIEW_VIMRUNTIME",
    "HELPVIEW_FORMATTER",
    "HELPVIEW_DEBUG",
    "HELPVIEW_LOG_FILE",
    "VIMRUNTIME",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def test_environment(monkeypatch, tmp_path):
    """
    Set up isolated test environment for all tests

    - Tests run in a temporary working directory
    - HOME and the config file point into tmp_path
    - The global config manager is rebuilt per test
    """
    original_cwd = Path.cwd()
    os.chdir(tmp_path)

    test_home = tmp_path / "home"
    test_home.mkdir()
    monkeypatch.setenv("HOME", str(test_home))

    config_dir = test_home / ".helpview"
    monkeypatch.setattr(ConfigManager, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(ConfigManager, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(helpview.config, "_config_manager", None)

    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    yield tmp_path

    os.chdir(original_cwd)


def _write_runtime(root: Path, tags: str, docs: dict) -> Path:
    doc = root / "doc"
    doc.mkdir(parents=True, exist_ok=True)
    (doc / "tags").write_text(tags, encoding="utf-8")
    for name, text in docs.items():
        (doc / name).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def runtime(tmp_path):
    """
    A small runtime with one help file and a handful of tags

    motion.txt holds anchors for every tag in the index.
    """
    motion = "\n".join(
        [
            "*motion.txt*  For Vim version 9.0",
            "",
            "==============================================================",
            "1. Motions and operators\t\t\t*operator*",
            "",
            "The motion commands can be used after an operator command.",
            "",
            "                                                *<Left>* *h*",
            "h   or  <Left>   [count] characters to the left.",
            "",
            "                                                *word* *w*",
            "w   [count] words forward.",
            "",
            "                                                *wordmotion*",
            "Word motions move by words.",
            "",
            "                                                *keyword*",
            "Keywords are looked up with K.",
            "",
        ]
    )
    tags = "\n".join(
        [
            "keyword\tmotion.txt\t/*keyword*",
            "wordmotion\tmotion.txt\t/*wordmotion*",
            "word\tmotion.txt\t/*word*",
            "<Left>\tmotion.txt\t/*<Left>*",
            "h\tmotion.txt\t/*h*",
            "operator\tmotion.txt\t/*operator*",
            "",
        ]
    )
    return _write_runtime(tmp_path / "runtime", tags, {"motion.txt": motion})


@pytest.fixture
def make_runtime(tmp_path):
    """Factory: make_runtime(tags, {name: text}) -> runtime directory"""

    def factory(tags: str, docs: dict, name: str = "custom") -> Path:
        return _write_runtime(tmp_path / name, tags, docs)

    return factory


@pytest.fixture
def recording_console():
    """Console writing plain text to a StringIO buffer"""
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=120)
    return console, output


@pytest.fixture
def sink(recording_console):
    """OutputSink backed by the recording console"""
    console, output = recording_console
    out = OutputSink(console)
    out.output = output
    return out
