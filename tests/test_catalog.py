"""Tests for the example tool catalog."""

from __future__ import annotations

from tkit.catalog import EXAMPLES, by_category, starter_tools


def test_names_are_unique():
    names = [example.name for example in EXAMPLES]
    assert len(names) == len(set(names))


def test_starters():
    assert [example.name for example in starter_tools()] == ["git", "docker", "node", "python"]


def test_categories_cover_everything():
    groups = by_category()
    assert set(groups) == {"Development Tools", "Programming Languages"}
    assert sum(len(entries) for entries in groups.values()) == len(EXAMPLES)


def test_to_tool_fallbacks():
    git = next(example for example in EXAMPLES if example.name == "git")
    tool = git.to_tool()
    assert tool.install_commands == ["sudo apt-get update", "sudo apt-get install -y git"]
    assert tool.remove_commands == ["sudo apt-get remove -y git"]
    assert tool.update_commands
    assert tool.installed is False


def test_to_tool_keeps_explicit_sequences():
    rust = next(example for example in EXAMPLES if example.name == "rust")
    tool = rust.to_tool()
    assert tool.remove_commands == ["rustup self uninstall -y"]
    assert tool.update_commands == ["rustup update"]
