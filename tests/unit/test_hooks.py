#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the table hook system."""

import logging

import pytest

from html2blocks.hooks import HookContext, HookManager
from html2blocks.mapping import MappingTable
from html2blocks.sanitizer import AllowListPolicy


@pytest.fixture
def manager():
    """Create a fresh hook manager for each test."""
    return HookManager()


@pytest.fixture
def context():
    """Create a hook context without a converter."""
    return HookContext()


@pytest.mark.unit
class TestHookContext:
    """Tests for HookContext class."""

    def test_basic_context(self):
        context = HookContext()
        assert context.converter is None
        assert context.shared == {}

    def test_get_shared(self, context):
        context.shared["key1"] = "value1"

        assert context.get_shared("key1") == "value1"
        assert context.get_shared("missing") is None
        assert context.get_shared("missing", "default") == "default"

    def test_set_shared(self, context):
        context.set_shared("counter", 3)
        assert context.shared["counter"] == 3


@pytest.mark.unit
class TestHookRegistration:
    """Tests for registering and unregistering hooks."""

    def test_register_hook(self, manager):
        def hook(table, context):
            return table

        manager.register_hook("mapping", hook)

        assert manager.has_hooks("mapping")
        assert not manager.has_hooks("allowed_tags")

    def test_register_unknown_hook_point(self, manager):
        with pytest.raises(ValueError, match="Unknown hook point"):
            manager.register_hook("image", lambda table, context: table)

    def test_unregister_hook(self, manager):
        def hook(table, context):
            return table

        manager.register_hook("mapping", hook)

        assert manager.unregister_hook("mapping", hook) is True
        assert not manager.has_hooks("mapping")
        assert manager.unregister_hook("mapping", hook) is False
        assert manager.unregister_hook("allowed_tags", hook) is False

    def test_list_hooks_returns_copy(self, manager):
        def hook(table, context):
            return table

        manager.register_hook("mapping", hook, priority=50)
        hooks = manager.list_hooks()
        hooks["mapping"].clear()

        assert manager.list_hooks() == {"mapping": [(50, hook)]}

    def test_clear(self, manager):
        manager.register_hook("mapping", lambda table, context: table)
        manager.register_hook("allowed_tags", lambda table, context: table)
        manager.clear()

        assert manager.list_hooks() == {}


@pytest.mark.unit
class TestHookExecution:
    """Tests for executing hooks."""

    def test_no_hooks_returns_input(self, manager, context):
        table = MappingTable()
        assert manager.execute_hooks("mapping", table, context) is table

    def test_hooks_run_in_priority_order(self, manager, context):
        order = []

        def make_hook(name):
            def hook(table, ctx):
                order.append(name)
                return table

            return hook

        manager.register_hook("mapping", make_hook("late"), priority=200)
        manager.register_hook("mapping", make_hook("first"), priority=10)
        manager.register_hook("mapping", make_hook("default-a"))
        manager.register_hook("mapping", make_hook("default-b"))

        manager.execute_hooks("mapping", MappingTable(), context)

        assert order == ["first", "default-a", "default-b", "late"]

    def test_each_hook_receives_previous_result(self, manager, context):
        replacement = AllowListPolicy({"p": []})

        manager.register_hook("allowed_tags", lambda policy, ctx: replacement, priority=1)
        manager.register_hook("allowed_tags", lambda policy, ctx: ctx.set_shared("seen", policy) or policy, priority=2)

        result = manager.execute_hooks("allowed_tags", AllowListPolicy(), context)

        assert result is replacement
        assert context.get_shared("seen") is replacement

    def test_none_keeps_table(self, manager, context):
        table = MappingTable()
        manager.register_hook("mapping", lambda t, ctx: None)

        assert manager.execute_hooks("mapping", table, context) is table

    def test_failing_hook_logged_and_skipped(self, manager, context, caplog):
        def broken(table, ctx):
            raise RuntimeError("boom")

        def add_aside(table, ctx):
            table.add("aside", "acme/callout")
            return table

        manager.register_hook("mapping", broken, priority=1)
        manager.register_hook("mapping", add_aside, priority=2)

        with caplog.at_level(logging.WARNING, logger="html2blocks.hooks"):
            result = manager.execute_hooks("mapping", MappingTable(), context)

        assert "aside" in result
        assert "boom" in caplog.text

    def test_strict_mode_reraises(self, context):
        manager = HookManager(strict=True)

        def broken(table, ctx):
            raise RuntimeError("boom")

        manager.register_hook("mapping", broken)

        with pytest.raises(RuntimeError, match="boom"):
            manager.execute_hooks("mapping", MappingTable(), context)
