"""Tests for canvasreg.canvases.registry module."""

import logging
import threading

import pytest

from canvasreg.canvases import (
    DEFAULT_CANVAS_TYPE,
    CanvasDescriptor,
    CanvasRegistry,
)


def make(canvas_type, themes=(), file_types=(), **kwargs):
    return CanvasDescriptor(
        type=canvas_type,
        supported_themes=themes,
        supported_file_types=file_types,
        **kwargs,
    )


@pytest.fixture
def registry():
    return CanvasRegistry()


@pytest.fixture
def p1():
    return make("p1", {"dark"}, {"markdown"})


@pytest.fixture
def p2():
    return make("p2", {"light"}, {"markdown"})


class TestRegister:
    """Tests for register and register_all."""

    def test_get_returns_registered(self, registry, p1):
        registry.register(p1)
        assert registry.get("p1") == p1
        assert registry.get("p1") is p1

    def test_reregister_replaces_whole_entry(self, registry):
        """Second registration wins; capability sets are not merged."""
        first = make("x", {"dark"}, {"md"})
        second = make("x", {"light"}, set())
        registry.register(first)
        registry.register(second)

        assert len(registry) == 1
        assert registry.get("x") is second
        assert registry.get("x").supported_themes == frozenset({"light"})
        assert registry.get("x").supported_file_types == frozenset()

    def test_overwrite_logs_warning(self, registry, caplog):
        registry.register(make("x", {"dark"}))
        with caplog.at_level(logging.WARNING, logger="canvasreg.canvases.registry"):
            registry.register(make("x", {"light"}))
        assert "already registered" in caplog.text

    def test_first_register_does_not_warn(self, registry, caplog):
        with caplog.at_level(logging.WARNING, logger="canvasreg.canvases.registry"):
            registry.register(make("x", {"dark"}))
        assert caplog.text == ""

    def test_empty_type_accepted(self, registry):
        """Malformed descriptors are stored as-is."""
        d = make("", {"dark"})
        registry.register(d)
        assert registry.has_plugin("")
        assert registry.get("") is d

    def test_overwrite_moves_to_end(self, registry):
        registry.register(make("a", {"t"}))
        registry.register(make("b", {"t"}))
        registry.register(make("a", {"t"}))
        assert registry.get_types() == ["b", "a"]

    def test_register_all_in_order(self, registry):
        registry.register_all([make("a"), make("b"), make("c")])
        assert registry.get_types() == ["a", "b", "c"]

    def test_register_all_later_wins(self, registry):
        last = make("a", {"light"})
        registry.register_all([make("a", {"dark"}), make("b"), last])
        assert registry.get("a") is last
        assert registry.get_types() == ["b", "a"]

    def test_register_all_accepts_generator(self, registry):
        registry.register_all(make(t) for t in ("a", "b"))
        assert registry.get_types() == ["a", "b"]


class TestUnregister:
    """Tests for unregister, clear and introspection."""

    def test_unregister_present(self, registry, p1):
        registry.register(p1)
        assert registry.unregister("p1") is True
        assert registry.get("p1") is None
        assert not registry.has_plugin("p1")

    def test_unregister_absent_leaves_mapping(self, registry, p1):
        registry.register(p1)
        assert registry.unregister("missing") is False
        assert registry.get_all() == [p1]

    def test_unregister_twice(self, registry, p1):
        registry.register(p1)
        assert registry.unregister("p1") is True
        assert registry.unregister("p1") is False

    def test_reregister_after_unregister(self, registry, p1, p2):
        registry.register(p1)
        registry.register(p2)
        registry.unregister("p1")
        registry.register(p1)
        assert registry.get_types() == ["p2", "p1"]

    def test_clear(self, registry, p1, p2):
        registry.register_all([p1, p2])
        registry.clear()
        assert len(registry) == 0
        assert registry.get_all() == []
        assert registry.get_types() == []

    def test_has_plugin_and_contains(self, registry, p1):
        registry.register(p1)
        assert registry.has_plugin("p1")
        assert "p1" in registry
        assert not registry.has_plugin("p2")
        assert "p2" not in registry

    def test_get_missing(self, registry):
        assert registry.get("nope") is None

    def test_get_all_is_snapshot(self, registry, p1):
        registry.register(p1)
        snapshot = registry.get_all()
        registry.clear()
        assert snapshot == [p1]


class TestFind:
    """Tests for capability-filtered lookup."""

    @pytest.fixture
    def populated(self, registry):
        registry.register_all(
            [
                make("a", {"dark", "light"}, {"md"}),
                make("b", {"light"}, {"png"}),
                make("c", {"dark"}, set()),
                make("d", set(), {"md", "png"}),
            ]
        )
        return registry

    def test_find_by_theme_subset_in_order(self, populated):
        result = populated.find_by_theme("dark")
        assert [d.type for d in result] == ["a", "c"]
        expected = [d for d in populated.get_all() if "dark" in d.supported_themes]
        assert result == expected

    def test_find_by_theme_none(self, populated):
        assert populated.find_by_theme("sepia") == []

    def test_find_by_file_type(self, populated):
        assert [d.type for d in populated.find_by_file_type("png")] == ["b", "d"]
        assert [d.type for d in populated.find_by_file_type("md")] == ["a", "d"]

    def test_find_by_file_type_none(self, populated):
        assert populated.find_by_file_type("pdf") == []

    def test_order_follows_overwrite(self, populated):
        populated.register(make("a", {"dark"}, {"md"}))
        assert [d.type for d in populated.find_by_theme("dark")] == ["c", "a"]


class TestFindBestMatch:
    """Tests for best-match resolution."""

    def test_fallback_to_default(self, registry):
        """Only a default canvas registered: it is returned for any theme."""
        d0 = make(DEFAULT_CANVAS_TYPE, {"dark"})
        registry.register(d0)
        assert registry.find_best_match("light") is d0

    def test_file_type_and_theme_match(self, registry, p1, p2):
        registry.register_all([p1, p2])
        assert registry.find_best_match("light", "markdown") is p2

    def test_file_type_wins_without_theme(self, registry, p1, p2):
        registry.register_all([p1, p2])
        assert registry.find_best_match("sepia", "markdown") is p1

    def test_unknown_file_type_falls_to_theme(self, registry):
        p3 = make("p3", {"dark"}, set())
        registry.register(p3)
        assert registry.find_best_match("dark", "image") is p3

    def test_empty_registry_returns_none(self, registry):
        assert registry.find_best_match("dark") is None
        assert registry.find_best_match("dark", "md") is None

    def test_file_type_beats_theme_only_plugin(self, registry):
        """A theme-only plugin registered first loses to a file-type match."""
        theme_only = make("theme_only", {"dark"}, set())
        by_type = make("by_type", {"light"}, {"md"})
        registry.register_all([theme_only, by_type])
        assert registry.find_best_match("dark", "md") is by_type

    def test_file_type_match_beats_default(self, registry):
        default = make(DEFAULT_CANVAS_TYPE, {"dark"}, {"txt"})
        code = make("code", set(), {"py"})
        registry.register_all([default, code])
        assert registry.find_best_match("dark", "py") is code

    def test_theme_match_without_file_type(self, registry, p1, p2):
        registry.register_all([p1, p2])
        assert registry.find_best_match("light") is p2

    def test_empty_file_type_treated_as_absent(self, registry, p1, p2):
        registry.register_all([p1, p2])
        assert registry.find_best_match("light", "") is p2

    def test_no_match_no_default(self, registry, p1):
        registry.register(p1)
        assert registry.find_best_match("sepia", "pdf") is None

    def test_no_match_uses_default(self, registry, p1):
        default = make(DEFAULT_CANVAS_TYPE, set(), set())
        registry.register_all([p1, default])
        assert registry.find_best_match("sepia", "pdf") is default

    def test_custom_default_type(self):
        registry = CanvasRegistry(default_type="fallback")
        fallback = make("fallback")
        registry.register_all([make(DEFAULT_CANVAS_TYPE), fallback])
        assert registry.find_best_match("sepia") is fallback

    def test_default_removed(self, registry):
        registry.register(make(DEFAULT_CANVAS_TYPE))
        registry.unregister(DEFAULT_CANVAS_TYPE)
        assert registry.find_best_match("sepia") is None

    def test_does_not_mutate(self, registry, p1, p2):
        registry.register_all([p1, p2])
        registry.find_best_match("light", "markdown")
        assert registry.get_all() == [p1, p2]


class TestConcurrency:
    """Concurrent register/unregister keeps one entry per type."""

    def test_parallel_register(self, registry):
        def worker(n):
            for i in range(200):
                registry.register(make(f"c{i % 20}", {f"t{n}"}))
                registry.find_best_match(f"t{n}", "md")
                registry.unregister(f"c{(i + n) % 20}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        types = registry.get_types()
        assert len(types) == len(set(types))
        for t in types:
            assert registry.get(t).type == t

    def test_batch_registration_is_all_or_nothing(self, registry):
        batch = [make(t, {"general"}) for t in ("a", "b", "c")]
        seen = set()
        done = threading.Event()

        def writer():
            for _ in range(300):
                registry.register_all(batch)
                registry.clear()
            done.set()

        def reader():
            while not done.is_set():
                seen.add(tuple(registry.get_types()))

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert seen <= {(), ("a", "b", "c")}
