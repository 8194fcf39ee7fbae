"""
Tests for the configuration holder.

This module tests source composition, lazy loading, touchfile reloads,
programmatic installation and listener notification.
"""

import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock, patch

import pytest

from layered_config.core.exceptions import ConfigurationError, ReadOnlyConfigurationError
from layered_config.core.interfaces.loaders import IConfigurationLoader
from layered_config.core.interfaces.sources import IConfigSource
from layered_config.infrastructure.config.holder import ConfigHolder
from layered_config.infrastructure.config.models import BootstrapSettings, DefaultSourceKind
from layered_config.infrastructure.config.sources import MapSource
from layered_config.plugins.registry import LoaderRegistry

from conftest import FakeClock

WriteYaml = Callable[[str, Dict[str, Any]], Path]


class TimeoutLoader(IConfigurationLoader):
    """Loader overriding the application timeout."""

    def get_configuration(self) -> IConfigSource:
        return MapSource({"app.timeout": 60, "loader.only": "yes"})


class FailingLoader(IConfigurationLoader):
    """Loader whose source cannot be built."""

    def get_configuration(self) -> IConfigSource:
        raise RuntimeError("backend unavailable")


class NoneLoader(IConfigurationLoader):
    """Loader returning nothing instead of a source."""

    def get_configuration(self) -> IConfigSource:
        return None  # type: ignore[return-value]


def _defaults() -> MapSource:
    return MapSource({"app.timeout": 30, "default.only": "d"})


def _registry(*factories: Any) -> LoaderRegistry:
    registry = LoaderRegistry(use_entry_points=False)
    for factory in factories:
        registry.register(factory)
    return registry


class TestSourceComposition:
    """Test cases for combining loader sources with the default source."""

    def test_loader_overrides_default(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(TimeoutLoader), default_factory=_defaults)

        config = holder.get_instance()

        assert config.get_int("app.timeout") == 60
        assert config.get_string("loader.only") == "yes"
        assert config.get_string("default.only") == "d"

    def test_plugins_disabled_uses_default_only(self) -> None:
        settings = BootstrapSettings(plugins_enabled=False)
        registry = _registry(TimeoutLoader)
        holder = ConfigHolder(settings, registry, default_factory=_defaults)

        with patch.object(registry, 'discover') as mock_discover:
            config = holder.get_instance()

        mock_discover.assert_not_called()
        assert config.get_int("app.timeout") == 30
        assert not config.contains_key("loader.only")

    def test_default_not_appended(self) -> None:
        settings = BootstrapSettings(append_default=False)
        holder = ConfigHolder(settings, _registry(TimeoutLoader), default_factory=_defaults)

        config = holder.get_instance()

        assert config.get_int("app.timeout") == 60
        assert not config.contains_key("default.only")

    def test_no_loaders_uses_default(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)

        assert holder.get_instance().as_dict() == _defaults().as_dict()

    def test_layered_default_source_from_files(self, tmp_path: Path, write_yaml: WriteYaml) -> None:
        write_yaml("layered-defaults.yaml", {"app": {"timeout": 30}})
        settings = BootstrapSettings(search_paths=[str(tmp_path)])

        holder = ConfigHolder(settings, _registry(TimeoutLoader))
        assert holder.get_instance().get_int("app.timeout") == 60

        holder = ConfigHolder(settings, _registry())
        assert holder.get_instance().get_int("app.timeout") == 30

    def test_empty_default_source(self, tmp_path: Path, write_yaml: WriteYaml) -> None:
        write_yaml("layered-defaults.yaml", {"app": {"timeout": 30}})
        settings = BootstrapSettings(default_source=DefaultSourceKind.EMPTY, search_paths=[str(tmp_path)])

        holder = ConfigHolder(settings, _registry())

        assert holder.get_instance().is_empty()

    def test_loader_failure_is_wrapped(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(FailingLoader), default_factory=_defaults)

        with pytest.raises(ConfigurationError, match="FailingLoader") as exc_info:
            holder.get_instance()

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert holder.generation is None

    def test_loader_returning_non_source_rejected(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(NoneLoader), default_factory=_defaults)

        with pytest.raises(ConfigurationError, match="NoneLoader returned NoneType"):
            holder.get_instance()

        assert holder.generation is None

    def test_loader_returning_non_source_keeps_previous_generation(self) -> None:
        registry = _registry(TimeoutLoader)
        holder = ConfigHolder(BootstrapSettings(), registry, default_factory=_defaults)
        first = holder.get_instance()

        registry.register(NoneLoader)
        with pytest.raises(ConfigurationError, match="not a configuration source"):
            holder.reset()

        assert holder.get_instance() is first


class TestLoading:
    """Test cases for lazy loading and reset."""

    def test_configuration_loaded_lazily(self) -> None:
        factory = Mock(side_effect=_defaults)
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=factory)

        assert holder.generation is None
        factory.assert_not_called()

        holder.get_instance()
        holder.get_instance()

        factory.assert_called_once()
        assert holder.generation is not None
        assert holder.generation.number == 1

    def test_snapshot_is_read_only(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)

        with pytest.raises(ReadOnlyConfigurationError):
            holder.get_instance().set_property("app.timeout", 5)

    def test_snapshot_exposes_no_writable_source(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(TimeoutLoader), default_factory=_defaults)
        snapshot = holder.get_instance()

        public = [getattr(snapshot, name) for name in dir(snapshot) if not name.startswith("_")]

        assert not any(isinstance(value, IConfigSource) for value in public)
        assert not hasattr(snapshot, "delegate")
        with pytest.raises(ReadOnlyConfigurationError):
            snapshot.clear_property("app.timeout")
        assert holder.get_instance().get_int("app.timeout") == 60

    def test_reset_reloads_same_content(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(TimeoutLoader), default_factory=_defaults)
        before = holder.get_instance().as_dict()

        holder.reset()
        holder.reset()

        assert holder.get_instance().as_dict() == before
        assert holder.generation is not None
        assert holder.generation.number == 3

    def test_reset_discards_programmatic_changes(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)
        holder.set_configuration(MapSource({"app.timeout": 99}))

        holder.reset()

        assert holder.get_instance().get_int("app.timeout") == 30

    def test_no_touchfile_means_no_io(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)
        first = holder.get_instance()

        with patch.object(Path, "stat") as mock_stat:
            for _ in range(5):
                assert holder.get_instance() is first

        mock_stat.assert_not_called()
        assert holder.touchfile is not None
        assert not holder.touchfile.armed

    def test_first_load_failure_installs_nothing(self) -> None:
        factory = Mock(side_effect=[OSError("disk gone"), _defaults()])
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=factory)

        with pytest.raises(ConfigurationError, match="Failed to instantiate default configuration"):
            holder.get_instance()
        assert holder.generation is None

        assert holder.get_instance().get_int("app.timeout") == 30

    def test_default_factory_must_return_source(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=lambda: {"a": 1})

        with pytest.raises(ConfigurationError, match="not a configuration source"):
            holder.get_instance()


class TestTouchfileReload:
    """Test cases for reloads triggered by the touchfile."""

    def setup_method(self) -> None:
        self.interval = 1000
        self.version = 1
        self.fail = False

    def _factory(self, touch_path: Path) -> Callable[[], IConfigSource]:
        def _build() -> IConfigSource:
            if self.fail:
                raise OSError("resource unreadable")
            return MapSource({
                "layered.config.touchfile": str(touch_path),
                "layered.config.touchfile.interval": self.interval,
                "app.version": self.version,
            })
        return _build

    def test_touch_triggers_reload(
        self, tmp_path: Path, clock: FakeClock, touch: Callable[[Path, float], None]
    ) -> None:
        touch_path = tmp_path / "reload"
        touch(touch_path, 1000.0)
        holder = ConfigHolder(BootstrapSettings(), _registry(),
                              default_factory=self._factory(touch_path), clock=clock)
        listener = Mock()

        assert holder.get_instance().get_int("app.version") == 1
        holder.add_property_change_listener(listener)

        self.version = 2
        touch(touch_path, 2000.0)
        clock.advance_ms(self.interval)

        assert holder.get_instance().get_int("app.version") == 2
        assert holder.generation is not None
        assert holder.generation.number == 2
        listener.assert_called_once_with()

    def test_no_reload_before_interval(
        self, tmp_path: Path, clock: FakeClock, touch: Callable[[Path, float], None]
    ) -> None:
        touch_path = tmp_path / "reload"
        touch(touch_path, 1000.0)
        holder = ConfigHolder(BootstrapSettings(), _registry(),
                              default_factory=self._factory(touch_path), clock=clock)
        first = holder.get_instance()

        touch(touch_path, 2000.0)
        clock.advance_ms(self.interval - 1)

        assert holder.get_instance() is first

    def test_reload_rebuilds_touchfile(
        self, tmp_path: Path, clock: FakeClock, touch: Callable[[Path, float], None]
    ) -> None:
        touch_path = tmp_path / "reload"
        touch(touch_path, 1000.0)
        holder = ConfigHolder(BootstrapSettings(), _registry(),
                              default_factory=self._factory(touch_path), clock=clock)
        holder.get_instance()
        old_touchfile = holder.touchfile

        self.interval = 5000
        touch(touch_path, 2000.0)
        clock.advance_ms(1000)
        holder.get_instance()

        assert holder.touchfile is not old_touchfile
        assert holder.touchfile is not None
        assert holder.touchfile.interval_ms == 5000
        assert holder.touchfile.last_modified == 2000.0

        clock.advance_ms(5000)
        holder.get_instance()
        assert holder.generation is not None
        assert holder.generation.number == 2

    def test_failed_reload_keeps_previous_generation(
        self, tmp_path: Path, clock: FakeClock, touch: Callable[[Path, float], None]
    ) -> None:
        touch_path = tmp_path / "reload"
        touch(touch_path, 1000.0)
        holder = ConfigHolder(BootstrapSettings(), _registry(),
                              default_factory=self._factory(touch_path), clock=clock)
        first = holder.get_instance()

        self.fail = True
        touch(touch_path, 2000.0)
        clock.advance_ms(self.interval)

        with pytest.raises(ConfigurationError):
            holder.get_instance()

        assert holder.generation is not None
        assert holder.generation.number == 1
        assert holder.get_instance() is first


class TestProgrammaticConfiguration:
    """Test cases for copy_configuration and set_configuration."""

    def test_copy_modify_and_install(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)
        listener = Mock()
        holder.add_property_change_listener(listener)

        copy = holder.copy_configuration(holder.get_instance())
        copy.set_property("app.timeout", 45)
        holder.set_configuration(copy)

        assert holder.get_instance().get_int("app.timeout") == 45
        assert holder.get_instance().get_string("default.only") == "d"
        # one call for the initial load, one for the installation
        assert listener.call_count == 2

    def test_set_configuration_ignores_loaders(self) -> None:
        registry = _registry(TimeoutLoader)
        holder = ConfigHolder(BootstrapSettings(), registry, default_factory=_defaults)

        with patch.object(registry, 'discover') as mock_discover:
            holder.set_configuration(MapSource({"app.timeout": 1}))

        mock_discover.assert_not_called()
        assert holder.get_instance().get_int("app.timeout") == 1

    def test_installed_snapshot_is_read_only(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)
        holder.set_configuration(MapSource({"k": "v"}))

        with pytest.raises(ReadOnlyConfigurationError):
            holder.get_instance().clear_property("k")

    def test_set_configuration_reads_touchfile_settings(self, tmp_path: Path, clock: FakeClock) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults, clock=clock)

        holder.set_configuration(MapSource({"layered.config.touchfile": str(tmp_path / "t")}))

        assert holder.touchfile is not None
        assert holder.touchfile.armed


class TestListeners:
    """Test cases for change listeners."""

    def setup_method(self) -> None:
        self.holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)

    def test_each_listener_called_once_per_change(self) -> None:
        listeners = [Mock() for _ in range(3)]
        for listener in listeners:
            self.holder.add_property_change_listener(listener)

        self.holder.reset()

        for listener in listeners:
            listener.assert_called_once_with()

    def test_listeners_called_in_registration_order(self) -> None:
        calls: List[str] = []
        self.holder.add_property_change_listener(lambda: calls.append("first"))
        self.holder.add_property_change_listener(lambda: calls.append("second"))

        self.holder.notify_listeners()

        assert calls == ["first", "second"]

    def test_adding_listener_twice_registers_once(self) -> None:
        listener = Mock()

        self.holder.add_property_change_listener(listener)
        self.holder.add_property_change_listener(listener)
        self.holder.notify_listeners()

        assert self.holder.listeners == [listener]
        listener.assert_called_once_with()

    def test_notify_without_listeners(self) -> None:
        self.holder.notify_listeners()

        assert self.holder.listeners == []

    def test_failing_listener_stops_notification(self) -> None:
        later = Mock()
        self.holder.add_property_change_listener(Mock(side_effect=RuntimeError("listener bug")))
        self.holder.add_property_change_listener(later)

        with pytest.raises(RuntimeError, match="listener bug"):
            self.holder.reset()

        later.assert_not_called()
        assert self.holder.generation is not None
        assert self.holder.generation.number == 1

    def test_listener_may_read_new_configuration(self) -> None:
        seen: List[Optional[int]] = []
        self.holder.add_property_change_listener(
            lambda: seen.append(self.holder.get_instance().get_int("app.timeout")))

        self.holder.set_configuration(MapSource({"app.timeout": 7}))

        assert seen == [7]


class TestConcurrency:
    """Test cases for changes made from several threads."""

    def test_racing_readers_trigger_one_reload(
        self, tmp_path: Path, clock: FakeClock, touch: Callable[[Path, float], None]
    ) -> None:
        touch_path = tmp_path / "reload"
        touch(touch_path, 1000.0)
        builds: List[int] = []

        def _build() -> IConfigSource:
            builds.append(len(builds) + 1)
            return MapSource({
                "layered.config.touchfile": str(touch_path),
                "layered.config.touchfile.interval": 1000,
                "app.build": len(builds),
            })

        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_build, clock=clock)
        holder.get_instance()

        touch(touch_path, 2000.0)
        clock.advance_ms(1000)

        barrier = threading.Barrier(16)
        seen: List[int] = []
        errors: List[BaseException] = []

        def reader() -> None:
            barrier.wait()
            try:
                seen.append(holder.get_instance().get_int("app.build"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(builds) == 2
        assert seen == [2] * 16
        assert holder.generation is not None
        assert holder.generation.number == 2

    def test_readers_never_see_mixed_configuration(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(),
                              default_factory=lambda: MapSource({"pair.a": 0, "pair.b": 0}))
        holder.get_instance()
        stop = threading.Event()
        mismatches: List[Any] = []

        def reader() -> None:
            while not stop.is_set():
                snapshot = holder.get_instance()
                a, b = snapshot.get_int("pair.a"), snapshot.get_int("pair.b")
                if a != b:
                    mismatches.append((a, b))

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()
        try:
            for value in range(1, 201):
                holder.set_configuration(MapSource({"pair.a": value, "pair.b": value}))
        finally:
            stop.set()
            for thread in readers:
                thread.join(timeout=10)

        assert mismatches == []
        assert holder.get_instance().get_int("pair.a") == 200

    def test_racing_set_and_reset_number_generations_consistently(self) -> None:
        holder = ConfigHolder(BootstrapSettings(), _registry(), default_factory=_defaults)
        holder.get_instance()
        numbers: List[int] = []

        def record() -> None:
            generation = holder.generation
            assert generation is not None
            numbers.append(generation.number)

        holder.add_property_change_listener(record)
        barrier = threading.Barrier(8)
        errors: List[BaseException] = []

        def worker(index: int) -> None:
            barrier.wait()
            try:
                for step in range(10):
                    if (index + step) % 2:
                        holder.reset()
                    else:
                        holder.set_configuration(MapSource({"app.timeout": step}))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert holder.generation is not None
        assert holder.generation.number == 81
        assert numbers == list(range(2, 82))
