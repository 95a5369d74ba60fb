# src/newrelic_logsink/transport/factory.py
"""Factory functions for creating a LogPipeline from configuration.

This module provides the glue between configuration (RuntimeSinkConfig)
and the runtime LogPipeline. It handles:
1. Discovering transport classes via pluggy hooks
2. Instantiating and configuring the selected transport
3. Creating the LogPipeline around it

Usage:
    from newrelic_logsink.contracts.config import RuntimeSinkConfig
    from newrelic_logsink.transport.factory import create_log_pipeline

    config = RuntimeSinkConfig.from_settings(settings)
    pipeline = create_log_pipeline(config, metrics_sink=agent_sink)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

from newrelic_logsink.contracts.config import RuntimeSinkConfig
from newrelic_logsink.engine.pipeline import LogPipeline
from newrelic_logsink.errors import TransportConfigurationError
from newrelic_logsink.transport import BuiltinTransportsPlugin
from newrelic_logsink.transport.hookspecs import PROJECT_NAME, NewRelicLogsinkTransportSpec
from newrelic_logsink.transport.protocols import TransportProtocol

if TYPE_CHECKING:
    from newrelic_logsink.metrics.protocols import MetricsSink

logger = structlog.get_logger(__name__)

_PLUGINS_SOURCE = "transport_plugins"


def _resolve_transport_name(transport_class: type[TransportProtocol]) -> str:
    """Resolve transport name from the class-level _name or a temporary instance.

    Raises:
        TransportConfigurationError: If the name is missing or not a non-empty string.
    """
    class_name = transport_class.__name__

    class_dict = transport_class.__dict__
    if "_name" in class_dict:
        name_hint = class_dict["_name"]
        if type(name_hint) is str and name_hint != "":
            return name_hint
        raise TransportConfigurationError(
            class_name,
            f"Transport class attribute _name must be a non-empty string, got {name_hint!r}",
        )

    try:
        instance = transport_class()
    except Exception as e:
        raise TransportConfigurationError(
            class_name,
            f"Failed to instantiate transport class during discovery: {e}",
        ) from e

    resolved_name = instance.name
    if type(resolved_name) is not str or resolved_name == "":
        raise TransportConfigurationError(
            class_name,
            f"Transport name must be a non-empty string, got {resolved_name!r}",
        )
    return resolved_name


def discover_transport_registry(
    transport_plugins: Iterable[Any] = (),
) -> dict[str, type[TransportProtocol]]:
    """Discover transports via pluggy hooks.

    Registers the built-in transports plus any plugin objects provided by
    the caller, then calls ``newrelic_logsink_get_transports`` to build the
    name->class registry.

    Raises:
        TransportConfigurationError: If plugin registration fails, a hook
            returns something other than an iterable of classes, or two
            transports share a name.
    """
    plugin_manager = pluggy.PluginManager(PROJECT_NAME)
    plugin_manager.add_hookspecs(NewRelicLogsinkTransportSpec)

    for plugin in [BuiltinTransportsPlugin(), *list(transport_plugins)]:
        try:
            plugin_manager.register(plugin)
            plugin_manager.check_pending()
        except (pluggy.PluginValidationError, ValueError) as e:
            # ValueError: plugin object or name already registered
            if isinstance(e, pluggy.PluginValidationError):
                plugin_manager.unregister(plugin=plugin)
            raise TransportConfigurationError(
                _PLUGINS_SOURCE,
                f"Invalid transport plugin {type(plugin).__name__}: {e}",
            ) from e

    registry: dict[str, type[TransportProtocol]] = {}
    for hook_impl in plugin_manager.hook.newrelic_logsink_get_transports.get_hookimpls():
        plugin_name = type(hook_impl.plugin).__name__
        try:
            transports = hook_impl.function()
        except Exception as e:
            raise TransportConfigurationError(
                _PLUGINS_SOURCE,
                f"Transport plugin {plugin_name} failed in newrelic_logsink_get_transports: {e}",
            ) from e

        if transports is None or type(transports) in (str, bytes):
            raise TransportConfigurationError(
                _PLUGINS_SOURCE,
                f"newrelic_logsink_get_transports in plugin {plugin_name} returned "
                f"{type(transports).__name__}; expected iterable of transport classes",
            )
        try:
            transport_iter = iter(transports)
        except TypeError as e:
            raise TransportConfigurationError(
                _PLUGINS_SOURCE,
                f"newrelic_logsink_get_transports in plugin {plugin_name} returned "
                f"{type(transports).__name__}; expected iterable of transport classes",
            ) from e

        for transport_class in transport_iter:
            transport_name = _resolve_transport_name(transport_class)
            if transport_name in registry:
                raise TransportConfigurationError(
                    transport_name,
                    f"Duplicate transport name '{transport_name}' discovered: "
                    f"{registry[transport_name].__name__} and {transport_class.__name__}",
                )
            registry[transport_name] = transport_class

    return registry


def create_transport(
    config: RuntimeSinkConfig,
    *,
    transport_plugins: Iterable[Any] = (),
) -> TransportProtocol:
    """Instantiate and configure the transport named by ``config.transport``.

    Raises:
        TransportConfigurationError: If the transport is unknown or its
            configuration is invalid.
    """
    registry = discover_transport_registry(transport_plugins)
    try:
        transport_class = registry[config.transport]
    except KeyError:
        raise TransportConfigurationError(
            config.transport,
            f"Unknown transport. Available transports: {sorted(registry)}",
        ) from None

    transport = transport_class()
    options = config.transport_options
    transport.configure(options)
    logger.debug(
        "Transport configured",
        transport=config.transport,
        options_keys=sorted(k for k, v in options.items() if v is not None),
    )
    return transport


def create_log_pipeline(
    config: RuntimeSinkConfig,
    *,
    metrics_sink: MetricsSink | None = None,
    transport_plugins: Iterable[Any] = (),
) -> LogPipeline:
    """Create a LogPipeline with a discovered, configured transport.

    Args:
        config: Runtime configuration from RuntimeSinkConfig.from_settings().
        metrics_sink: Receiver for classifier effects (e.g. the agent sink).
            None ships logs only.
        transport_plugins: Additional plugin objects providing
            ``newrelic_logsink_get_transports`` hooks.

    Raises:
        TransportConfigurationError: If transport discovery or configuration fails.
    """
    transport = create_transport(config, transport_plugins=transport_plugins)
    logger.info(
        "Log pipeline created",
        application=config.application_name,
        transport=transport.name,
        batch_size_limit=config.batch_size_limit,
        period_seconds=config.period_seconds,
        metrics_sink=type(metrics_sink).__name__ if metrics_sink is not None else None,
    )
    return LogPipeline(config, transport, metrics_sink=metrics_sink)
