"""Provider registry and resolution.

Maps stable lowercase provider names, and their legacy aliases, to the
descriptor that knows how to configure and build the provider.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from txtwire._logging import get_logger
from txtwire.backends.base import Backend
from txtwire.config import ProviderConfig, validate_config
from txtwire.exceptions import UnrecognizedProviderError
from txtwire.providers.adapter import Adapter, build_adapter

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderDescriptor:
    """Everything needed to build one provider.

    Attributes:
        name: Registry name.
        config_class: Configuration model of the provider.
        backend_class: Backend implementation, built from a validated config.
        aliases: Additional names routing to the same provider.
    """

    name: str
    config_class: type[ProviderConfig]
    backend_class: type[Backend]
    aliases: frozenset[str] = field(default_factory=frozenset)

    @property
    def names(self) -> frozenset[str]:
        return frozenset({self.name}) | self.aliases

    def parse_config(self, raw_config: str | bytes | Mapping[str, Any] | None) -> ProviderConfig:
        """Build a configuration from a declarative document."""
        return self.config_class.parse(raw_config)

    def config_from_env(self, environ: Mapping[str, str] | None = None) -> ProviderConfig:
        """Build a configuration from environment variables."""
        return self.config_class.from_env(environ)

    def new_provider(self, config: ProviderConfig | None) -> Adapter:
        """Validate config and build the provider.

        Raises:
            ConfigError: If config is None or invalid.
        """
        config = validate_config(config, self.config_class)
        backend = self.backend_class(config)
        return build_adapter(backend, config)


class Registry:
    """Name to ProviderDescriptor dispatch table."""

    def __init__(self, descriptors: Iterable[ProviderDescriptor] = ()):
        self._descriptors: dict[str, ProviderDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ProviderDescriptor) -> None:
        """Add a descriptor under its name and aliases.

        Raises:
            ValueError: If one of the names is already taken.
        """
        taken = sorted(n for n in descriptor.names if n in self._descriptors)
        if taken:
            raise ValueError(f"DNS provider name already registered: {', '.join(taken)}")
        for name in descriptor.names:
            self._descriptors[name] = descriptor

    def get_descriptor(self, name: str) -> ProviderDescriptor:
        """Return the descriptor registered under name.

        Raises:
            UnrecognizedProviderError: If nothing is registered under name.
        """
        descriptor = self._descriptors.get(name.strip().lower())
        if descriptor is None:
            raise UnrecognizedProviderError(name)
        return descriptor

    def lookup(self, name: str, raw_config: str | bytes | Mapping[str, Any] | None) -> Adapter:
        """Build a provider from a declarative configuration document.

        Raises:
            UnrecognizedProviderError: If nothing is registered under name.
            ConfigError: If the configuration is malformed or invalid.
        """
        descriptor = self.get_descriptor(name)
        provider = descriptor.new_provider(descriptor.parse_config(raw_config))
        logger.debug("DNS provider built", extra={"provider": descriptor.name, "requested": name})
        return provider

    def lookup_from_env(self, name: str, environ: Mapping[str, str] | None = None) -> Adapter:
        """Build a provider from environment variables.

        Raises:
            UnrecognizedProviderError: If nothing is registered under name.
            ConfigError: If the configuration is missing or invalid.
        """
        descriptor = self.get_descriptor(name)
        provider = descriptor.new_provider(descriptor.config_from_env(environ))
        logger.debug("DNS provider built from environment", extra={"provider": descriptor.name, "requested": name})
        return provider

    def provider_names(self, include_aliases: bool = False) -> list[str]:
        """Sorted registry names, optionally with aliases."""
        if include_aliases:
            return sorted(self._descriptors)
        return sorted({d.name for d in self._descriptors.values()})

    def config_template(self, name: str) -> str:
        """YAML configuration template for a provider."""
        return self.get_descriptor(name).config_class.template()


_default: Registry | None = None


def default_registry() -> Registry:
    """Return the registry of built-in providers."""
    global _default
    if _default is None:
        from txtwire.catalog import BUILTIN_PROVIDERS

        _default = Registry(BUILTIN_PROVIDERS)
    return _default


def lookup(name: str, raw_config: str | bytes | Mapping[str, Any] | None) -> Adapter:
    """Build a built-in provider from a declarative configuration document."""
    return default_registry().lookup(name, raw_config)


def lookup_from_env(name: str, environ: Mapping[str, str] | None = None) -> Adapter:
    """Build a built-in provider from environment variables."""
    return default_registry().lookup_from_env(name, environ)


def provider_names(include_aliases: bool = False) -> list[str]:
    """Names of the built-in providers."""
    return default_registry().provider_names(include_aliases)


def config_template(name: str) -> str:
    """YAML configuration template for a built-in provider."""
    return default_registry().config_template(name)
