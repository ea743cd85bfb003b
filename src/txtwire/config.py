"""Provider configuration loading and validation.

A provider configuration comes from one of two sources: an environment
snapshot (``from_env``) or a declarative YAML/JSON document (``parse``). Both
sources are reduced to a plain mapping of field values and fed through the
same pydantic model, and every configuration goes through the same
``validate_config`` routine before an adapter is built from it.
"""

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Annotated, Any, ClassVar

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from txtwire.exceptions import ConfigError, ConfigParseError, MissingCredentialsError, TTLTooLowError

DEFAULT_TTL = 120
DEFAULT_PROPAGATION_TIMEOUT = timedelta(seconds=60)
DEFAULT_POLLING_INTERVAL = timedelta(seconds=2)
DEFAULT_HTTP_TIMEOUT = timedelta(seconds=30)

_DURATION_UNITS = {
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(us|µs|ms|s|m|h)")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def parse_duration(value: Any) -> timedelta:
    """Parse a duration.

    Accepts a timedelta, a number of seconds (int, float or numeric string)
    or a duration string made of number/unit pairs such as "60s", "1m30s",
    "500ms" or "1.5h".

    Raises:
        ValueError: If the value is not a duration.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, int | float):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    if _NUMBER.match(text):
        return timedelta(seconds=float(text))

    sign = 1
    if text[:1] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    total = timedelta()
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if not text or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return sign * total


def format_duration(value: timedelta) -> str:
    """Format a timedelta as a duration string understood by parse_duration."""
    milliseconds = round(value.total_seconds() * 1000)
    if milliseconds % 1000:
        return f"{milliseconds}ms"
    return f"{milliseconds // 1000}s"


Duration = Annotated[timedelta, BeforeValidator(parse_duration)]


class ProviderConfig(BaseModel):
    """Base configuration shared by every provider.

    Subclasses add credential fields and set the class-level metadata below.
    Document keys are the camelCase form of the field names (``apiKey``);
    environment keys are ``<ENV_NAMESPACE>_<FIELD_NAME_UPPER>``
    (``VULTR_API_KEY``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    provider_name: ClassVar[str] = ""
    env_namespace: ClassVar[str] = ""
    min_ttl: ClassVar[int] = 0
    required_credentials: ClassVar[tuple[str, ...]] = ()

    ttl: int = DEFAULT_TTL
    propagation_timeout: Duration = DEFAULT_PROPAGATION_TIMEOUT
    polling_interval: Duration = DEFAULT_POLLING_INTERVAL
    http_timeout: Duration = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def env_key(cls, field_name: str) -> str:
        """Environment variable name for a field."""
        return f"{cls.env_namespace}_{field_name.upper()}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProviderConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Environment snapshot, defaults to os.environ.

        Raises:
            ConfigParseError: If a variable holds an ill-typed value.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field_name in cls.model_fields:
            key = cls.env_key(field_name)
            if key in environ:
                values[field_name] = environ[key]
        return cls._build(values, source="environment")

    @classmethod
    def parse(cls, raw_config: str | bytes | Mapping[str, Any] | None) -> "ProviderConfig":
        """Build a configuration from a declarative document.

        Args:
            raw_config: YAML or JSON text, or an already parsed mapping.

        Raises:
            ConfigParseError: If the document is malformed or holds ill-typed
                values.
        """
        if isinstance(raw_config, str | bytes):
            try:
                document = yaml.safe_load(raw_config)
            except yaml.YAMLError as e:
                raise ConfigParseError(f"malformed configuration document: {e}", cls.provider_name) from e
        else:
            document = raw_config

        if document is None:
            document = {}
        if not isinstance(document, Mapping):
            raise ConfigParseError(
                f"configuration document must be a mapping, got {type(document).__name__}",
                cls.provider_name,
            )
        return cls._build(document, source="document")

    @classmethod
    def _build(cls, values: Mapping[str, Any], source: str) -> "ProviderConfig":
        # Blank values fall back to defaults whatever their source
        cleaned = {k: v for k, v in values.items() if v is not None and v != ""}
        try:
            return cls.model_validate(cleaned)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigParseError(f"invalid {source} configuration: {problems}", cls.provider_name) from e

    @classmethod
    def template(cls) -> str:
        """Render a YAML template with defaults and credential placeholders."""
        document: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            default = field.get_default(call_default_factory=True)
            if isinstance(default, timedelta):
                document[alias] = format_duration(default)
            elif default is None or name in cls.required_credentials:
                document[alias] = f"<{cls.env_key(name)}>"
            else:
                document[alias] = default
        return yaml.safe_dump(document, sort_keys=False)

    def missing_credentials(self) -> list[str]:
        """Names (document key and environment key) of missing credentials."""
        missing = []
        for name in self.required_credentials:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                alias = type(self).model_fields[name].alias or name
                missing.append(f"{alias}/{self.env_key(name)}")
        return missing

    def validate_for_provider(self) -> None:
        """Check credentials and TTL.

        Raises:
            MissingCredentialsError: If a required credential is empty.
            TTLTooLowError: If ttl is below the backend minimum.
        """
        missing = self.missing_credentials()
        if missing:
            raise MissingCredentialsError(missing, self.provider_name)
        if self.ttl < self.min_ttl:
            raise TTLTooLowError(self.ttl, self.min_ttl, self.provider_name)


class SequentialConfig(ProviderConfig):
    """Configuration for backends whose challenges must be solved one at a time."""

    sequence_interval: Duration = DEFAULT_PROPAGATION_TIMEOUT


def validate_config(config: ProviderConfig | None, config_class: type[ProviderConfig]) -> ProviderConfig:
    """Validate a configuration regardless of where it came from.

    Args:
        config: Configuration to check.
        config_class: Configuration class the provider expects.

    Returns:
        The same configuration.

    Raises:
        ConfigError: If config is None or of the wrong type.
        MissingCredentialsError: If a required credential is empty.
        TTLTooLowError: If ttl is below the backend minimum.
    """
    if config is None:
        raise ConfigError("the configuration of the DNS provider is nil", config_class.provider_name)
    if not isinstance(config, config_class):
        raise ConfigError(
            f"expected {config_class.__name__}, got {type(config).__name__}",
            config_class.provider_name,
        )
    config.validate_for_provider()
    return config
