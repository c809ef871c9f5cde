"""Generator configuration."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, config

# Host types rendered as a literal TypeScript type
DEFAULT_SCALAR_OVERRIDES = {
    "System.Guid": "string",
}

DEFAULT_RESERVED_NAMESPACES = ["System"]


@dataclass
class GeneratorConfig(DataClassJsonMixin):
    """Options controlling the generated TypeScript.

    Read from JSON with camelCase keys, e.g. ``{"constEnums": false}``.
    """

    dataclass_json_config = config(letter_case=LetterCase.CAMEL)["dataclasses_json"]

    const_enums: bool = True
    global_namespace: str | None = None
    promise_type: str = "Promise"
    global_root: str = "window"
    scalar_overrides: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SCALAR_OVERRIDES)
    )
    reserved_namespaces: list[str] = field(
        default_factory=lambda: list(DEFAULT_RESERVED_NAMESPACES)
    )
    url_rewrites: dict[str, str] = field(default_factory=dict)
    definitions_file: str = "definitions.d.ts"
    services_file: str = "services.ts"
    enums_file: str = "enums.ts"

    def rewrite_url(self, url: str) -> str:
        """Replace the first matching route prefix from ``url_rewrites``."""
        for prefix, replacement in self.url_rewrites.items():
            if url.startswith(prefix):
                return replacement + url[len(prefix) :]
        return url


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be read."""


def load_config(path: str | None) -> GeneratorConfig:
    """Load a configuration file, or return the defaults when no path is given."""
    if path is None:
        return GeneratorConfig()
    try:
        with open(path, encoding="utf-8") as f:
            return GeneratorConfig.from_json(f.read())
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}") from e
