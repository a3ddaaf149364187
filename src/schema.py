# SPDX-License-Identifier: GPL-3.0-only
"""Resource schema declarations.

Attributes carry a ``sensitive`` flag. Anything rendering or persisting
attribute values goes through ``Schema.redact`` or
``Schema.split_sensitive`` so that sensitive values are handled by the
serialization layer and never by individual handlers.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from src.diagnostics import Diagnostics

REDACTED = "(sensitive value)"

Validator = Callable[[Any], Optional[str]]


def one_of_ignore_case(choices: Iterable[str]) -> Validator:
    """Return a validator accepting only ``choices``, compared case-insensitively."""
    allowed = tuple(choice.lower() for choice in choices)

    def validate(value):
        if value is None:
            return None
        if not isinstance(value, str) or value.strip().lower() not in allowed:
            return (
                f"Attribute value must be one of: {', '.join(allowed)}, "
                f"got: {value!r}"
            )
        return None

    validate.description = f"value must be one of: {', '.join(allowed)}"
    return validate


@dataclass(frozen=True)
class Attribute:
    """A string attribute of a resource schema."""

    name: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    default: Optional[str] = None
    description: str = ""
    markdown_description: str = ""
    validators: Tuple[Validator, ...] = ()

    def __post_init__(self):
        if not (self.required or self.optional or self.computed):
            raise ValueError(
                f"Attribute '{self.name}' must be required, optional or computed."
            )
        if self.required and (self.optional or self.computed):
            raise ValueError(
                f"Attribute '{self.name}' cannot be both required and optional/computed."
            )
        if self.default is not None and not self.computed:
            raise ValueError(
                f"Attribute '{self.name}' with a default must be computed."
            )

    def to_dict(self) -> Dict[str, Any]:
        """Describe the attribute in a JSON-serializable form."""
        return {
            "type": "string",
            "required": self.required,
            "optional": self.optional,
            "computed": self.computed,
            "sensitive": self.sensitive,
            "default": self.default,
            "description": self.description,
            "markdown_description": self.markdown_description,
            "validators": [
                getattr(v, "description", v.__name__) for v in self.validators
            ],
        }


@dataclass(frozen=True)
class Schema:
    """Attributes of a resource keyed by name."""

    attributes: Dict[str, Attribute] = field(default_factory=dict)
    description: str = ""
    markdown_description: str = ""
    version: int = 0

    @classmethod
    def build(cls, *attributes: Attribute, **kwargs) -> "Schema":
        """Create a schema from a sequence of attributes."""
        return cls(attributes={a.name: a for a in attributes}, **kwargs)

    def attribute(self, name: str) -> Attribute:
        """Return the attribute called ``name``.

        Raises:
            KeyError: If the schema has no such attribute.
        """
        return self.attributes[name]

    def sensitive_attributes(self):
        """Return the names of sensitive attributes."""
        return [name for name, a in self.attributes.items() if a.sensitive]

    def empty_values(self) -> Dict[str, Any]:
        """Return a value map with every attribute set to null."""
        return {name: None for name in self.attributes}

    def apply_defaults(self, values: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Return ``values`` with unset attributes filled from their defaults."""
        result = self.empty_values()
        result.update(values or {})
        for name, attribute in self.attributes.items():
            if result.get(name) is None and attribute.default is not None:
                result[name] = attribute.default
        return result

    def validate(self, values: Optional[Dict[str, Any]]) -> Diagnostics:
        """Validate configuration values against the schema."""
        diagnostics = Diagnostics()
        values = values or {}

        for name in values:
            if name not in self.attributes:
                diagnostics.add_error(
                    "Unsupported argument",
                    f"An argument named '{name}' is not expected here.",
                    attribute=name,
                )

        for name, attribute in self.attributes.items():
            value = values.get(name)
            if value is None:
                if attribute.required:
                    diagnostics.add_error(
                        "Missing required argument",
                        f"The argument '{name}' is required, but no definition was found.",
                        attribute=name,
                    )
                continue

            if not attribute.optional and not attribute.required:
                diagnostics.add_error(
                    "Invalid configuration",
                    f"'{name}' is a read-only attribute and cannot be set.",
                    attribute=name,
                )
                continue

            for validator in attribute.validators:
                error = validator(value)
                if error:
                    diagnostics.add_error(
                        "Invalid attribute value", error, attribute=name
                    )

        return diagnostics

    def redact(self, values: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Return a copy of ``values`` with sensitive, non-null values masked."""
        if values is None:
            return None
        return {
            name: (
                REDACTED
                if value is not None
                and name in self.attributes
                and self.attributes[name].sensitive
                else value
            )
            for name, value in values.items()
        }

    def split_sensitive(
        self, values: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Split ``values`` into (plain, sensitive) maps."""
        sensitive = set(self.sensitive_attributes())
        plain = {k: v for k, v in values.items() if k not in sensitive}
        secret = {k: v for k, v in values.items() if k in sensitive}
        return plain, secret

    def to_dict(self) -> Dict[str, Any]:
        """Describe the schema in a JSON-serializable form."""
        return {
            "version": self.version,
            "description": self.description,
            "markdown_description": self.markdown_description,
            "attributes": {
                name: attribute.to_dict()
                for name, attribute in self.attributes.items()
            },
        }
