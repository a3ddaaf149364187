# SPDX-License-Identifier: GPL-3.0-only
"""Plan and state containers.

Values are kept as a plain ``{attribute: value}`` map conforming to a
``Schema``. Handlers move values in and out through dataclass models whose
fields name their attribute with ``metadata={"tfsdk": "<attribute>"}``.
A ``None`` value map is a null object, i.e. no state at all.
"""

import dataclasses
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from src.diagnostics import Diagnostics
from src.schema import Schema

ModelT = TypeVar("ModelT")


class StateMarshalError(Exception):
    """Raised when values cannot be moved between a model and a state map."""


def _model_fields(model_cls) -> Dict[str, dataclasses.Field]:
    if not dataclasses.is_dataclass(model_cls):
        raise StateMarshalError(f"{model_cls!r} is not a dataclass model")

    fields = {}
    for f in dataclasses.fields(model_cls):
        attribute = f.metadata.get("tfsdk")
        if not attribute:
            raise StateMarshalError(
                f"Field '{f.name}' of {model_cls.__name__} has no tfsdk attribute tag"
            )
        fields[attribute] = f
    return fields


def _check_value(attribute: str, value: Any):
    if value is not None and not isinstance(value, str):
        raise StateMarshalError(
            f"Attribute '{attribute}' expects a string value, "
            f"got {type(value).__name__}"
        )


class StateData:
    """Attribute values for one resource instance."""

    def __init__(self, schema: Schema, values: Optional[Dict[str, Any]] = None):
        self.schema = schema
        self.values = dict(values) if values is not None else None

    @property
    def is_null(self) -> bool:
        return self.values is None

    def get(self, model_cls: Type[ModelT]) -> Tuple[Optional[ModelT], Diagnostics]:
        """Read the values into a new ``model_cls`` instance."""
        diagnostics = Diagnostics()
        try:
            if self.values is None:
                raise StateMarshalError(f"{type(self).__name__} is null")

            fields = _model_fields(model_cls)
            for attribute in self.values:
                if attribute not in fields:
                    raise StateMarshalError(
                        f"Attribute '{attribute}' has no field on {model_cls.__name__}"
                    )

            kwargs = {}
            for attribute, f in fields.items():
                if attribute not in self.schema.attributes:
                    raise StateMarshalError(
                        f"Model field '{f.name}' maps to unknown attribute '{attribute}'"
                    )
                value = self.values.get(attribute)
                _check_value(attribute, value)
                kwargs[f.name] = value
        except StateMarshalError as e:
            diagnostics.add_error("Value Conversion Error", str(e))
            return None, diagnostics

        return model_cls(**kwargs), diagnostics

    def set(self, model) -> Diagnostics:
        """Replace the values with those of ``model``."""
        diagnostics = Diagnostics()
        try:
            values = self.schema.empty_values()
            for attribute, f in _model_fields(type(model)).items():
                if attribute not in self.schema.attributes:
                    raise StateMarshalError(
                        f"Model field '{f.name}' maps to unknown attribute '{attribute}'"
                    )
                value = getattr(model, f.name)
                _check_value(attribute, value)
                values[attribute] = value
        except StateMarshalError as e:
            diagnostics.add_error("Value Conversion Error", str(e))
            return diagnostics

        self.values = values
        return diagnostics

    def set_attribute(self, attribute: str, value: Any) -> Diagnostics:
        """Set a single attribute, creating the value map if it is null."""
        diagnostics = Diagnostics()
        try:
            if attribute not in self.schema.attributes:
                raise StateMarshalError(f"Unknown attribute '{attribute}'")
            _check_value(attribute, value)
        except StateMarshalError as e:
            diagnostics.add_error("Value Conversion Error", str(e))
            return diagnostics

        if self.values is None:
            self.values = self.schema.empty_values()
        self.values[attribute] = value
        return diagnostics

    def remove(self):
        """Null the state, marking the resource as gone."""
        self.values = None

    def redacted(self) -> Optional[Dict[str, Any]]:
        """Return the values with sensitive attributes masked."""
        return self.schema.redact(self.values)

    def __eq__(self, other):
        if not isinstance(other, StateData):
            return NotImplemented
        return self.values == other.values

    def __repr__(self):
        return f"{type(self).__name__}({self.redacted()!r})"


class Config(StateData):
    """Practitioner supplied configuration."""


class Plan(StateData):
    """Proposed values for a resource instance."""


class State(StateData):
    """Persisted values for a resource instance."""
