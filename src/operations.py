# SPDX-License-Identifier: GPL-3.0-only
"""Request and response messages exchanged with resource handlers."""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.diagnostics import Diagnostics
from src.schema import Schema
from src.state import Config, Plan, State


@dataclass
class MetadataRequest:
    provider_type_name: str


@dataclass
class MetadataResponse:
    type_name: str = ""


@dataclass
class SchemaRequest:
    pass


@dataclass
class SchemaResponse:
    schema: Optional[Schema] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class ConfigureRequest:
    provider_data: Any = None


@dataclass
class ConfigureResponse:
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class ValidateConfigRequest:
    config: Config


@dataclass
class ValidateConfigResponse:
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class CreateRequest:
    plan: Plan
    config: Optional[Config] = None


@dataclass
class CreateResponse:
    state: State
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class ReadRequest:
    state: State


@dataclass
class ReadResponse:
    state: State
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class UpdateRequest:
    plan: Plan
    state: State
    config: Optional[Config] = None


@dataclass
class UpdateResponse:
    state: State
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class DeleteRequest:
    state: State


@dataclass
class DeleteResponse:
    state: State
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class ImportStateRequest:
    id: str


@dataclass
class ImportStateResponse:
    state: State
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
