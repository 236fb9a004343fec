"""Sink interfaces.

A sink exposes three capabilities and nothing else:
- configure(): build the static dataset properties
- initialize(): hand them to the dataset layer and get ready for records
- transform(): convert one input record

Format-specific sinks implement the protocol directly.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol


class SinkState(Enum):
    UNCONFIGURED = "UNCONFIGURED"
    VALIDATED = "VALIDATED"
    CONFIGURED = "CONFIGURED"
    ACTIVE = "ACTIVE"


class DatasetCreator(Protocol):
    """External dataset layer: creates the output dataset from properties."""

    def create_dataset(self, name: str, properties: Dict[str, Any]) -> None:
        ...


class Sink(Protocol):
    state: SinkState

    def configure(self) -> Dict[str, Any]:
        ...

    def initialize(self, dataset_creator: Optional[DatasetCreator] = None) -> None:
        ...

    def transform(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        ...
