"""
Flow Context Module

This module defines the narrow interface through which connectors read and write
conversation state. The flow engine owns the real session; connectors only need
to add a value to the context, reach the full context and input maps directly,
and emit log lines to the engine's logging sink.

An in-memory implementation is provided for the HTTP service and for tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from flow_connectors.utils.logger import LOG_LEVELS, setup_logger

# Initialize logger
logger = setup_logger(__name__)

# Modes understood by add_to_context
CONTEXT_MODES = ("simple", "array")

class FlowContext(ABC):
    """
    Abstract view of a running flow as seen by a connector.

    Implementations wrap whatever state store the flow engine uses.
    """

    @property
    @abstractmethod
    def input(self) -> Dict[str, Any]:
        """The mutable input map of the current flow execution."""
        pass

    @abstractmethod
    def get_full_context(self) -> Dict[str, Any]:
        """Return the mutable context map of the conversation."""
        pass

    @abstractmethod
    def add_to_context(self, key: str, value: Any, mode: str = "simple") -> None:
        """
        Store a value under a named context slot.

        Args:
            key: Name of the context slot
            value: Value to store
            mode: "simple" replaces the slot, "array" appends to a list in the slot
        """
        pass

    @abstractmethod
    def log(self, level: str, message: str) -> None:
        """Forward a message to the flow engine's logging sink."""
        pass


class InMemoryFlowContext(FlowContext):
    """
    Flow context backed by plain dictionaries.

    Log lines are kept as (level, message) tuples so callers can return them.
    """

    def __init__(
        self,
        input: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self._input: Dict[str, Any] = dict(input or {})
        self._context: Dict[str, Any] = dict(context or {})
        self.logs: List[Tuple[str, str]] = []

    @property
    def input(self) -> Dict[str, Any]:
        return self._input

    def get_full_context(self) -> Dict[str, Any]:
        return self._context

    def add_to_context(self, key: str, value: Any, mode: str = "simple") -> None:
        if mode not in CONTEXT_MODES:
            raise ValueError(f"Unsupported context mode: {mode}")

        if mode == "array":
            current = self._context.get(key)
            if current is None:
                self._context[key] = [value]
            elif isinstance(current, list):
                current.append(value)
            else:
                self._context[key] = [current, value]
        else:
            self._context[key] = value

    def log(self, level: str, message: str) -> None:
        self.logs.append((level, message))
        logger.log(_level_number(level), message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "input": self._input,
            "context": self._context,
            "logs": [{"level": level, "message": message} for level, message in self.logs],
        }


def _level_number(level: str) -> int:
    return LOG_LEVELS.get(level.upper(), logging.INFO)
