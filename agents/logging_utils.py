"""Standardized logging utilities for the simulation."""

import json
from typing import Any, Dict, Literal, Optional

from logger import log

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class SimulationLogger:
    """
    Standardized logger for simulation components.

    Prefixes every message with the component (and agent) it came from and
    optionally appends structured data as JSON.
    """

    def __init__(self, component_name: str, agent_id: Optional[str] = None):
        self.component_name = component_name
        self.agent_id = agent_id

    def _format_message(self, message: str) -> str:
        if self.agent_id:
            return f"[{self.component_name}:{self.agent_id}] {message}"
        return f"[{self.component_name}] {message}"

    def debug(self, message: str, data: Optional[Dict] = None) -> None:
        self._log("DEBUG", message, data)

    def info(self, message: str, data: Optional[Dict] = None) -> None:
        self._log("INFO", message, data)

    def warning(self, message: str, data: Optional[Dict] = None) -> None:
        self._log("WARNING", message, data)

    def _log(self, level: LogLevel, message: str, data: Optional[Dict] = None) -> None:
        log(self._format_message(message), level=level)

        if data:
            # Money and enums are rendered through str()
            log(f"DATA: {json.dumps(data, default=str, sort_keys=True)}", level=level)

    def log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Log a structured event.

        Args:
            event_type: Type of event (e.g. "business_created")
            data: Event data dictionary
        """
        event_data = {
            "component": self.component_name,
            "agent_id": self.agent_id,
            "event_type": event_type,
            "data": data,
        }
        self.info(f"EVENT: {event_type}", event_data)


class AgentLogger(SimulationLogger):
    """Agent-specific logger with additional agent context."""

    def __init__(self, agent_id: str, agent_type: str):
        super().__init__(agent_type, agent_id)
        self.agent_type = agent_type

    def log_state_change(
        self, old_state: str, new_state: str, reason: Optional[str] = None
    ) -> None:
        """
        Log agent state change.

        Args:
            old_state: Previous state
            new_state: New state
            reason: Optional reason for change
        """
        data = {"old_state": old_state, "new_state": new_state, "reason": reason}
        self.info(f"State change: {old_state} -> {new_state}", data)

    def log_financial_transaction(self, transaction_type: str, amount: object, balance: object) -> None:
        data = {"transaction_type": transaction_type, "amount": amount, "balance": balance}
        self.debug(f"Financial transaction: {transaction_type} {amount}", data)


def create_agent_logger(agent_id: str, agent_type: str) -> AgentLogger:
    return AgentLogger(agent_id, agent_type)
