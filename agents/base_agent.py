from .logging_utils import AgentLogger, create_agent_logger


class BaseAgent:
    """Common identity and logging for every simulated actor."""

    agent_type = "Agent"

    def __init__(self, unique_id: str, name: str | None = None) -> None:
        self.unique_id: str = unique_id
        self.name: str = name or unique_id
        self.logger: AgentLogger = create_agent_logger(unique_id, self.agent_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.unique_id!r})"


def agent_sort_key(unique_id: str) -> tuple[str, int, str]:
    """Sort key that orders ``person_2`` before ``person_10``."""
    prefix, _, suffix = unique_id.rpartition("_")
    if suffix.isdigit():
        return (prefix, int(suffix), "")
    return (unique_id, -1, "")
