from typing import Dict, Any, List, Optional, Tuple

from .errors import UsageError
from .events import EventLog
from .models import Action, ClickAction, FillAction, WaitAction, Scenario


def parse_action(item: Dict[str, Any]) -> Optional[Action]:
    """Maps one ``{type: ...}`` entry to an Action. Unknown types return None."""
    if not isinstance(item, dict):
        return None
    a_type = str(item.get("type", "")).lower()
    if a_type == "click":
        return ClickAction(selector=str(item["selector"]))
    elif a_type == "fill":
        return FillAction(selector=str(item["selector"]), value=str(item.get("value", "")))
    elif a_type == "wait":
        return WaitAction(duration_ms=int(item.get("duration") or 1000))
    return None


def parse_actions(data: Any, log: Optional[EventLog] = None, scenario: str = "") -> Tuple[Action, ...]:
    actions: List[Action] = []
    for idx, item in enumerate(data or []):
        try:
            action = parse_action(item)
        except (KeyError, TypeError, ValueError) as e:
            raise UsageError(f"Scenario '{scenario}': action #{idx + 1} is malformed ({e})") from e
        if action is None:
            if log:
                log.warning("ACTION_IGNORED", f"Ignoring unknown action #{idx + 1} in '{scenario}': {item!r}",
                            scenario=scenario, action=item)
            continue
        actions.append(action)
    return tuple(actions)


def parse_scenarios(data: Any, log: Optional[EventLog] = None) -> Tuple[Scenario, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        raise UsageError("'scenarios' must be a list of {name, path, actions?} entries")

    scenarios: List[Scenario] = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise UsageError(f"Scenario #{idx + 1} must be a mapping, got {type(item).__name__}")
        name = str(item.get("name") or "")
        scenarios.append(Scenario(
            name=name,
            path=str(item.get("path") or ""),
            actions=parse_actions(item.get("actions"), log, name or f"Scenario {idx + 1}"),
        ))
    return tuple(scenarios)
