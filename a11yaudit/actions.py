from typing import Awaitable, Callable, Dict, Sequence

from .browser import Interactable
from .events import EventLog
from .models import Action, ClickAction, FillAction, WaitAction

ACTION_TIMEOUT_MS = 30000

Handler = Callable[[Interactable, Action], Awaitable[None]]


async def run_click(page: Interactable, action: ClickAction):
    await page.click(action.selector, timeout_ms=ACTION_TIMEOUT_MS)


async def run_fill(page: Interactable, action: FillAction):
    await page.fill(action.selector, action.value, timeout_ms=ACTION_TIMEOUT_MS)


async def run_wait(page: Interactable, action: WaitAction):
    await page.wait(action.duration_ms)


# New action kinds only need an entry here
ACTION_HANDLERS: Dict[str, Handler] = {
    "click": run_click,
    "fill": run_fill,
    "wait": run_wait,
}


async def run_actions(page: Interactable, actions: Sequence[Action], log: EventLog) -> int:
    """
    Executes ``actions`` in order and returns how many succeeded. A failing
    action is logged and skipped; it never aborts the scenario.
    """
    if not actions:
        return 0

    log.info("ACTIONS_START", f"Executing {len(actions)} custom action(s)...", count=len(actions))
    done = 0
    for idx, action in enumerate(actions):
        handler = ACTION_HANDLERS.get(getattr(action, "type", None))
        if handler is None:
            log.warning("ACTION_IGNORED", f"No handler for action #{idx + 1} ({action!r})", index=idx)
            continue
        try:
            await handler(page, action)
            done += 1
        except Exception as e:
            log.warning("ACTION_FAILED", f"Action failed: {action.type} #{idx + 1}: {e}",
                        index=idx, action=action.type, error=str(e))
    return done
