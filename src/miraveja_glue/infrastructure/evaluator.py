from typing import Any, Dict, Optional

from miraveja_glue.domain import IEvaluator, RunningContext


class PythonEvaluator(IEvaluator):
    """Evaluates inline definitions as Python expressions.

    The expression sees the configured namespace plus ``container``, the
    container of the current resolution. Returning a coroutine is allowed: it
    is awaited by the caller.

    Example:
        >>> evaluator = PythonEvaluator({"math": math})
        >>> # `!math.pi * 2` or `!container.get("clock")`
    """

    def __init__(self, namespace: Optional[Dict[str, Any]] = None) -> None:
        self._namespace: Dict[str, Any] = dict(namespace or {})

    def evaluate(self, code: str, context: RunningContext) -> Any:
        scope = dict(self._namespace)
        scope["container"] = context.container
        return eval(code, scope)
