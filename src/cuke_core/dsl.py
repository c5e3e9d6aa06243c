"""Global registration functions for support code.

Support code usually registers steps and hooks through module-level
functions rather than through an explicit registry:

    from cuke_core.dsl import before, given, then

    @given('I have {int} cukes')
    def have_cukes(context, count):
        context.cukes = count

    @before(tags='@db')
    async def open_database(context):
        context.db = await connect()

These functions are thin wrappers over one default `StepRegistry` and
one default `HookRegistry`, created on first use from `CukeSettings`.
Harnesses that need isolation should build their own registries instead.
"""

from typing import TYPE_CHECKING, Any, overload

from cuke_core.engine import HookRegistry, HookType, StepRegistry
from cuke_core.settings import CukeSettings

if TYPE_CHECKING:
    from collections.abc import Callable
    from re import Pattern

if TYPE_CHECKING:
    from cuke_core.engine.steps import StepPattern
    from cuke_core.values import HookHandler, StepHandler

_step_registry: StepRegistry | None = None
_hook_registry: HookRegistry | None = None


def get_registry() -> StepRegistry:
    """Return the default step registry."""
    global _step_registry  # noqa: PLW0603

    if _step_registry is None:
        _step_registry = StepRegistry(strict=CukeSettings().strict)

    return _step_registry


def get_hook_registry() -> HookRegistry:
    """Return the default hook registry."""
    global _hook_registry  # noqa: PLW0603

    if _hook_registry is None:
        _hook_registry = HookRegistry()

    return _hook_registry


def reset() -> None:
    """Drop the default registries.

    The next registration creates fresh ones, re-reading settings.
    """
    global _step_registry, _hook_registry  # noqa: PLW0603

    _step_registry = None
    _hook_registry = None


def define_parameter_type(name: str, regexp: 'str | Pattern[str] | list[str]',
                          transformer: 'Callable[..., Any] | None' = None,
                          **kwargs: Any) -> None:  # noqa: ANN401
    """Define a custom parameter type on the default step registry.

    See `StepRegistry.define_parameter_type` for arguments.
    """
    get_registry().define_parameter_type(name, regexp, transformer, **kwargs)


@overload
def step(pattern: 'StepPattern') -> 'Callable[[StepHandler], StepHandler]':
    ...  # pragma: no cover


@overload
def step(pattern: 'StepPattern', handler: 'StepHandler') -> 'StepHandler':
    ...  # pragma: no cover


def step(pattern: 'StepPattern', handler: 'StepHandler | None' = None) -> Any:  # noqa: ANN401
    """Register a step definition on the default registry.

    Usable as a decorator, `@step('pattern')`, or as a plain call,
    `step('pattern', handler)`. Keywords do not take part in matching,
    so `given`, `when` and `then` are aliases of this function.

    Args:
        pattern: Cucumber Expression string or compiled regular expression.
        handler: Step handler, when not used as a decorator.

    Returns:
        The handler, or a decorator registering it.
    """
    def decorator(func: 'StepHandler') -> 'StepHandler':
        get_registry().register(pattern, func)
        return func

    if handler is None:
        return decorator

    return decorator(handler)


given = when = then = step


def _hook(hook_type: HookType, handler: 'HookHandler | None',
          options: dict[str, Any]) -> Any:  # noqa: ANN401
    """Register a hook as a bare decorator, a decorator with options, or a call."""
    def decorator(func: 'HookHandler') -> 'HookHandler':
        if options:
            get_hook_registry().register(hook_type, options, func)
        else:
            get_hook_registry().register(hook_type, func)
        return func

    if handler is None:
        return decorator

    return decorator(handler)


def before(handler: 'HookHandler | None' = None, *,
           tags: str | None = None, timeout: float | None = None) -> Any:  # noqa: ANN401
    """Register a hook run before each matching scenario.

    Usable as `@before`, `@before(tags='@db', timeout=5)` or
    `before(handler)`.
    """
    return _hook(HookType.BEFORE, handler, _options(tags, timeout))


def after(handler: 'HookHandler | None' = None, *,
          tags: str | None = None, timeout: float | None = None) -> Any:  # noqa: ANN401
    """Register a hook run after each matching scenario."""
    return _hook(HookType.AFTER, handler, _options(tags, timeout))


def before_all(handler: 'HookHandler | None' = None, *,
               timeout: float | None = None) -> Any:  # noqa: ANN401
    """Register a hook run once before the suite."""
    return _hook(HookType.BEFORE_ALL, handler, _options(None, timeout))


def after_all(handler: 'HookHandler | None' = None, *,
              timeout: float | None = None) -> Any:  # noqa: ANN401
    """Register a hook run once after the suite."""
    return _hook(HookType.AFTER_ALL, handler, _options(None, timeout))


def _options(tags: str | None, timeout: float | None) -> dict[str, Any]:
    return {
        key: value
        for key, value in (('tags', tags), ('timeout', timeout))
        if value is not None
    }
