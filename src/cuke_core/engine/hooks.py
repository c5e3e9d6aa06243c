"""Lifecycle hook registry.

Hooks run around scenarios (`before`, `after`) and around the whole
suite (`before_all`, `after_all`). Scenario hooks may be restricted to
scenarios whose tags satisfy a tag expression. Hooks of a phase run one
at a time in registration order; the first failure aborts the rest of
that phase invocation.

Timeouts are carried as metadata only: the executor calling the hooks
is responsible for enforcing them.
"""

import logging
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import Field, PositiveFloat, ValidationError

from cuke_core.errors import ConfigurationError, HookError
from cuke_core.models import SchemaModel
from cuke_core.values import settle

from .tags import TagFilter

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from cuke_core.values import HookHandler

logger = logging.getLogger(__name__)


class HookType(StrEnum):
    """Hook phases."""

    BEFORE = 'before'
    AFTER = 'after'
    BEFORE_ALL = 'before_all'
    AFTER_ALL = 'after_all'


#: Suite-level phases ignore scenario tags.
SUITE_HOOKS = frozenset({HookType.BEFORE_ALL, HookType.AFTER_ALL})


class HookOptions(SchemaModel):
    """Hook registration options."""

    tags: str | None = Field(
        default=None,
        title='Tag expression',
        description='Run the hook only for scenarios whose tags match.',
    )

    timeout: PositiveFloat | None = Field(
        default=None,
        title='Timeout',
        description=(
            'Timeout in seconds. Informational: enforcement is left '
            'to the executor.'
        ),
    )


class HookDefinition(SchemaModel):
    """Registered hook."""

    hook_type: HookType
    options: HookOptions = Field(default_factory=HookOptions)
    handler: Callable[..., Any]
    tag_filter: TagFilter | None = None

    def accepts(self, tags: 'Iterable[str]') -> bool:
        """Check whether the hook applies to the given scenario tags."""
        if self.tag_filter is None or self.hook_type in SUITE_HOOKS:
            return True

        return self.tag_filter.evaluate(tags)


class HookRegistry:
    """Ordered registry of lifecycle hooks, grouped by phase."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._hooks: dict[HookType, list[HookDefinition]] = {
            hook_type: []
            for hook_type in HookType
        }

    def register(self, hook_type: HookType | str,
                 options_or_handler: 'HookOptions | Mapping[str, Any] | HookHandler',
                 handler: 'HookHandler | None' = None) -> HookDefinition:
        """Register a hook.

        Two call shapes are supported: `register(hook_type, handler)` and
        `register(hook_type, options, handler)`.

        Args:
            hook_type: Phase the hook runs in.
            options_or_handler: Hook handler, or hook options (a
                `HookOptions` or a mapping with `tags` and `timeout`).
            handler: Hook handler when options are given.

        Returns:
            The registered hook definition.

        Raises:
            ConfigurationError: If options are given without a handler,
                or the options or hook type are invalid.
            TagExpressionError: If the `tags` option is malformed.
        """
        try:
            hook_type = HookType(hook_type)

        except ValueError as base:
            raise ConfigurationError(f'Unknown hook type {hook_type!r}') from base

        if callable(options_or_handler) and handler is None:
            options, handler = HookOptions(), options_or_handler
        else:
            if handler is None:
                raise ConfigurationError('Hook function is required when options are provided')
            options = self._make_options(options_or_handler)

        if not callable(handler):
            raise ConfigurationError(f'Hook handler {handler!r} is not callable')

        definition = HookDefinition(
            hook_type=hook_type,
            options=options,
            handler=handler,
            tag_filter=TagFilter(options.tags) if options.tags else None,
        )

        self._hooks[hook_type].append(definition)
        logger.debug('Registered %s hook %r', hook_type, getattr(handler, '__name__', handler))

        return definition

    def get_hooks(self, hook_type: HookType | str) -> tuple[HookDefinition, ...]:
        """List hooks of a phase, in registration order."""
        return tuple(self._hooks[HookType(hook_type)])

    async def execute_hooks(self, hook_type: HookType | str, context: Any,  # noqa: ANN401
                            tags: 'Iterable[str]' = ()) -> None:
        """Run the hooks of a phase.

        Hooks whose tag filter rejects `tags` are skipped. Each handler is
        called with the context and awaited before the next one starts.

        Args:
            hook_type: Phase to run.
            context: Scenario or suite context passed to the handlers.
            tags: Scenario tags. Ignored by suite-level phases.

        Raises:
            HookError: If a handler fails. Remaining hooks of the phase
                are not run.
        """
        tags = tuple(tags)

        for hook in self.get_hooks(hook_type):
            if not hook.accepts(tags):
                logger.debug('Skipped %s hook %r for tags %s', hook.hook_type, hook.handler, tags)
                continue

            try:
                await settle(hook.handler(context))

            except Exception as base:
                raise HookError(base, hook=hook) from base

    async def execute_before_hooks(self, context: Any, tags: 'Iterable[str]' = ()) -> None:  # noqa: ANN401
        """Run `before` hooks for a scenario."""
        await self.execute_hooks(HookType.BEFORE, context, tags)

    async def execute_after_hooks(self, context: Any, tags: 'Iterable[str]' = ()) -> None:  # noqa: ANN401
        """Run `after` hooks for a scenario."""
        await self.execute_hooks(HookType.AFTER, context, tags)

    async def execute_before_all_hooks(self, context: Any) -> None:  # noqa: ANN401
        """Run `before_all` hooks for the suite."""
        await self.execute_hooks(HookType.BEFORE_ALL, context)

    async def execute_after_all_hooks(self, context: Any) -> None:  # noqa: ANN401
        """Run `after_all` hooks for the suite."""
        await self.execute_hooks(HookType.AFTER_ALL, context)

    @staticmethod
    def _make_options(options: 'HookOptions | Mapping[str, Any] | Any') -> HookOptions:  # noqa: ANN401
        if isinstance(options, HookOptions):
            return options

        if not isinstance(options, Mapping):
            raise ConfigurationError(f'Invalid hook options {options!r}')

        try:
            return HookOptions.model_validate(options)

        except ValidationError as base:
            raise ConfigurationError(f'Invalid hook options {dict(options)!r}') from base
