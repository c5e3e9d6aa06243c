"""Step definition registry.

Step definitions pair a pattern with a handler. String patterns are
Cucumber Expressions (`I have {int} cukes`), compiled patterns are
regular expressions; both are compiled by the `cucumber-expressions`
library, which also converts captured text into typed values.

Definitions are registered during support code loading and read-only
afterwards, so one registry may serve concurrently running scenarios.
"""

import logging
from collections.abc import Callable
from re import Pattern
from typing import TYPE_CHECKING, Any

from cucumber_expressions.errors import CucumberExpressionError
from cucumber_expressions.expression import CucumberExpression
from cucumber_expressions.parameter_type import ParameterType
from cucumber_expressions.parameter_type_registry import ParameterTypeRegistry
from cucumber_expressions.regular_expression import RegularExpression
from pydantic import Field

from cuke_core.errors import AmbiguousStepError, ConfigurationError, StepNotFoundError, StepPatternError
from cuke_core.models import SchemaModel
from cuke_core.values import settle

if TYPE_CHECKING:
    from cucumber_expressions.argument import Argument

if TYPE_CHECKING:
    from cuke_core.values import StepHandler

logger = logging.getLogger(__name__)

#: A step pattern: a Cucumber Expression string or a compiled regular expression.
type StepPattern = str | Pattern[str]


class StepDefinition(SchemaModel):
    """Registered step definition."""

    pattern: str | Pattern[str] = Field(
        title='Pattern',
        description='Cucumber Expression string or compiled regular expression.',
    )

    expression: CucumberExpression | RegularExpression = Field(
        title='Compiled expression',
        description='Matcher compiled from the pattern.',
    )

    handler: Callable[..., Any] = Field(
        title='Handler',
        description=(
            'Callable invoked with the scenario context followed by the '
            'values extracted from the step text. May be a coroutine function.'
        ),
    )

    @property
    def source(self) -> str:
        """Source text of the pattern."""
        if isinstance(self.pattern, Pattern):
            return self.pattern.pattern

        return self.pattern


class StepDefinitionInfo(SchemaModel):
    """Public view of a step definition, without matcher internals."""

    pattern: str | Pattern[str]
    handler: Callable[..., Any]


class StepArgument(SchemaModel):
    """Value extracted from a step text, boxed with its parameter type."""

    value: Any = Field(
        title='Value',
        description='Value converted by the parameter type transformer.',
    )

    text: str | None = Field(
        default=None,
        title='Captured text',
        description='Substring of the step text the value was captured from.',
    )

    parameter_type: str = Field(
        default='',
        title='Parameter type',
        description='Name of the parameter type, e.g. `int`; empty for anonymous types.',
    )

    @classmethod
    def from_argument(cls, argument: 'Argument') -> 'StepArgument':
        """Box an argument produced by a compiled expression.

        Args:
            argument: Argument matched by a Cucumber or regular expression.

        Returns:
            The boxed argument.
        """
        group = argument.group

        return cls(
            value=argument.value,
            text=group.value if group is not None else None,
            parameter_type=argument.parameter_type.name or '',
        )


class StepMatch(SchemaModel):
    """Step definition matched by a step text, with its arguments."""

    definition: StepDefinition
    arguments: tuple[StepArgument, ...] = ()

    @property
    def args(self) -> list[Any]:
        """Plain argument values, in capture order."""
        return [argument.value for argument in self.arguments]


class StepRegistry:
    """Ordered registry of step definitions.

    Lookup is first-match-wins: definitions are scanned in registration
    order and the first one accepting the text is used. In strict mode
    all definitions are scanned and more than one match is reported as
    an ambiguity instead.
    """

    def __init__(self, parameter_types: ParameterTypeRegistry | None = None, *,
                 strict: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            parameter_types: Parameter type registry used to compile
                expressions. A fresh registry with built-in types
                (`{int}`, `{float}`, `{word}`, `{string}`, ...) is
                created when omitted.
            strict: Whether to report ambiguous matches as errors.
        """
        self.parameter_types = parameter_types or ParameterTypeRegistry()
        self.strict_mode = strict

        self._definitions: list[StepDefinition] = []

    def __len__(self) -> int:
        """Number of registered definitions."""
        return len(self._definitions)

    def define_parameter_type(self, name: str, regexp: str | Pattern[str] | list[str],
                              transformer: Callable[..., Any] | None = None, *,
                              type_: type = str,
                              use_for_snippets: bool = True,
                              prefer_for_regexp_match: bool = False) -> None:
        """Define a custom parameter type usable as `{name}` in expressions.

        Parameter types must be defined before registering the step
        definitions that reference them.

        Args:
            name: Parameter type name.
            regexp: Regular expression(s) matching the parameter text.
            transformer: Function converting captured text into a value.
            type_: Type of the transformed value.
            use_for_snippets: Whether to suggest the type in snippets.
            prefer_for_regexp_match: Whether to prefer this type when
                several types share a regular expression.

        Raises:
            ConfigurationError: If the parameter type is invalid or
                conflicts with an existing one.
        """
        try:
            self.parameter_types.define_parameter_type(ParameterType(
                name,
                regexp,
                type_,
                transformer,
                use_for_snippets,
                prefer_for_regexp_match,
            ))

        except CucumberExpressionError as base:
            raise ConfigurationError(f'Invalid parameter type {name!r}: {base}') from base

        logger.debug('Defined parameter type %r', name)

    def register(self, pattern: StepPattern, handler: 'StepHandler') -> StepDefinition:
        """Register a step definition.

        Duplicate and overlapping patterns are accepted.

        Args:
            pattern: Cucumber Expression string or compiled regular expression.
            handler: Callable invoked as `handler(context, *args)`.

        Returns:
            The registered definition.

        Raises:
            ConfigurationError: If the handler is not callable or the
                pattern has an unsupported type.
            StepPatternError: If the pattern can not be compiled.
        """
        if not callable(handler):
            raise ConfigurationError(f'Step handler for {pattern!r} is not callable')

        definition = StepDefinition(
            pattern=pattern,
            expression=self.compile(pattern),
            handler=handler,
        )

        self._definitions.append(definition)
        logger.debug('Registered step definition %r', definition.source)

        return definition

    def compile(self, pattern: StepPattern) -> CucumberExpression | RegularExpression:
        """Compile a step pattern into a matcher.

        Args:
            pattern: Cucumber Expression string or compiled regular expression.

        Returns:
            The compiled expression.

        Raises:
            ConfigurationError: If the pattern has an unsupported type.
            StepPatternError: If the pattern can not be compiled.
        """
        try:
            if isinstance(pattern, str):
                return CucumberExpression(pattern, self.parameter_types)
            if isinstance(pattern, Pattern):
                return RegularExpression(pattern, self.parameter_types)

        except CucumberExpressionError as base:
            raise StepPatternError(
                f'Invalid step pattern {pattern!r}: {base}',
                pattern=pattern,
            ) from base

        raise ConfigurationError(
            f'Step pattern must be a string or a compiled regular expression, got {pattern!r}',
        )

    def find_matching_step(self, text: str) -> StepMatch | None:
        """Find the step definition matching a step text.

        Args:
            text: Literal step text, without keyword.

        Returns:
            The first matching definition with its typed arguments,
            or `None` if no definition matches.

        Raises:
            AmbiguousStepError: In strict mode, if several definitions
                match the text.
        """
        matches = []

        for definition in self._definitions:
            arguments = definition.expression.match(text)
            if arguments is None:
                continue

            matches.append(StepMatch(
                definition=definition,
                arguments=tuple(StepArgument.from_argument(item) for item in arguments),
            ))
            if not self.strict_mode:
                break

        if len(matches) > 1:
            raise AmbiguousStepError(text, (item.definition.pattern for item in matches))

        if not matches:
            return None

        return matches[0]

    async def execute_step(self, text: str, context: Any) -> Any:  # noqa: ANN401
        """Execute the step definition matching a step text.

        The handler is called with the context followed by the extracted
        values and awaited if it returns an awaitable. Whatever the
        handler returns or raises is passed through unchanged.

        Args:
            text: Literal step text, without keyword.
            context: Scenario context (world) passed to the handler.

        Returns:
            The handler result.

        Raises:
            StepNotFoundError: If no definition matches the text.
            AmbiguousStepError: In strict mode, if several definitions
                match the text.
        """
        match = self.find_matching_step(text)
        if match is None:
            raise StepNotFoundError(text)

        return await settle(match.definition.handler(context, *match.args))

    def get_all_definitions(self) -> list[StepDefinitionInfo]:
        """List registered definitions, in registration order.

        Returns:
            Pattern and handler pairs, e.g. for unused step reporting.
        """
        return [
            StepDefinitionInfo(pattern=item.pattern, handler=item.handler)
            for item in self._definitions
        ]
