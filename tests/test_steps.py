"""Tests for step definition matching and execution."""

import re
from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest

from cuke_core.engine import StepArgument, StepRegistry
from cuke_core.errors import (
    AmbiguousStepError,
    ConfigurationError,
    StepNotFoundError,
    StepPatternError,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def test_empty_registry(steps: StepRegistry) -> None:
    """Match nothing without definitions."""
    assert len(steps) == 0
    assert steps.find_matching_step('anything') is None
    assert steps.get_all_definitions() == []


def test_match_typed_arguments(steps: StepRegistry) -> None:
    """Extract typed values from a Cucumber Expression."""
    handler = lambda ctx, count: None  # noqa: E731
    steps.register('I have {int} cukes in my {word}', handler)

    match = steps.find_matching_step('I have 42 cukes in my belly')

    assert match is not None
    assert match.definition.handler is handler
    assert match.args == [42, 'belly']
    assert match.arguments[0] == StepArgument(value=42, text='42', parameter_type='int')


def test_match_string_parameter(steps: StepRegistry) -> None:
    """Strip quotes from string parameters."""
    steps.register('the title is {string}', lambda ctx, title: None)

    match = steps.find_matching_step('the title is "Hello, world"')

    assert match is not None
    assert match.args == ['Hello, world']


def test_match_regular_expression(steps: StepRegistry) -> None:
    """Extract capture groups from a regular expression."""
    steps.register(re.compile(r'^I am logged in as (\w+)$'), lambda ctx, name: None)

    match = steps.find_matching_step('I am logged in as alice')

    assert match is not None
    assert match.args == ['alice']
    assert match.definition.source == r'^I am logged in as (\w+)$'


def test_no_partial_match(steps: StepRegistry) -> None:
    """Require Cucumber Expressions to match the whole text."""
    steps.register('I have {int} cukes', lambda ctx, count: None)

    assert steps.find_matching_step('I have 4 cukes today') is None
    assert steps.find_matching_step('Now I have 4 cukes') is None


def test_first_match_wins(steps: StepRegistry) -> None:
    """Pick the earliest registered definition among several matches."""
    first = lambda ctx, value: 'first'  # noqa: E731
    second = lambda ctx: 'second'  # noqa: E731
    steps.register('I have {int} cukes', first)
    steps.register('I have 5 cukes', second)

    match = steps.find_matching_step('I have 5 cukes')

    assert match is not None
    assert match.definition.handler is first


def test_strict_mode_reports_ambiguity(strict_steps: StepRegistry) -> None:
    """Report several matching definitions in strict mode."""
    strict_steps.register('I have {int} cukes', lambda ctx, value: None)
    strict_steps.register(re.compile(r'^I have (\d+) cukes$'), lambda ctx, value: None)

    with pytest.raises(AmbiguousStepError, match=r'^Multiple step definitions match: I have 5 cukes') as error:
        strict_steps.find_matching_step('I have 5 cukes')

    assert len(error.value.patterns) == 2
    assert isinstance(error.value, LookupError)


def test_strict_mode_single_match(strict_steps: StepRegistry) -> None:
    """Match normally when only one definition applies."""
    strict_steps.register('I have {int} cukes', lambda ctx, value: None)
    strict_steps.register('I eat {int} cukes', lambda ctx, value: None)

    match = strict_steps.find_matching_step('I eat 3 cukes')

    assert match is not None
    assert match.args == [3]


def test_definitions_in_registration_order(steps: StepRegistry) -> None:
    """List definitions with their patterns and handlers."""
    pattern = re.compile(r'^b$')
    first = lambda ctx: None  # noqa: E731
    second = lambda ctx: None  # noqa: E731
    steps.register('a', first)
    steps.register(pattern, second)

    definitions = steps.get_all_definitions()

    assert [item.pattern for item in definitions] == ['a', pattern]
    assert [item.handler for item in definitions] == [first, second]
    assert len(steps) == 2


def test_duplicate_patterns_accepted(steps: StepRegistry) -> None:
    """Accept the same pattern registered twice."""
    steps.register('a step', lambda ctx: 1)
    steps.register('a step', lambda ctx: 2)

    assert len(steps) == 2


def test_register_non_callable(steps: StepRegistry) -> None:
    """Reject handlers that can not be called."""
    with pytest.raises(ConfigurationError, match=r'is not callable$'):
        steps.register('a step', 'not a function')


def test_register_unsupported_pattern(steps: StepRegistry) -> None:
    """Reject patterns that are neither strings nor regular expressions."""
    with pytest.raises(ConfigurationError, match=r'^Step pattern must be'):
        steps.register(42, lambda ctx: None)


@pytest.mark.parametrize('pattern', (
    pytest.param('I have {unknown} cukes', id='undefined-parameter-type'),
    pytest.param('I have {int cukes', id='unterminated-parameter'),
))
def test_register_invalid_expression(steps: StepRegistry, pattern: str) -> None:
    """Reject Cucumber Expressions that can not be compiled."""
    with pytest.raises(StepPatternError, match=r'^Invalid step pattern') as error:
        steps.register(pattern, lambda ctx: None)

    assert error.value.pattern == pattern
    assert len(steps) == 0


def test_custom_parameter_type(steps: StepRegistry) -> None:
    """Convert arguments with a custom parameter type."""
    steps.define_parameter_type('color', r'red|green|blue', lambda value: value.upper())
    steps.register('a {color} cucumber', lambda ctx, color: None)

    match = steps.find_matching_step('a green cucumber')

    assert match is not None
    assert match.args == ['GREEN']
    assert match.arguments[0].parameter_type == 'color'


def test_duplicate_parameter_type(steps: StepRegistry) -> None:
    """Reject a parameter type that is already defined."""
    with pytest.raises(ConfigurationError, match=r"^Invalid parameter type 'int'"):
        steps.define_parameter_type('int', r'\d+', int, type_=int)


@pytest.mark.asyncio
async def test_execute_sync_handler(steps: StepRegistry, world: SimpleNamespace) -> None:
    """Call the handler with the context followed by the arguments."""
    def handler(ctx: SimpleNamespace, count: int, place: str) -> str:
        ctx.calls.append((count, place))
        return 'done'

    steps.register('I have {int} cukes in my {word}', handler)

    result = await steps.execute_step('I have 7 cukes in my bag', world)

    assert result == 'done'
    assert world.calls == [(7, 'bag')]


@pytest.mark.asyncio
async def test_execute_async_handler(steps: StepRegistry, world: SimpleNamespace) -> None:
    """Await coroutine handlers before returning."""
    async def handler(ctx: SimpleNamespace, name: str) -> str:
        ctx.calls.append(name)
        return name.upper()

    steps.register(re.compile(r'^I greet (\w+)$'), handler)

    assert await steps.execute_step('I greet bob', world) == 'BOB'
    assert world.calls == ['bob']


@pytest.mark.asyncio
async def test_execute_with_mock_handler(steps: StepRegistry, mocker: 'MockerFixture') -> None:
    """Pass the context as the first argument."""
    handler = mocker.AsyncMock(return_value=None)
    context = object()
    steps.register('I wait {int} seconds', handler)

    await steps.execute_step('I wait 3 seconds', context)

    handler.assert_awaited_once_with(context, 3)


@pytest.mark.asyncio
async def test_execute_missing_step(steps: StepRegistry) -> None:
    """Fail with the step text when nothing matches."""
    steps.register('something else', lambda ctx: None)

    with pytest.raises(StepNotFoundError, match=r'^No matching step definition found for: an undefined step$'):
        await steps.execute_step('an undefined step', None)


@pytest.mark.asyncio
async def test_execute_propagates_handler_errors(steps: StepRegistry) -> None:
    """Pass handler failures through unchanged."""
    def handler(ctx: object) -> None:
        raise RuntimeError('boom')

    steps.register('it explodes', handler)

    with pytest.raises(RuntimeError, match=r'^boom$'):
        await steps.execute_step('it explodes', None)
