"""Core exception hierarchy.

This module defines the error types used across the library to report
invalid support code registration, step lookup failures, data table
misuse, document loading issues, and handler execution failures in
a structured and extensible way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

from cuke_core.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<runtime object>'
FORMAT_URI = '<unknown document>'
FORMAT_INDENT = 4

HOOK_FAILED_PREFIX = 'Hook failed: '


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values. Line and column numbers are 1-based, as in
    Gherkin source locations.
    """

    #: URI of the document where the error occurred.
    uri: str | None

    #: Line number in the source document.
    line_num: int | None
    #: Column number in the source document.
    column_num: int | None

    #: Name of the scenario being processed.
    scenario: str | None
    #: Text of the step being processed.
    step: str | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Element associated with the error, rendered as a YAML snippet.
    element: Any


class ErrorFormatter:
    """Utility class for formatting engine errors.

    Produces human-readable messages with optional source location
    and YAML-based contextual snippets.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message.rstrip()

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and execution location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including uri, line, column,
            scenario and step when available.
        """
        indent = cls._ensure_indent(indent)

        uri = context.get('uri') or FORMAT_URI

        message = f'{indent}in "{uri}"'
        if (line_num := context.get('line_num')) is not None:
            message += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                message += f', column {column_num}'
        message += linesep

        if scenario := context.get('scenario'):
            message += f'{indent}on scenario "{scenario}"'
            if step := context.get('step'):
                message += f', step "{step}"'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        error = context.get('error')
        if isinstance(error, MarkedYAMLError) and error.problem_mark is not None:
            snippet = error.problem_mark.get_snippet(indent=0) or ''
            return cls._make_indent(snippet, indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Non-scalar and non-container objects are replaced with
        a placeholder to prevent leaking opaque data.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to an indented YAML string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
            allow_unicode=True,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.

        Args:
            value: Original multi-line string.
            indent: Indentation prefix.

        Returns:
            Indented string.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input.

        Args:
            indent: Indentation as string or number of spaces.

        Returns:
            A string consisting of spaces or the provided string.
        """
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class CukeError(Exception, ErrorFormatter):
    """Base exception for all cuke-core errors.

    All custom exceptions raised by the library inherit from this
    class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class ConfigurationError(CukeError):
    """Error raised when support code is registered incorrectly.

    Raised synchronously at registration time, for example when
    hook options are given without a handler.
    """


class StepPatternError(ConfigurationError):
    """Error raised when a step pattern can not be compiled."""

    def __init__(self, message: str, *, pattern: Any = None) -> None:  # noqa: ANN401
        """Initialize a step pattern error.

        Args:
            message: Human-readable error description.
            pattern: The offending step pattern.
        """
        self.pattern = pattern

        super().__init__(message)


class TagExpressionError(CukeError, ValueError):
    """Error raised when a tag expression is malformed."""

    def __init__(self, message: str, *, expression: str | None = None) -> None:
        """Initialize a tag expression error.

        Args:
            message: Human-readable error description.
            expression: The offending tag expression.
        """
        self.expression = expression

        super().__init__(message)


class StepNotFoundError(CukeError, LookupError):
    """Error raised when no step definition matches a step text."""

    def __init__(self, text: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize a missing step error.

        Args:
            text: The step text that could not be matched.
            context: Error context containing optional location data.
        """
        self.text = text

        super().__init__(f'No matching step definition found for: {text}', context=context)


class AmbiguousStepError(CukeError, LookupError):
    """Error raised when several step definitions match a step text.

    Only raised by registries created in strict mode.
    """

    def __init__(self, text: str, patterns: 'Iterable[Any]') -> None:
        """Initialize an ambiguous step error.

        Args:
            text: The step text matched by more than one definition.
            patterns: Patterns of all matching definitions.
        """
        self.text = text
        self.patterns = tuple(patterns)

        message = f'Multiple step definitions match: {text}'
        for pattern in self.patterns:
            message += f'{linesep}{' ' * FORMAT_INDENT}{_pattern_source(pattern)}'

        super().__init__(message)


class StructuralError(CukeError, LookupError):
    """Error raised when a data table has an unexpected shape."""


class MissingColumnsError(CukeError, LookupError):
    """Error raised when a data table lacks requested columns."""

    def __init__(self, columns: 'Iterable[str]') -> None:
        """Initialize a missing columns error.

        Args:
            columns: Names of the columns absent from the table header.
        """
        self.columns = tuple(columns)

        super().__init__(
            f'The following columns are missing from the table: {', '.join(self.columns)}',
        )


class ExecutionError(CukeError):
    """Base error for step and hook handler failures."""


class HookError(ExecutionError):
    """Error raised when a hook handler fails.

    The message of the original error is prefixed with `Hook failed: `
    and the original error is kept as the exception cause.
    """

    def __init__(self, error: BaseException, *,
                 hook: Any = None) -> None:  # noqa: ANN401
        """Initialize a hook failure.

        Args:
            error: The exception raised by the hook handler.
            hook: The hook definition whose handler failed.
        """
        self.error = error
        self.hook = hook

        super().__init__(f'{HOOK_FAILED_PREFIX}{error}')


class DocumentNotFoundError(CukeError, LookupError):
    """Error raised when a document is not registered in a loader."""

    def __init__(self, path: str) -> None:
        """Initialize a missing document error.

        Args:
            path: Path or identifier of the requested document.
        """
        self.path = path

        super().__init__(f'Feature document not found: {path}')


class DocumentSchemaError(CukeError):
    """Error raised when a serialized document can not be loaded."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError, *,
                        uri: str | None = None) -> 'Self':
        """Create a schema error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.
            uri: Path of the document being loaded.

        Returns:
            DocumentSchemaError with the YAML problem location.
        """
        error_context = ErrorContext(uri=uri, error=error)
        if (mark := error.problem_mark) is not None:
            error_context['line_num'] = mark.line + 1
            error_context['column_num'] = mark.column + 1

        message = 'Invalid document'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            uri: str | None = None) -> 'Self':
        """Create a schema error from a Pydantic validation failure.

        The first validation issue that can be located in the source data
        is used to build a focused message and snippet.

        Args:
            error: ValidationError raised by Pydantic.
            data: Source document data.
            uri: Path of the document being loaded.

        Returns:
            DocumentSchemaError representing the validation failure.
        """
        error_context = ErrorContext(uri=uri, error=error)

        if not data or not isinstance(data, dict):
            return cls('Document validation error', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_pydantic_context(data, item):
                message, value = located
                return cls(message, context=ErrorContext({**error_context, 'element': value}))

        return cls('Document validation error', context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in validated data.

        Walks the Pydantic error location path and extracts the minimal
        substructure responsible for the failure.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if a relevant
            context can be located, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)):
                if isinstance(key, int) and 0 <= key < len(last_item):
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            elif isinstance(last_item, dict):
                if key in last_item:
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            else:
                return None

        message = None
        if last_key is not None:
            for line in (error.get('msg') or '').splitlines():
                if line.strip():
                    message = line.strip()
                    break

        if not message:
            return None

        if isinstance(container, (list, tuple)):
            return message, [last_item]

        return message, {last_key: last_item}


def _pattern_source(pattern: Any) -> str:  # noqa: ANN401
    """Return a printable source of a step pattern."""
    return getattr(pattern, 'pattern', None) or f'{pattern}'
