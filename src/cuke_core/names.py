"""Gherkin name primitives and validation rules.

This module defines patterns and strongly-typed aliases for tag names
and outline placeholders, and the table of step keywords used to infer
the keyword type of steps whose tree does not carry one.
"""

from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Compiled pattern for tag names: an `@` followed by non-blank characters.
TAG_PATTERN = regexp(r'^@\S+$')

#: Compiled pattern for outline placeholders such as `<name>`.
PLACEHOLDER_PATTERN = regexp(r'<([^<>]+)>')

#: English step keywords by keyword type. Keywords are compared after
#: stripping surrounding whitespace.
CONTEXT_KEYWORDS = frozenset({'Given'})
ACTION_KEYWORDS = frozenset({'When'})
OUTCOME_KEYWORDS = frozenset({'Then'})
CONJUNCTION_KEYWORDS = frozenset({'And', 'But', '*'})


TagName = Annotated[
    str, Field(
        pattern=r'^@\S+$',
        title='Tag name',
        description=(
            'Name of a tag attached to a feature, rule, scenario '
            'or examples block, including the leading `@`.'
        ),
        examples=[
            '@smoke',
            '@slow',
        ],
    ),
]


def placeholders(text: str) -> list[str]:
    """List placeholder names referenced by a text, in order of appearance.

    Args:
        text: Outline text that may contain `<name>` placeholders.

    Returns:
        Placeholder names without angle brackets. Repeated names are
        listed once per occurrence.
    """
    return PLACEHOLDER_PATTERN.findall(text)
