"""Examples of Gherkin documents in the messages format.

Documents are written as plain mappings with the camelCase keys an
external Gherkin parser emits, then validated into document models.
Builders keep the examples short while still carrying source lines.
"""

from typing import Any

from cuke_core.schema import GherkinDocument


def tags(*names: str, line: int = 1) -> list[dict[str, Any]]:
    """Build tag messages."""
    return [
        {'name': name, 'id': f'tag-{line}-{name}', 'location': {'line': line, 'column': 1}}
        for name in names
    ]


def row(line: int, *values: str) -> dict[str, Any]:
    """Build a table row message."""
    return {
        'id': f'row-{line}',
        'location': {'line': line, 'column': 5},
        'cells': [
            {'value': value, 'location': {'line': line, 'column': 7}}
            for value in values
        ],
    }


def step(line: int, keyword: str, text: str, **extra: Any) -> dict[str, Any]:  # noqa: ANN401
    """Build a step message."""
    return {
        'id': f'step-{line}',
        'keyword': keyword,
        'text': text,
        'location': {'line': line, 'column': 5},
        **extra,
    }


def examples(line: int, header: list[str], body: list[list[str]], *,
             tag_names: tuple[str, ...] = ()) -> dict[str, Any]:
    """Build an examples block message; body rows follow the header line."""
    return {
        'id': f'examples-{line}',
        'keyword': 'Examples',
        'name': '',
        'location': {'line': line, 'column': 5},
        'tags': tags(*tag_names, line=line - 1),
        'tableHeader': row(line + 1, *header),
        'tableBody': [
            row(line + 2 + index, *values)
            for index, values in enumerate(body)
        ],
    }


def scenario(line: int, name: str, steps: list[dict[str, Any]], *,
             blocks: list[dict[str, Any]] | None = None,
             tag_names: tuple[str, ...] = ()) -> dict[str, Any]:
    """Build a scenario (outline when blocks are given) message."""
    return {
        'id': f'scenario-{line}',
        'keyword': 'Scenario Outline' if blocks else 'Scenario',
        'name': name,
        'description': '',
        'location': {'line': line, 'column': 3},
        'tags': tags(*tag_names, line=line - 1),
        'steps': steps,
        'examples': blocks or [],
    }


def document(*children: dict[str, Any], tag_names: tuple[str, ...] = (),
             uri: str = 'features/example.feature') -> GherkinDocument:
    """Build and validate a document from feature children."""
    return GherkinDocument.model_validate({
        'uri': uri,
        'comments': [],
        'feature': {
            'keyword': 'Feature',
            'name': 'Example',
            'description': '',
            'language': 'en',
            'location': {'line': 2, 'column': 1},
            'tags': tags(*tag_names, line=1),
            'children': list(children),
        },
    })


ADDITION_OUTLINE = scenario(
    4, 'Add <a> and <b>', [
        step(5, 'Given ', 'I enter <a>'),
        step(6, 'And ', 'I enter <b>'),
        step(7, 'Then ', 'the sum is <sum>'),
    ],
    blocks=[
        examples(9, ['a', 'b', 'sum'], [['1', '2', '3'], ['5', '7', '12']]),
    ],
)

TAGGED_EXAMPLES_OUTLINE = scenario(
    4, 'Tagged <step>', [
        step(5, 'Given ', 'a <step> step'),
    ],
    blocks=[
        examples(8, ['step'], [['first']], tag_names=('@smoke',)),
        examples(13, ['step'], [['second']], tag_names=('@regression',)),
        examples(18, ['step'], [['third']], tag_names=('@wip',)),
    ],
    tag_names=('@outline',),
)

PLAIN_SCENARIO = scenario(
    30, 'Plain scenario', [
        step(31, 'Given ', 'a plain step'),
    ],
    tag_names=('@plain',),
)

RULE_WITH_OUTLINE = {
    'rule': {
        'id': 'rule-40',
        'keyword': 'Rule',
        'name': 'Subtraction',
        'description': '',
        'location': {'line': 40, 'column': 3},
        'tags': tags('@rule', line=39),
        'children': [
            {'scenario': scenario(
                42, 'Subtract <b> from <a>', [
                    step(43, 'When ', 'I subtract <b> from <a>'),
                    step(44, 'Then ', 'the result is <result>'),
                ],
                blocks=[
                    examples(46, ['a', 'b', 'result'], [['5', '3', '2']], tag_names=('@fast',)),
                ],
            )},
        ],
    },
}
