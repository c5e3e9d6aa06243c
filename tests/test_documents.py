"""Tests for document and concrete scenario models."""

import pytest
from pydantic import ValidationError

from cuke_core.schema import (
    ConcreteScenario,
    Examples,
    GherkinDocument,
    Step,
    StepKeywordType,
    Tag,
)
from tests.examples.documents import (
    ADDITION_OUTLINE,
    PLAIN_SCENARIO,
    RULE_WITH_OUTLINE,
    document,
    examples,
)


def test_camel_case_messages() -> None:
    """Accept camelCase message keys and snake_case field names."""
    by_alias = Step.model_validate({
        'keyword': 'Given ',
        'keywordType': 'Context',
        'text': 'a step',
        'docString': {'content': 'text', 'mediaType': 'json'},
    })
    by_name = Step(
        keyword='Given ',
        keyword_type=StepKeywordType.CONTEXT,
        text='a step',
        doc_string={'content': 'text', 'media_type': 'json'},
    )

    assert by_alias.doc_string == by_name.doc_string
    assert by_alias.keyword_type == by_name.keyword_type


def test_unknown_message_keys_are_ignored() -> None:
    """Ignore parser fields the engine does not consume."""
    doc = GherkinDocument.model_validate({'comments': [{'text': '# note'}], 'source': {}})

    assert doc.feature is None


def test_models_are_frozen() -> None:
    """Forbid modification of parsed templates."""
    tag = Tag(name='@smoke')

    with pytest.raises(ValidationError):
        tag.name = '@slow'


@pytest.mark.parametrize('name', (
    pytest.param('smoke', id='no-at-sign'),
    pytest.param('@', id='empty'),
    pytest.param('@two words', id='whitespace'),
))
def test_invalid_tag_names(name: str) -> None:
    """Require tag names to start with an at sign."""
    with pytest.raises(ValidationError):
        Tag(name=name)


def test_examples_header() -> None:
    """Expose header names and validate row widths."""
    block = Examples.model_validate(examples(8, ['a', 'b'], [['1', '2']]))

    assert block.header == ('a', 'b')
    assert block.table_body[0].values == ('1', '2')
    assert Examples().header == ()


def test_examples_row_width() -> None:
    """Reject examples rows of a different width than the header."""
    with pytest.raises(ValidationError, match=r'has 3 cells, expected 2'):
        Examples.model_validate(examples(8, ['a', 'b'], [['1', '2', '3']]))


def test_walk_order() -> None:
    """Walk feature scenarios and rule scenarios in document order."""
    doc = document({'scenario': ADDITION_OUTLINE}, RULE_WITH_OUTLINE, {'scenario': PLAIN_SCENARIO})

    walked = [(scenario.name, rule.name if rule else None) for scenario, rule in doc.walk()]

    assert walked == [
        ('Add <a> and <b>', None),
        ('Subtract <b> from <a>', 'Subtraction'),
        ('Plain scenario', None),
    ]


def test_outline_detection() -> None:
    """Tell outlines apart from plain scenarios."""
    doc = document({'scenario': ADDITION_OUTLINE}, {'scenario': PLAIN_SCENARIO})

    assert [scenario.is_outline for scenario, _ in doc.walk()] == [True, False]


def test_find_scenario() -> None:
    """Resolve scenario templates by identifier."""
    doc = document({'scenario': ADDITION_OUTLINE}, RULE_WITH_OUTLINE)

    assert doc.find_scenario('scenario-42').name == 'Subtract <b> from <a>'
    assert doc.find_scenario('missing') is None


def test_generated_identifiers() -> None:
    """Generate distinct identifiers for nodes built without one."""
    first = Step(keyword='Given ', text='a')
    second = Step(keyword='Given ', text='a')

    assert first.id
    assert first.id != second.id


def test_concrete_scenario_parameters() -> None:
    """Map examples header names to row values."""
    concrete = ConcreteScenario(
        name='Add 1 and 2',
        template_id='outline',
        examples_id='examples',
        line=11,
        examples_header=('a', 'b'),
        examples_row=('1', '2'),
    )

    assert concrete.parameters == {'a': '1', 'b': '2'}
    assert concrete.steps == ()
    assert concrete.tags == ()
