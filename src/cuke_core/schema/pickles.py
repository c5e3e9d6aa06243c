"""Concrete scenario models.

A concrete scenario is a fully materialized, placeholder-free scenario
produced from one examples row of a scenario outline. It refers back to
its template by identifier only, so it can be copied or discarded freely
without keeping the document tree alive through it.
"""

from pydantic import Field

from cuke_core.models import SchemaModel

from .documents import DataTableTemplate, DocString, StepKeywordType


class ConcreteStep(SchemaModel):
    """Step with every placeholder substituted."""

    text: str = Field(
        title='Step text',
        description='Step text after placeholder substitution.',
    )

    keyword: str = Field(
        title='Keyword',
        description='Keyword copied unchanged from the template, e.g. `Given `.',
    )

    keyword_type: StepKeywordType = Field(
        default=StepKeywordType.UNKNOWN,
        title='Effective keyword type',
        description=(
            'Keyword type of the step. Conjunctions (`And`, `But`) '
            'take the type of the step they follow.'
        ),
    )

    data_table: DataTableTemplate | None = Field(
        default=None,
        title='Data table',
        description='Data table with substituted cell values.',
    )

    doc_string: DocString | None = Field(
        default=None,
        title='Doc string',
        description='Doc string with substituted content.',
    )

    template_id: str = Field(
        title='Step template identifier',
        description='Identifier of the originating step template.',
    )


class ConcreteScenario(SchemaModel):
    """Scenario materialized from a single examples row."""

    name: str = Field(
        title='Scenario name',
        description='Outline name after placeholder substitution.',
    )

    steps: tuple[ConcreteStep, ...] = Field(
        default=(),
        title='Steps',
        description='Concrete steps in template order.',
    )

    template_id: str = Field(
        title='Scenario template identifier',
        description=(
            'Identifier of the scenario outline this scenario was '
            'produced from. Resolve it with `GherkinDocument.find_scenario`.'
        ),
    )

    rule_id: str | None = Field(
        default=None,
        title='Rule identifier',
        description='Identifier of the rule containing the outline, if any.',
    )

    examples_id: str = Field(
        title='Examples block identifier',
        description='Identifier of the examples block holding the row.',
    )

    uri: str | None = Field(
        default=None,
        title='Document URI',
        description='URI of the document the outline was declared in.',
    )

    line: int = Field(
        title='Source line',
        description='Source line of the examples row, not of the outline.',
    )

    examples_header: tuple[str, ...] = Field(
        default=(),
        title='Examples header',
        description='Column names of the examples block.',
    )

    examples_row: tuple[str, ...] = Field(
        default=(),
        title='Examples row',
        description='Cell values of the examples row.',
    )

    tags: tuple[str, ...] = Field(
        default=(),
        title='Tags',
        description='Feature, rule, scenario and examples tags, in that order.',
    )

    @property
    def parameters(self) -> dict[str, str]:
        """Mapping of examples column names to row values."""
        return dict(zip(self.examples_header, self.examples_row, strict=True))
