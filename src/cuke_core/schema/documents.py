"""Gherkin document tree models.

These immutable models mirror the Gherkin messages format produced by an
external grammar parser: a document holds a feature, a feature holds
scenarios and rules, a rule holds scenarios, and scenarios hold steps and
examples blocks. Every node carries its source location.

Models accept camelCase message keys (`tableHeader`, `docString`, ...)
as well as snake_case field names, and ignore keys the engine does not use.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Self
from uuid import uuid4

from pydantic import Field, model_validator

from cuke_core.models import MessageModel
from cuke_core.names import TagName  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterator


def _new_id() -> str:
    """Generate an identifier for nodes built without one."""
    return uuid4().hex


class StepKeywordType(StrEnum):
    """Semantic type of a step keyword."""

    UNKNOWN = 'Unknown'
    CONTEXT = 'Context'
    ACTION = 'Action'
    OUTCOME = 'Outcome'
    CONJUNCTION = 'Conjunction'


class Location(MessageModel):
    """Source position of a node (1-based)."""

    line: int = Field(
        default=0,
        ge=0,
        title='Line',
        description='Line number in the source document.',
    )
    column: int | None = Field(
        default=None,
        ge=0,
        title='Column',
        description='Column number in the source document.',
    )


class Tag(MessageModel):
    """Tag attached to a feature, rule, scenario or examples block."""

    name: TagName
    id: str = Field(default_factory=_new_id)
    location: Location = Field(default_factory=Location)


class TableCell(MessageModel):
    """Single table cell."""

    value: str = ''
    location: Location = Field(default_factory=Location)


class TableRow(MessageModel):
    """Ordered row of table cells."""

    id: str = Field(default_factory=_new_id)
    location: Location = Field(default_factory=Location)
    cells: tuple[TableCell, ...] = ()

    @property
    def values(self) -> tuple[str, ...]:
        """Cell values of the row."""
        return tuple(cell.value for cell in self.cells)


class DataTableTemplate(MessageModel):
    """Data table attached to a single step."""

    location: Location = Field(default_factory=Location)
    rows: tuple[TableRow, ...] = ()

    @property
    def values(self) -> tuple[tuple[str, ...], ...]:
        """Row-major cell values of the table."""
        return tuple(row.values for row in self.rows)


class DocString(MessageModel):
    """Free-text block attached to a single step."""

    content: str = ''
    media_type: str | None = None
    delimiter: str = '"""'
    location: Location = Field(default_factory=Location)


class Step(MessageModel):
    """Step template: a keyword, a text and optional step arguments.

    The text of a step inside a scenario outline may contain `<name>`
    placeholders, as may its data table cells and doc string content.
    """

    id: str = Field(default_factory=_new_id)
    keyword: str
    keyword_type: StepKeywordType | None = None
    text: str
    data_table: DataTableTemplate | None = None
    doc_string: DocString | None = None
    location: Location = Field(default_factory=Location)


class Examples(MessageModel):
    """Examples block of a scenario outline.

    Holds a header row naming the columns, body rows with one value per
    column, and tags of its own.
    """

    id: str = Field(default_factory=_new_id)
    keyword: str = 'Examples'
    name: str = ''
    description: str = ''
    tags: tuple[Tag, ...] = ()
    table_header: TableRow | None = None
    table_body: tuple[TableRow, ...] = ()
    location: Location = Field(default_factory=Location)

    @model_validator(mode='after')
    def check_rows_width(self) -> Self:
        """Check every body row against the header width.

        Returns:
            Self.

        Raises:
            ValueError: If a body row has a different number of cells
                than the header.
        """
        if self.table_header is None:
            return self

        width = len(self.table_header.cells)
        for row in self.table_body:
            if len(row.cells) != width:
                raise ValueError(
                    f'Examples row at line {row.location.line} has {len(row.cells)} '
                    f'cells, expected {width}',
                )

        return self

    @property
    def header(self) -> tuple[str, ...]:
        """Column names of the block."""
        if self.table_header is None:
            return ()

        return self.table_header.values


class Background(MessageModel):
    """Background steps shared by the scenarios of a feature or rule."""

    id: str = Field(default_factory=_new_id)
    keyword: str = 'Background'
    name: str = ''
    steps: tuple[Step, ...] = ()
    location: Location = Field(default_factory=Location)


class Scenario(MessageModel):
    """Scenario or scenario outline template.

    A scenario with at least one examples block is an outline whose
    name and steps may reference examples columns as `<name>`.
    """

    id: str = Field(default_factory=_new_id)
    keyword: str = 'Scenario'
    name: str = ''
    description: str = ''
    tags: tuple[Tag, ...] = ()
    steps: tuple[Step, ...] = ()
    examples: tuple[Examples, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def is_outline(self) -> bool:
        """Whether the scenario has examples to expand."""
        return bool(self.examples)


class RuleChild(MessageModel):
    """Child node of a rule."""

    background: Background | None = None
    scenario: Scenario | None = None


class Rule(MessageModel):
    """Business rule grouping scenarios under shared tags."""

    id: str = Field(default_factory=_new_id)
    keyword: str = 'Rule'
    name: str = ''
    description: str = ''
    tags: tuple[Tag, ...] = ()
    children: tuple[RuleChild, ...] = ()
    location: Location = Field(default_factory=Location)

    @property
    def scenarios(self) -> tuple[Scenario, ...]:
        """Scenarios of the rule in document order."""
        return tuple(
            child.scenario
            for child in self.children
            if child.scenario is not None
        )


class FeatureChild(MessageModel):
    """Child node of a feature."""

    background: Background | None = None
    rule: Rule | None = None
    scenario: Scenario | None = None


class Feature(MessageModel):
    """Feature: the root of a Gherkin document."""

    keyword: str = 'Feature'
    name: str = ''
    description: str = ''
    language: str = 'en'
    tags: tuple[Tag, ...] = ()
    children: tuple[FeatureChild, ...] = ()
    location: Location = Field(default_factory=Location)


class GherkinDocument(MessageModel):
    """Parsed Gherkin document.

    The document owns every scenario template it contains and serves
    as the arena concrete scenarios refer back into by identifier.
    """

    uri: str | None = None
    feature: Feature | None = None

    def walk(self) -> 'Iterator[tuple[Scenario, Rule | None]]':
        """Iterate over scenarios in document order.

        Yields:
            Pairs of a scenario and the rule containing it, or `None`
            for scenarios declared directly under the feature.
        """
        if self.feature is None:
            return

        for child in self.feature.children:
            if child.scenario is not None:
                yield child.scenario, None

            if child.rule is not None:
                for scenario in child.rule.scenarios:
                    yield scenario, child.rule

    def find_scenario(self, scenario_id: str) -> Scenario | None:
        """Resolve a scenario template by identifier.

        Args:
            scenario_id: Identifier of the scenario template.

        Returns:
            The scenario template, or `None` if the document has none
            with this identifier.
        """
        for scenario, _ in self.walk():
            if scenario.id == scenario_id:
                return scenario

        return None
