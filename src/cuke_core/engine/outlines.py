"""Scenario outline expansion.

An outline is a scenario template whose name and steps reference the
columns of its examples blocks as `<name>` placeholders. Expansion
produces one concrete scenario per examples row, substituting the row
values into the name, the step texts, the step data table cells and the
step doc strings.
"""

import logging
from typing import TYPE_CHECKING

from cuke_core.names import (
    ACTION_KEYWORDS,
    CONJUNCTION_KEYWORDS,
    CONTEXT_KEYWORDS,
    OUTCOME_KEYWORDS,
    placeholders,
)
from cuke_core.schema import (
    ConcreteScenario,
    ConcreteStep,
    DataTableTemplate,
    DocString,
    StepKeywordType,
    TableCell,
    TableRow,
)

from .tags import collect_tags

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

if TYPE_CHECKING:
    from cuke_core.schema import Examples, Feature, GherkinDocument, Rule, Scenario, Step

    from .tags import TagFilter

logger = logging.getLogger(__name__)


def substitute(text: str, values: 'Mapping[str, str]') -> str:
    """Replace `<name>` placeholders with row values.

    Every occurrence of every known placeholder is replaced by literal
    substring matching; there is no escaping. Placeholders without a
    matching column are left verbatim.

    Args:
        text: Template text.
        values: Mapping of column names to cell values.

    Returns:
        The text with placeholders replaced.
    """
    for name, value in values.items():
        text = text.replace(f'<{name}>', value)

    return text


def keyword_type_of(keyword: str) -> StepKeywordType:
    """Infer the keyword type from an English step keyword.

    Args:
        keyword: Step keyword, possibly with trailing whitespace.

    Returns:
        The keyword type, or `UNKNOWN` for unrecognized keywords.
    """
    keyword = keyword.strip()

    if keyword in CONTEXT_KEYWORDS:
        return StepKeywordType.CONTEXT
    if keyword in ACTION_KEYWORDS:
        return StepKeywordType.ACTION
    if keyword in OUTCOME_KEYWORDS:
        return StepKeywordType.OUTCOME
    if keyword in CONJUNCTION_KEYWORDS:
        return StepKeywordType.CONJUNCTION

    return StepKeywordType.UNKNOWN


class ScenarioOutlineExpander:
    """Materializes scenario outlines into concrete scenarios.

    The expander is stateless; a single instance may be shared.
    """

    def process_document(self, document: 'GherkinDocument',
                         tag_filter: 'TagFilter | None' = None) -> list[ConcreteScenario]:
        """Expand every scenario outline of a document.

        Outlines directly under the feature and inside rules are expanded
        in document order. Plain scenarios (without examples) and
        backgrounds are not materialized here.

        Args:
            document: Parsed Gherkin document.
            tag_filter: Optional filter applied per examples block.

        Returns:
            Concrete scenarios in document, block and row order. Empty for
            a document without a feature.
        """
        feature = document.feature
        if feature is None:
            return []

        result: list[ConcreteScenario] = []

        for scenario, rule in document.walk():
            if not scenario.examples:
                continue

            result.extend(self.process_scenario_outline(
                scenario,
                feature,
                rule,
                tag_filter,
                uri=document.uri,
            ))

        logger.debug('Expanded %d scenarios from %s', len(result), document.uri)
        return result

    def process_scenario_outline(self, template: 'Scenario', feature: 'Feature',
                                 rule: 'Rule | None' = None,
                                 tag_filter: 'TagFilter | None' = None, *,
                                 uri: str | None = None) -> list[ConcreteScenario]:
        """Expand a scenario outline against its examples blocks.

        Blocks rejected by the tag filter are skipped as a whole, as are
        blocks with an empty header or body.

        Args:
            template: Scenario outline.
            feature: Feature containing the outline.
            rule: Rule containing the outline, if any.
            tag_filter: Optional filter applied per examples block.
            uri: URI of the document, copied onto produced scenarios.

        Returns:
            One concrete scenario per included examples row, in block
            then row order.
        """
        result: list[ConcreteScenario] = []

        for examples in template.examples:
            if tag_filter is not None and not tag_filter.matches_examples(
                examples, template, feature, rule,
            ):
                logger.debug(
                    'Examples at line %d of %r rejected by %r',
                    examples.location.line, template.name, tag_filter.expression,
                )
                continue

            if not examples.header or not examples.table_body:
                logger.debug(
                    'Examples at line %d of %r are empty, skipped',
                    examples.location.line, template.name,
                )
                continue

            result.extend(self.expand_examples(
                template,
                examples,
                collect_tags(template, feature, rule, examples),
                rule_id=rule.id if rule is not None else None,
                uri=uri,
            ))

        return result

    def expand_examples(self, template: 'Scenario', examples: 'Examples',
                        tags: 'Iterable[str]', *,
                        rule_id: str | None = None,
                        uri: str | None = None) -> list[ConcreteScenario]:
        """Produce one concrete scenario per row of an examples block.

        Args:
            template: Scenario outline.
            examples: Non-empty examples block of the outline.
            tags: Resolved tags of the block.
            rule_id: Identifier of the rule containing the outline.
            uri: URI of the document.

        Returns:
            Concrete scenarios in row order.
        """
        header = examples.header
        tags = tuple(tags)

        scenarios = []
        for row in examples.table_body:
            values = dict(zip(header, row.values, strict=True))

            name = substitute(template.name, values)
            if unresolved := placeholders(name):
                logger.debug('Unresolved placeholders %s left in %r', unresolved, name)

            scenarios.append(ConcreteScenario(
                name=name,
                steps=self.expand_steps(template.steps, values),
                template_id=template.id,
                rule_id=rule_id,
                examples_id=examples.id,
                uri=uri,
                line=row.location.line,
                examples_header=header,
                examples_row=row.values,
                tags=tags,
            ))

        return scenarios

    def expand_steps(self, steps: 'Iterable[Step]',
                     values: 'Mapping[str, str]') -> tuple[ConcreteStep, ...]:
        """Substitute row values into step templates.

        The keyword is copied unchanged. The effective keyword type of a
        conjunction (`And`, `But`) is the type of the step it follows.

        Args:
            steps: Step templates in order.
            values: Mapping of column names to cell values.

        Returns:
            Concrete steps in template order.
        """
        result = []
        previous = StepKeywordType.UNKNOWN

        for step in steps:
            keyword_type = step.keyword_type or keyword_type_of(step.keyword)
            if keyword_type == StepKeywordType.CONJUNCTION:
                keyword_type = previous
            previous = keyword_type

            result.append(ConcreteStep(
                text=substitute(step.text, values),
                keyword=step.keyword,
                keyword_type=keyword_type,
                data_table=self._expand_data_table(step.data_table, values),
                doc_string=self._expand_doc_string(step.doc_string, values),
                template_id=step.id,
            ))

        return tuple(result)

    @staticmethod
    def _expand_data_table(table: DataTableTemplate | None,
                           values: 'Mapping[str, str]') -> DataTableTemplate | None:
        if table is None:
            return None

        return DataTableTemplate(
            location=table.location,
            rows=tuple(
                TableRow(
                    id=row.id,
                    location=row.location,
                    cells=tuple(
                        TableCell(
                            value=substitute(cell.value, values),
                            location=cell.location,
                        )
                        for cell in row.cells
                    ),
                )
                for row in table.rows
            ),
        )

    @staticmethod
    def _expand_doc_string(doc_string: DocString | None,
                           values: 'Mapping[str, str]') -> DocString | None:
        if doc_string is None:
            return None

        return doc_string.model_copy(update={
            'content': substitute(doc_string.content, values),
        })


_default_expander = ScenarioOutlineExpander()


def process_scenario_outline(template: 'Scenario', feature: 'Feature',
                             rule: 'Rule | None' = None,
                             tag_filter: 'TagFilter | None' = None) -> list[ConcreteScenario]:
    """Expand a scenario outline with the default expander."""
    return _default_expander.process_scenario_outline(template, feature, rule, tag_filter)


def process_document(document: 'GherkinDocument',
                     tag_filter: 'TagFilter | None' = None) -> list[ConcreteScenario]:
    """Expand every scenario outline of a document with the default expander."""
    return _default_expander.process_document(document, tag_filter)
