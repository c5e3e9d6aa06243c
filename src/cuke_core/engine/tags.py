"""Tag expression filtering over the Gherkin document hierarchy.

Tag expressions (`@smoke and not @slow`) are compiled by the
`cucumber-tag-expressions` library. This module adds tag inheritance:
a scenario carries the tags of its feature and rule, and an examples
block additionally carries its own tags.
"""

import logging
from typing import TYPE_CHECKING

from cucumber_tag_expressions import parse
from cucumber_tag_expressions.parser import TagExpressionError as ParseError

from cuke_core.errors import TagExpressionError

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from cuke_core.schema import Examples, Feature, GherkinDocument, Rule, Scenario
    from cuke_core.settings import CukeSettings

logger = logging.getLogger(__name__)


def collect_tags(scenario: 'Scenario', feature: 'Feature',
                 rule: 'Rule | None' = None,
                 examples: 'Examples | None' = None) -> tuple[str, ...]:
    """Collect tag names inherited by a scenario or an examples block.

    Args:
        scenario: Scenario (or outline) the tags apply to.
        feature: Feature containing the scenario.
        rule: Rule containing the scenario, if any.
        examples: Examples block of the outline, if any.

    Returns:
        Feature, rule, scenario and examples tag names, in that order.
        Duplicates are kept.
    """
    sources = [feature.tags]
    if rule is not None:
        sources.append(rule.tags)
    sources.append(scenario.tags)
    if examples is not None:
        sources.append(examples.tags)

    return tuple(
        tag.name
        for tags in sources
        for tag in tags
    )


class TagFilter:
    """Compiled tag expression with hierarchy-aware match predicates.

    A filter holds no mutable state after construction and is safe to
    share between concurrently running scenarios.
    """

    def __init__(self, expression: str) -> None:
        """Compile a tag expression.

        Args:
            expression: Tag expression, e.g. `@smoke and not @slow`.
                An empty expression matches everything.

        Raises:
            TagExpressionError: If the expression is malformed.
        """
        try:
            self._compiled = parse(expression)

        except ParseError as base:
            raise TagExpressionError(
                f'Invalid tag expression {expression!r}: {base}',
                expression=expression,
            ) from base

        self.expression = expression

    def __repr__(self) -> str:
        """String representation."""
        return f'{type(self).__name__}({self.expression!r})'

    @classmethod
    def from_settings(cls, settings: 'CukeSettings') -> 'TagFilter | None':
        """Build a filter from the configured default tag expression.

        Args:
            settings: Engine settings.

        Returns:
            A tag filter, or `None` if no expression is configured.

        Raises:
            TagExpressionError: If the configured expression is malformed.
        """
        if not settings.tags:
            return None

        return cls(settings.tags)

    def evaluate(self, tags: 'Iterable[str]') -> bool:
        """Evaluate the expression against tag names.

        Args:
            tags: Tag names, including the leading `@`.

        Returns:
            True if the tags satisfy the expression.
        """
        return bool(self._compiled.evaluate(list(tags)))

    def matches_scenario(self, scenario: 'Scenario', feature: 'Feature',
                         rule: 'Rule | None' = None) -> bool:
        """Check a scenario against the expression using inherited tags.

        Args:
            scenario: Scenario to check.
            feature: Feature containing the scenario.
            rule: Rule containing the scenario, if any.

        Returns:
            True if the scenario matches.
        """
        return self.evaluate(collect_tags(scenario, feature, rule))

    def matches_examples(self, examples: 'Examples', scenario: 'Scenario',
                         feature: 'Feature', rule: 'Rule | None' = None) -> bool:
        """Check a whole examples block against the expression.

        Filtering is done per block: rows carry no tags of their own.

        Args:
            examples: Examples block to check.
            scenario: Outline containing the block.
            feature: Feature containing the outline.
            rule: Rule containing the outline, if any.

        Returns:
            True if the examples block matches.
        """
        return self.evaluate(collect_tags(scenario, feature, rule, examples))

    def matches_document(self, document: 'GherkinDocument') -> bool:
        """Check whether any scenario of a document matches.

        Args:
            document: Parsed Gherkin document.

        Returns:
            True if at least one scenario, directly under the feature or
            inside a rule, matches the expression.
        """
        if document.feature is None:
            return False

        for scenario, rule in document.walk():
            if self.matches_scenario(scenario, document.feature, rule):
                return True

        logger.debug('No scenario of %s matches %r', document.uri, self.expression)
        return False
