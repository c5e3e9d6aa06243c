"""Declarative models of Gherkin documents and concrete scenarios.

Defines immutable Pydantic models for the parsed document tree consumed
by the engine and for the concrete scenarios it materializes.
"""

from .documents import (
    Background,
    DataTableTemplate,
    DocString,
    Examples,
    Feature,
    FeatureChild,
    GherkinDocument,
    Location,
    Rule,
    RuleChild,
    Scenario,
    Step,
    StepKeywordType,
    TableCell,
    TableRow,
    Tag,
)
from .pickles import ConcreteScenario, ConcreteStep

__all__ = (
    'Background',
    'ConcreteScenario',
    'ConcreteStep',
    'DataTableTemplate',
    'DocString',
    'Examples',
    'Feature',
    'FeatureChild',
    'GherkinDocument',
    'Location',
    'Rule',
    'RuleChild',
    'Scenario',
    'Step',
    'StepKeywordType',
    'TableCell',
    'TableRow',
    'Tag',
)
