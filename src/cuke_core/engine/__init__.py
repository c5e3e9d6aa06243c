"""Scenario materialization and selection engine.

This package provides the runtime pieces a behavior-driven test harness
is built from:
- tag filtering with feature, rule, scenario and examples inheritance;
- expansion of scenario outlines into concrete scenarios;
- step definition matching with typed argument extraction;
- ordered, tag-filtered lifecycle hooks;
- a relational data table view;
- an in-memory registry of parsed documents.

The harness loads documents and support code, expands the documents with
`process_document`, then drives hooks and steps for each concrete scenario.
"""

from .hooks import HookDefinition, HookOptions, HookRegistry, HookType
from .loader import DocumentLoader
from .outlines import ScenarioOutlineExpander, process_document, process_scenario_outline, substitute
from .steps import StepArgument, StepDefinition, StepDefinitionInfo, StepMatch, StepRegistry
from .tables import DataTable
from .tags import TagFilter, collect_tags

__all__ = (
    'DataTable',
    'DocumentLoader',
    'HookDefinition',
    'HookOptions',
    'HookRegistry',
    'HookType',
    'ScenarioOutlineExpander',
    'StepArgument',
    'StepDefinition',
    'StepDefinitionInfo',
    'StepMatch',
    'StepRegistry',
    'TagFilter',
    'collect_tags',
    'process_document',
    'process_scenario_outline',
    'substitute',
)
