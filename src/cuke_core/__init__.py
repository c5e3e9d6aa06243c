"""Scenario materialization and selection engine for Gherkin test suites.

The `cuke_core` package takes Gherkin documents already parsed into the
messages format and prepares them for execution.

Key features:
- scenario outlines expanded into concrete scenarios, one per examples row;
- tag expressions evaluated with feature, rule, scenario and examples
  tag inheritance;
- step definitions matched by Cucumber Expressions or regular expressions,
  with typed argument extraction;
- ordered, tag-filtered lifecycle hooks with awaitable handlers;
- a relational data table view for step handlers.

Scheduling, reporting and timeout enforcement are left to the harness
driving the engine.
"""
