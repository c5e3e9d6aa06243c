"""Tests configurations and fixtures."""

import os
from types import SimpleNamespace
from typing import TYPE_CHECKING

import pytest

from cuke_core import dsl
from cuke_core.engine import HookRegistry, StepRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture
def clean_env(mocker: 'MockerFixture') -> None:
    """Remove engine settings from the environment.

    Settings are resolved from `CUKE_*` variables, so a developer
    environment could otherwise change registry defaults under test.
    """
    mocker.patch.dict(os.environ, {
        key: value
        for key, value in os.environ.items()
        if not key.startswith('CUKE_')
    }, clear=True)


@pytest.fixture
def steps() -> StepRegistry:
    """Provide an empty first-match step registry."""
    return StepRegistry()


@pytest.fixture
def strict_steps() -> StepRegistry:
    """Provide an empty step registry reporting ambiguous matches."""
    return StepRegistry(strict=True)


@pytest.fixture
def hooks() -> HookRegistry:
    """Provide an empty hook registry."""
    return HookRegistry()


@pytest.fixture
def world() -> SimpleNamespace:
    """Provide a blank scenario context.

    Handlers receive the context as their first argument and record
    their effects on it, mirroring how support code uses the world.
    """
    return SimpleNamespace(calls=[])


@pytest.fixture
def default_registries(clean_env: None) -> 'Iterator[None]':
    """Isolate the module-level registries used by the DSL functions.

    Registries are dropped before and after the test so that steps
    and hooks registered by one test never leak into another.
    """
    dsl.reset()
    yield
    dsl.reset()
