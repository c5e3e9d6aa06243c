"""Runtime settings resolved from the environment.

Settings are read once, typically by the harness that builds the
default registries, and never change during a run.
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from cuke_core.models import SettingsModel


class CukeSettings(SettingsModel):
    """Engine settings.

    Values are resolved from environment variables prefixed with `CUKE_`,
    for example `CUKE_TAGS='@smoke and not @slow'`.
    """

    model_config = SettingsConfigDict(
        env_prefix='CUKE_',
    )

    tags: str | None = Field(
        default=None,
        title='Tag expression',
        description=(
            'Default tag expression used to select scenarios and '
            'examples blocks. No filtering is applied when unset.'
        ),
    )

    strict: bool = Field(
        default=False,
        title='Strict step matching',
        description=(
            'Report a step text matched by several step definitions '
            'as an error instead of picking the first registered one.'
        ),
    )
