"""In-memory registry of parsed Gherkin documents.

Documents are produced by an external Gherkin parser and handed to the
engine in the Gherkin messages format, serialized as JSON or YAML text
or already decoded into mappings. The loader keeps them keyed by path
and validates them into document models on first load.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from yaml import safe_load
from yaml.error import MarkedYAMLError, YAMLError

from cuke_core.errors import DocumentNotFoundError, DocumentSchemaError
from cuke_core.schema import GherkinDocument

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

#: Registrable document content: serialized text, a decoded mapping,
#: or a validated document.
type DocumentSource = str | Mapping[str, Any] | GherkinDocument


class DocumentLoader:
    """Registry of Gherkin documents keyed by path."""

    def __init__(self) -> None:
        """Initialize an empty loader."""
        self._sources: dict[str, DocumentSource] = {}
        self._documents: dict[str, GherkinDocument] = {}

    def __contains__(self, path: object) -> bool:
        """Check whether a path is registered."""
        return path in self._sources

    def register(self, path: str, content: DocumentSource) -> None:
        """Register a document.

        Registering a path again replaces the previous document.

        Args:
            path: Path or identifier of the document.
            content: Serialized messages document (JSON or YAML), a
                decoded mapping, or a document model.
        """
        self._sources[path] = content
        self._documents.pop(path, None)

        logger.debug('Registered document %s', path)

    def register_all(self, items: 'Iterable[tuple[str, DocumentSource]]') -> None:
        """Register several documents.

        Args:
            items: Pairs of path and content.
        """
        for path, content in items:
            self.register(path, content)

    def register_file(self, path: str | Path) -> str:
        """Read a serialized document from disk and register it.

        Args:
            path: Path of a JSON or YAML file.

        Returns:
            The path the document was registered under.
        """
        filepath = Path(path)
        with filepath.open('rt', encoding='utf-8') as content:
            self.register(filepath.as_posix(), content.read())

        return filepath.as_posix()

    def exists(self, path: str) -> bool:
        """Check whether a path is registered."""
        return path in self

    def paths(self) -> list[str]:
        """List registered paths, in registration order."""
        return list(self._sources)

    def load(self, path: str) -> GherkinDocument:
        """Load a registered document.

        Args:
            path: Path or identifier of the document.

        Returns:
            The validated document. A document without a `uri` gets the
            path as its uri.

        Raises:
            DocumentNotFoundError: If the path is not registered.
            DocumentSchemaError: If the content is not a valid document.
        """
        if path in self._documents:
            return self._documents[path]

        if path not in self._sources:
            raise DocumentNotFoundError(path)

        document = self._validate(path, self._sources[path])
        if document.uri is None:
            document = document.model_copy(update={'uri': path})

        self._documents[path] = document

        return document

    def load_all(self) -> list[GherkinDocument]:
        """Load every registered document, in registration order."""
        return [self.load(path) for path in self._sources]

    @staticmethod
    def _validate(path: str, source: DocumentSource) -> GherkinDocument:
        if isinstance(source, GherkinDocument):
            return source

        data: Any = source
        if isinstance(source, str):
            try:
                data = safe_load(source)

            except MarkedYAMLError as base:
                raise DocumentSchemaError.from_yaml_error(base, uri=path) from base

            except YAMLError as base:
                raise DocumentSchemaError(f'Invalid document {path!r}') from base

        if data is None:
            return GherkinDocument()

        if isinstance(data, Mapping) and 'gherkinDocument' in data:
            data = data['gherkinDocument']

        try:
            return GherkinDocument.model_validate(data)

        except ValidationError as base:
            raise DocumentSchemaError.from_pydantic_error(
                base,
                data=data,
                uri=path,
            ) from base
