"""Exception classes for querydocs."""


class QueryDocsError(Exception):
    """Base exception for all querydocs errors."""

    pass


class ConfigError(QueryDocsError):
    """Raised when settings or run options are invalid."""

    pass


class ResourceNotFoundError(QueryDocsError):
    """Raised when a model, document or styles file cannot be read."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'File not found: {path}')


class StylesError(QueryDocsError):
    """Raised when a styles file is not a valid JSON object."""

    pass


class CompilationError(QueryDocsError):
    """Raised when a model document fails to compile."""

    pass


class ObjectNotFoundError(CompilationError):
    """Raised when a named explore, query or SQL block does not exist in a model."""

    pass


class QueryExecutionError(QueryDocsError):
    """Raised when the database rejects a compiled query."""

    pass


class RenderError(QueryDocsError):
    """Raised when a result cannot be rendered."""

    pass
