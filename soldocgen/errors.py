"""Custom exception hierarchy for soldocgen."""


class DocgenError(Exception):
    """Base exception for documentation generation failures."""


class ConfigurationError(ValueError, DocgenError):
    """Invalid options, raised before any filesystem work happens."""


class ArtifactError(DocgenError):
    """Missing or malformed compiler artifacts."""


class DuplicateSignatureError(ArtifactError):
    """Two ABI members resolved to the same signature (strict mode only)."""


class BundleError(DocgenError):
    """Rendering or writing the documentation bundle failed."""


class CompileError(DocgenError):
    """The external compile command failed."""
