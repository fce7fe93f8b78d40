"""
Exceptions raised while scanning, rendering, and generating a site.
"""
from __future__ import annotations

import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from .actions import FsAction


class SardineError(Exception):
    """
    Base class for all errors raised by sardine.
    """


class FrontMatterError(SardineError):
    """
    Malformed front matter. Only ever reported as a notice.
    """


class MetadataError(SardineError):
    """
    A metadata value, such as a date, could not be understood.
    """


class TemplateParseError(SardineError):
    """
    A template contains unbalanced or unrecognized markers. Every document
    using the template is affected.
    """
    def __init__(self,
                 path: Path | None,
                 position: int,
                 message: str,
                 documents: Sequence[Path] = ()):
        self.path = path
        self.position = position
        self.message = message
        self.documents = list(documents)
        super().__init__(str(self))

    def with_documents(self, documents: Sequence[Path]):
        """
        Return a copy of this error naming the affected @documents.
        """
        return TemplateParseError(self.path, self.position, self.message, documents)

    def __str__(self):
        label = self.path or '<default template>'
        text = f'Failed to parse template {label} at offset {self.position}: {self.message}'
        if self.documents:
            text += ' (used by ' + ', '.join(str(d) for d in self.documents) + ')'
        return text


class ScanIoError(SardineError):
    """
    The source tree could not be read.
    """
    def __init__(self, path: Path, operation: str, cause: OSError | None = None):
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(str(self))

    def __str__(self):
        text = f'Failed to {self.operation} {self.path}'
        if self.cause:
            text += f': {self.cause.strerror or self.cause}'
        return text


class IncludeError(SardineError):
    """
    A file named by an INCLUDE placeholder could not be read, or lies outside
    of the source root.
    """
    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(str(self))

    def __str__(self):
        return f'Cannot include {self.path}: {self.message}'


class ActionError(SardineError):
    """
    Base class for failures while applying a filesystem action.
    """
    def __init__(self, action: FsAction, index: int, message: str):
        self.action = action
        self.index = index
        self.message = message
        super().__init__(str(self))

    def __str__(self):
        return f'Action #{self.index} ({self.action}) failed: {self.message}'


class PlanningInvariantError(ActionError):
    """
    A path exists as the wrong type, or an action would touch a path outside
    of the configured roots.
    """


class ExecutionIoError(ActionError):
    """
    The filesystem refused an action.
    """


class ProcessorConfigError(SardineError):
    """
    A delegated rule is in use but no delegate processor was configured.
    """


class ProcessorProtocolError(SardineError):
    """
    The delegate processor is absent, crashed, or answered with something other
    than a valid response.
    """
