"""
sardine is a small static site generator for slow connections: markdown
documents rendered through placeholder templates, with an optional external
processor for the placeholders it cannot fill itself.
"""
from .actions import Copy, CreateDir, DeleteDir, FsAction, WriteFile, execute, plan
from .config import BuildSettings, InputBuildSettings
from .document import ContentDocument
from .errors import (
    ExecutionIoError, IncludeError, MetadataError, PlanningInvariantError, ProcessorConfigError,
    ProcessorProtocolError, SardineError, ScanIoError, TemplateParseError,
)
from .processor import EvaluationContext, RuleProcessor
from .rules import Contents, Css, Include, Listing, Meta, TableOfContents
from .site import Site
from .template import Placeholder, Template
