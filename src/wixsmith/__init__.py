"""Primary public API for wixsmith."""

from __future__ import annotations

from wixsmith.core.config import BuildConfig, load_build_config
from wixsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from wixsmith.core.escaping import PreprocessorEscapingWriter, escape_preprocessor
from wixsmith.core.exceptions import (
    BuildStateError,
    ConfigError,
    MarkupError,
    ResourceMaterializationError,
    WixBuildError,
)
from wixsmith.core.fragments import (
    BuildResult,
    BuildState,
    ElementProducer,
    ElementSpec,
    FragmentOrigin,
    FragmentProducer,
    OutputTarget,
    WixFragmentBuilder,
    create_wix_source,
)
from wixsmith.core.markup import MarkupSink, XmlStreamWriter, create_xml
from wixsmith.core.pipeline import WixPipeline, WixSource
from wixsmith.core.resources import OverridableResource, ResourceSet, ResourceSource
from wixsmith.core.toolset import DottedVersion
from wixsmith.core.variables import WixVariables
from wixsmith.version import get_version


__version__ = get_version()

__all__ = [
    "BuildConfig",
    "BuildResult",
    "BuildState",
    "BuildStateError",
    "ConfigError",
    "DiagnosticEmitter",
    "DottedVersion",
    "ElementProducer",
    "ElementSpec",
    "FragmentOrigin",
    "FragmentProducer",
    "LoggingEmitter",
    "MarkupError",
    "MarkupSink",
    "NullEmitter",
    "OutputTarget",
    "OverridableResource",
    "PreprocessorEscapingWriter",
    "ResourceMaterializationError",
    "ResourceSet",
    "ResourceSource",
    "WixBuildError",
    "WixFragmentBuilder",
    "WixPipeline",
    "WixSource",
    "WixVariables",
    "XmlStreamWriter",
    "__version__",
    "create_wix_source",
    "create_xml",
    "escape_preprocessor",
    "get_version",
    "load_build_config",
]
