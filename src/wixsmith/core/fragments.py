"""WiX fragment assembly.

:class:`WixFragmentBuilder` writes a ``<Wix>`` document holding one
``<Fragment>`` per registered producer, unless an override file for the output
name exists in the resource directory, in which case that file is used as-is.
Producers write through :class:`PreprocessorEscapingWriter`, so literal ``$``
in text and attribute values survives the WiX preprocessor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from .diagnostics import DiagnosticEmitter, NullEmitter
from .escaping import PreprocessorEscapingWriter
from .exceptions import BuildStateError
from .markup import MarkupConsumer, MarkupSink, create_xml
from .pipeline import WixPipeline
from .resources import OverridableResource, ResourceSet, ResourceSource, SaveableResource
from .toolset import DottedVersion, log_wix_features
from .variables import WixVariables


logger = logging.getLogger(__name__)

ROOT_ELEMENT = "Wix"
FRAGMENT_ELEMENT = "Fragment"
WIX_NAMESPACE = "http://schemas.microsoft.com/wix/2006/wi"
UTIL_PREFIX = "util"
UTIL_NAMESPACE = "http://schemas.microsoft.com/wix/UtilExtension"


@runtime_checkable
class FragmentProducer(Protocol):
    """Callable emitting zero or more complete elements into a sink."""

    def __call__(self, sink: MarkupSink) -> None: ...


@dataclass(slots=True)
class ElementSpec:
    """Declarative description of an element subtree."""

    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    text: str | None = None
    children: Sequence[ElementSpec] = ()


class ElementProducer:
    """Producer writing a fixed list of element trees."""

    def __init__(self, elements: Iterable[ElementSpec]) -> None:
        self.elements = list(elements)

    def __call__(self, sink: MarkupSink) -> None:
        for element in self.elements:
            _write_element(sink, element)

    def __repr__(self) -> str:
        names = ", ".join(element.name for element in self.elements)
        return f"ElementProducer([{names}])"


def _write_element(sink: MarkupSink, element: ElementSpec) -> None:
    if element.text is None and not element.children:
        sink.write_empty_element(element.name)
        for key, value in element.attributes.items():
            sink.write_attribute(key, value)
        return
    sink.write_start_element(element.name)
    for key, value in element.attributes.items():
        sink.write_attribute(key, value)
    if element.text is not None:
        sink.write_characters(element.text)
    for child in element.children:
        _write_element(sink, child)
    sink.write_end_element()


@dataclass(frozen=True, slots=True)
class OutputTarget:
    """Directory and file name receiving the generated fragment."""

    directory: Path
    file_name: str

    def __post_init__(self) -> None:
        if not self.file_name or Path(self.file_name).name != self.file_name:
            raise ValueError(f"Output file name must be a bare file name: {self.file_name!r}")
        object.__setattr__(self, "directory", Path(self.directory))

    @property
    def path(self) -> Path:
        return self.directory / self.file_name


class BuildState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    BUILT = "built"


class FragmentOrigin(str, Enum):
    """Where the persisted fragment came from."""

    OVERRIDE = "override"
    GENERATED = "generated"


@dataclass(slots=True)
class BuildResult:
    fragment_path: Path
    origin: FragmentOrigin
    resources: list[Path] = field(default_factory=list)

    @property
    def overridden(self) -> bool:
        return self.origin is FragmentOrigin.OVERRIDE


def create_wix_source(path: Path, consumer: MarkupConsumer) -> Path:
    """Write a ``<Wix>`` document whose content is supplied by ``consumer``.

    The consumer receives an escaping view of the underlying writer.
    """

    def _document(xml: MarkupSink) -> None:
        xml.write_start_element(ROOT_ELEMENT)
        xml.write_default_namespace(WIX_NAMESPACE)
        xml.write_namespace(UTIL_PREFIX, UTIL_NAMESPACE)

        consumer(PreprocessorEscapingWriter(xml))

        xml.write_end_element()  # <Wix>

    return create_xml(path, _document)


class WixFragmentBuilder:
    """Create a WiX fragment file plus the resources it depends on.

    Usage follows a single pass per configuration::

        builder = WixFragmentBuilder()
        builder.add_producer(my_producer)
        builder.configure(OutputTarget(output_dir, "ui.wxs"))
        builder.set_variable("ProductName", "Demo")
        result = builder.build()
        builder.configure_pipeline(pipeline)

    Subclasses may override :meth:`fragment_producers` instead of registering
    producers explicitly.
    """

    ROOT_ELEMENT = ROOT_ELEMENT
    FRAGMENT_ELEMENT = FRAGMENT_ELEMENT
    WIX_NAMESPACE = WIX_NAMESPACE
    UTIL_PREFIX = UTIL_PREFIX
    UTIL_NAMESPACE = UTIL_NAMESPACE

    def __init__(
        self,
        *,
        producers: Iterable[FragmentProducer] = (),
        wix_version: DottedVersion | str | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._producers: list[FragmentProducer] = list(producers)
        self.wix_version = wix_version
        self.emitter: DiagnosticEmitter = emitter or NullEmitter()
        self._state = BuildState.UNCONFIGURED
        self._target: OutputTarget | None = None
        self._resource_dir: Path | None = None
        self._variables = WixVariables()
        self._additional_resources: ResourceSet | None = None
        self._fragment_resource: OverridableResource | None = None

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def wix_version(self) -> DottedVersion | None:
        return self._wix_version

    @wix_version.setter
    def wix_version(self, value: DottedVersion | str | None) -> None:
        self._wix_version = DottedVersion.parse(value) if isinstance(value, str) else value

    @property
    def target(self) -> OutputTarget | None:
        return self._target

    @property
    def additional_resources(self) -> ResourceSet | None:
        return self._additional_resources

    def add_producer(self, producer: FragmentProducer) -> None:
        if not callable(producer):
            raise TypeError(f"Fragment producers must be callable, got {type(producer).__name__}.")
        self._producers.append(producer)

    def fragment_producers(self) -> Sequence[FragmentProducer]:
        """Return the producers in document order."""
        return tuple(self._producers)

    def configure(self, target: OutputTarget, *, resource_dir: Path | str | None = None) -> None:
        """Reset per-build state and point the builder at ``target``."""
        self._variables = WixVariables()
        self._additional_resources = None
        self._target = OutputTarget(Path(target.directory).resolve(), target.file_name)
        self._resource_dir = Path(resource_dir) if resource_dir is not None else None
        self._fragment_resource = (
            OverridableResource(resource_dir=self._resource_dir, category="fragment")
            .set_public_name(target.file_name)
            .set_source_order(ResourceSource.RESOURCE_DIR)
        )
        self._state = BuildState.CONFIGURED

    def define_variable(self, name: str) -> None:
        self._variables.define(name)

    def set_variable(self, name: str, value: str) -> None:
        self._variables.set(name, value)

    def variable_values(self) -> Mapping[str, str] | None:
        """Return the variable snapshot, ``None`` when no variable was set."""
        return self._variables.values()

    def add_resource(self, resource: SaveableResource, save_as_name: str) -> None:
        if self._additional_resources is None:
            self._additional_resources = ResourceSet()
        self._additional_resources.add(resource, save_as_name)

    def log_wix_features(self) -> bool:
        return log_wix_features(self._wix_version)

    def configure_pipeline(self, pipeline: WixPipeline) -> None:
        """Hand the fragment path and the variable snapshot to ``pipeline``."""
        pipeline.add_source(self._require_target().path, self.variable_values())

    def resolve_fragment_origin(self, fragment_path: Path) -> FragmentOrigin:
        """Save the override for ``fragment_path`` if one exists and report the origin."""
        resource = self._fragment_resource
        if resource is not None and resource.save_to_file(fragment_path) is not None:
            return FragmentOrigin.OVERRIDE
        return FragmentOrigin.GENERATED

    def build(self) -> BuildResult:
        """Persist the fragment and stage the additional resources."""
        target = self._require_target()
        fragment_path = target.path

        origin = self.resolve_fragment_origin(fragment_path)
        if origin is FragmentOrigin.OVERRIDE:
            logger.debug("Fragment %s supplied by the resource directory", fragment_path)
            self.emitter.event("fragment_overridden", {"path": str(fragment_path)})
        else:
            producers = self.fragment_producers()
            create_wix_source(fragment_path, lambda xml: self._write_fragments(xml, producers))
            self.emitter.event(
                "fragment_generated",
                {"path": str(fragment_path), "fragments": len(producers)},
            )

        written: list[Path] = []
        if self._additional_resources is not None:
            written = self._additional_resources.materialize_all(target.directory)
            self.emitter.event("resources_staged", {"paths": [str(path) for path in written]})

        self._state = BuildState.BUILT
        return BuildResult(fragment_path=fragment_path, origin=origin, resources=written)

    def _write_fragments(self, xml: MarkupSink, producers: Sequence[FragmentProducer]) -> None:
        for producer in producers:
            xml.write_start_element(self.FRAGMENT_ELEMENT)
            producer(xml)
            xml.write_end_element()  # <Fragment>

    def _require_target(self) -> OutputTarget:
        if self._state is BuildState.UNCONFIGURED or self._target is None:
            raise BuildStateError("The fragment builder must be configured before building.")
        return self._target


__all__ = [
    "FRAGMENT_ELEMENT",
    "ROOT_ELEMENT",
    "UTIL_NAMESPACE",
    "UTIL_PREFIX",
    "WIX_NAMESPACE",
    "BuildResult",
    "BuildState",
    "ElementProducer",
    "ElementSpec",
    "FragmentOrigin",
    "FragmentProducer",
    "OutputTarget",
    "WixFragmentBuilder",
    "create_wix_source",
]
