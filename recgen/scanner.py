"""Reads type manifests into descriptors and generation requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ValidationError
import yaml

from .errors import ManifestError
from .logging import get_logger
from .models import Accessor, GenerationRequest, SimpleType, TypeDescriptor, TypeKind, Variant
from .synthesis.types import parse_type

_BOOLEAN_TYPES = {"bool", "boolean"}


class AccessorEntry(BaseModel):
    name: str
    type: str
    boolean: Optional[bool] = None
    attribute: Optional[bool] = None


class TypeEntry(BaseModel):
    name: str
    kind: TypeKind = TypeKind.MUTABLE_HOLDER
    accessors: List[AccessorEntry] = []


class RequestEntry(BaseModel):
    source: str
    variant: Variant = Variant.STANDARD
    also_convert: List[str] = []
    merge_with: List[str] = []
    interfaces: List[str] = []


class ManifestDocument(BaseModel):
    types: List[TypeEntry] = []
    requests: List[RequestEntry] = []


@dataclass
class ScanResult:
    """Descriptors and requests discovered in one manifest."""

    descriptors: List[TypeDescriptor] = field(default_factory=list)
    requests: List[GenerationRequest] = field(default_factory=list)

    def descriptor(self, qualified_name: str) -> Optional[TypeDescriptor]:
        for descriptor in self.descriptors:
            if descriptor.qualified_name == qualified_name:
                return descriptor
        return None


class ManifestScanner:
    """Turns a YAML or JSON manifest into the values the synthesis core consumes.

    Accessors are called as methods on holders and read as attributes on
    aggregates unless the manifest says otherwise. Names listed in
    ``also_convert`` or ``merge_with`` that the manifest does not describe are
    dropped.
    """

    def __init__(self) -> None:
        self.logger = get_logger("scanner")

    def scan(self, path: Path) -> ScanResult:
        manifest_path = Path(path).expanduser()
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {exc}") from exc
        try:
            data = yaml.safe_load(text) if text.strip() else {}
        except yaml.YAMLError as exc:
            raise ManifestError(f"Failed to parse {manifest_path.name}: {exc}") from exc
        self.logger.debug("Loaded manifest %s", manifest_path)
        return self.scan_data(data or {})

    def scan_data(self, data: Mapping[str, Any]) -> ScanResult:
        if not isinstance(data, Mapping):
            raise ManifestError("Manifest must contain a mapping at the root")
        try:
            document = ManifestDocument.model_validate(dict(data))
        except ValidationError as exc:
            raise ManifestError(f"Invalid manifest: {exc}") from exc
        return self.scan_document(document)

    def scan_document(self, document: ManifestDocument) -> ScanResult:
        descriptors: Dict[str, TypeDescriptor] = {}
        for entry in document.types:
            if entry.name in descriptors:
                raise ManifestError(f"Type '{entry.name}' is declared more than once")
            descriptors[entry.name] = self._descriptor(entry)

        requests: List[GenerationRequest] = []
        for entry in document.requests:
            source = descriptors.get(entry.source)
            if source is None:
                raise ManifestError(f"Request source '{entry.source}' is not declared under types")
            requests.append(
                GenerationRequest(
                    source=source,
                    variant=entry.variant,
                    also_convert=self._lookup(entry.also_convert, descriptors, entry.source, "also_convert"),
                    merge_with=self._lookup(entry.merge_with, descriptors, entry.source, "merge_with"),
                    interfaces=tuple(parse_type(name) for name in entry.interfaces),
                )
            )
        self.logger.debug("Scanned %d type(s) and %d request(s)", len(descriptors), len(requests))
        return ScanResult(descriptors=list(descriptors.values()), requests=requests)

    def _descriptor(self, entry: TypeEntry) -> TypeDescriptor:
        accessors: List[Accessor] = []
        for item in entry.accessors:
            declared = parse_type(item.type)
            boolean = item.boolean
            if boolean is None:
                boolean = isinstance(declared, SimpleType) and declared.name.lower() in _BOOLEAN_TYPES
            attribute = item.attribute
            if attribute is None:
                attribute = entry.kind is TypeKind.IMMUTABLE_AGGREGATE
            accessors.append(
                Accessor(name=item.name, declared_type=declared, boolean_style=boolean, attribute=attribute)
            )
        return TypeDescriptor(qualified_name=entry.name, kind=entry.kind, accessors=tuple(accessors))

    def _lookup(
        self,
        names: List[str],
        descriptors: Mapping[str, TypeDescriptor],
        owner: str,
        attribute: str,
    ) -> Tuple[TypeDescriptor, ...]:
        found: List[TypeDescriptor] = []
        for name in names:
            descriptor = descriptors.get(name)
            if descriptor is None:
                self.logger.debug("Dropping unknown %s entry '%s' on %s", attribute, name, owner)
                continue
            if descriptor not in found:
                found.append(descriptor)
        return tuple(found)


__all__ = [
    "AccessorEntry",
    "ManifestDocument",
    "ManifestScanner",
    "RequestEntry",
    "ScanResult",
    "TypeEntry",
]
