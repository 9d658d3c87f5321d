"""Pipeline orchestration for generation rounds."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .config import RecgenConfig, load_config
from .emission import EmissionController, PassReport
from .errors import CyclicReferenceError, RecgenError
from .logging import get_logger
from .models import GeneratedTypeModel, GenerationRequest, Variant
from .postproc.lint import SourceLinter
from .registry import TypeRegistry
from .rendering import RenderedSource, SourceRenderer
from .scanner import ManifestScanner, ScanResult
from .sinks import FileSystemSink, MemorySink, Sink
from .synthesis import build_model
from .synthesis.naming import merged_name_for
from .validators import AnnotationUsageValidator, InvalidAnnotationUsage, Validator, group_issues


@dataclass
class PlannedTarget:
    """One expanded request with its target name and build outcome."""

    request: GenerationRequest
    target: str
    model: Optional[GeneratedTypeModel] = None
    error: Optional[RecgenError] = None


@dataclass
class RoundPlan:
    """Everything decided before emission."""

    targets: List[PlannedTarget]
    registry: TypeRegistry
    diagnostics: List[InvalidAnnotationUsage] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)

    @property
    def models(self) -> List[GeneratedTypeModel]:
        return [item.model for item in self.targets if item.model is not None]


@dataclass
class RoundResult:
    """Outcome of one generation round."""

    report: PassReport
    models: List[GeneratedTypeModel]
    sources: List[RenderedSource]
    diagnostics: List[InvalidAnnotationUsage]
    cycles: List[List[str]]


class Orchestrator:
    """Coordinates validation, synthesis, rendering and emission."""

    def __init__(
        self,
        config: RecgenConfig | None = None,
        *,
        scanner: ManifestScanner | None = None,
        renderer: SourceRenderer | None = None,
        linter: SourceLinter | None = None,
        sink: Sink | None = None,
        controller: EmissionController | None = None,
        validators: Optional[Iterable[Validator]] = None,
    ) -> None:
        self.config = config
        self.scanner = scanner or ManifestScanner()
        self.renderer = renderer
        self.linter = linter or SourceLinter()
        self.sink = sink
        self.controller = controller or EmissionController()
        self.validators: List[Validator] = (
            list(validators) if validators is not None else [AnnotationUsageValidator()]
        )
        self.logger = get_logger("orchestrator")
        # Module holding each target emitted by this orchestrator.
        self._locations: Dict[str, str] = {}
        self._bundles_written = 0

    def run_manifest(
        self,
        path: str | Path,
        *,
        dry_run: bool = False,
        output_dir: Path | None = None,
        layout: str | None = None,
    ) -> RoundResult:
        """Scan a manifest and run one generation round over its requests."""
        manifest_path = Path(path).expanduser().resolve()
        self.logger.info("Starting generation for %s", manifest_path)
        if self.config is None:
            self.config = load_config(manifest_path.parent)
        if layout:
            self.config.render.layout = layout
        if output_dir is not None:
            self.config.output.directory = output_dir
        scan = self.scanner.scan(manifest_path)
        self.logger.debug("Scanner found %d type(s)", len(scan.descriptors))
        sink: Sink = MemorySink() if dry_run else self._resolve_sink()
        return self.run_round(scan.requests, sink=sink)

    def inspect_manifest(self, path: str | Path) -> RoundPlan:
        """Scan a manifest and build its models without rendering or writing."""
        manifest_path = Path(path).expanduser().resolve()
        if self.config is None:
            self.config = load_config(manifest_path.parent)
        scan = self.scanner.scan(manifest_path)
        return self.plan(scan.requests)

    def run_scan(
        self,
        scan: ScanResult,
        *,
        sink: Sink | None = None,
        layout: str | None = None,
    ) -> RoundResult:
        """Run a round over already scanned requests, in memory unless a sink is given."""
        if layout:
            self._config().render.layout = layout
        return self.run_round(scan.requests, sink=sink or MemorySink())

    def run_round(self, requests: Sequence[GenerationRequest], *, sink: Sink | None = None) -> RoundResult:
        """Run one round: plan every request, then emit each target once."""
        report = self.controller.begin_pass()
        plan = self.plan(requests)
        failed: Set[str] = set()
        for item in plan.targets:
            if item.error is None:
                continue
            if item.target in failed:
                self.controller.record_skipped(item.target)
                continue
            failed.add(item.target)
            self.controller.record_failed(item.target, item.error.reason, str(item.error))

        built = [item for item in plan.targets if item.model is not None]
        sources = self._emit(built, sink or self._resolve_sink())
        self.logger.info(
            "Round complete: %d emitted, %d skipped, %d failed",
            len(report.emitted),
            len(report.skipped),
            len(report.failed),
        )
        return RoundResult(
            report=report,
            models=plan.models,
            sources=sources,
            diagnostics=plan.diagnostics,
            cycles=plan.cycles,
        )

    def plan(self, requests: Sequence[GenerationRequest]) -> RoundPlan:
        """Validate, expand and build models without emitting anything."""
        config = self._config()
        accepted, diagnostics = self._validate(requests)
        expanded = self._expand(accepted)
        registry = TypeRegistry.from_requests(expanded, config.naming)
        self.logger.debug("Registry holds %d type(s)", len(registry))

        cycles = registry.find_cycles()
        blocked = self._apply_cycle_policy(cycles, config.cycles)

        targets = [PlannedTarget(request=request, target=self._target_name(request, registry)) for request in expanded]
        pending: List[PlannedTarget] = []
        for item in targets:
            sources = {item.request.source.qualified_name}
            sources.update(descriptor.qualified_name for descriptor in item.request.merge_with)
            cycle = next((group for group in cycles if blocked & sources & set(group)), None)
            if cycle is not None:
                item.error = CyclicReferenceError(cycle)
            else:
                pending.append(item)

        def _build(item: PlannedTarget) -> None:
            try:
                item.model = build_model(
                    item.request,
                    registry,
                    config.accessors,
                    config.render.builtin_interfaces,
                )
            except RecgenError as exc:
                item.error = exc

        if config.workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=config.workers) as executor:
                list(executor.map(_build, pending))
        else:
            for item in pending:
                _build(item)
        return RoundPlan(targets=targets, registry=registry, diagnostics=diagnostics, cycles=cycles)

    def _validate(
        self, requests: Sequence[GenerationRequest]
    ) -> tuple[List[GenerationRequest], List[InvalidAnnotationUsage]]:
        issues = []
        for validator in self.validators:
            issues.extend(validator.validate(requests))
        rejected = {id(issue.request) for issue in issues}
        diagnostics = group_issues(issues)
        for group in diagnostics:
            self.logger.warning("%s", group.message())
        return [request for request in requests if id(request) not in rejected], diagnostics

    @staticmethod
    def _expand(requests: Sequence[GenerationRequest]) -> List[GenerationRequest]:
        """Add one derived request per also-convert and merge-with member.

        A merge request also derives the single-source type of its primary.
        """
        expanded: List[GenerationRequest] = []
        for request in requests:
            expanded.append(request)
            related = list(request.also_convert) + list(request.merge_with)
            if request.variant is Variant.MERGE:
                related.insert(0, request.source)
            for descriptor in related:
                expanded.append(
                    GenerationRequest(
                        source=descriptor,
                        variant=Variant.for_kind(descriptor.kind),
                        derived=True,
                    )
                )
        return expanded

    def _apply_cycle_policy(self, cycles: List[List[str]], policy: str) -> Set[str]:
        if not cycles or policy == "allow":
            return set()
        for group in cycles:
            if policy == "error":
                self.logger.error("Cyclic reference between %s", ", ".join(group))
            else:
                self.logger.warning("Cyclic reference between %s", ", ".join(group))
        if policy == "error":
            return {name for group in cycles for name in group}
        return set()

    def _target_name(self, request: GenerationRequest, registry: TypeRegistry) -> str:
        if request.variant is Variant.MERGE:
            return merged_name_for(request.source.qualified_name, registry.naming)
        return registry.generated_name_of(request.source.qualified_name)

    def _emit(self, items: List[PlannedTarget], sink: Sink) -> List[RenderedSource]:
        renderer = self._resolve_renderer()
        written: List[RenderedSource] = []

        def _write(rendered: RenderedSource, target: str) -> None:
            text = self.linter.lint(rendered.text)
            sink.write(target, rendered.path, text)
            written.append(RenderedSource(rendered.module, rendered.path, rendered.targets, text))
            for name in rendered.targets:
                self._locations[name] = rendered.module

        if renderer.layout == "bundle":
            by_target: Dict[str, GeneratedTypeModel] = {}
            for item in items:
                by_target.setdefault(item.target, item.model)

            def _write_bundle(claimed: List[str]) -> None:
                # Later rounds write records_2, records_3 and so on beside the first bundle.
                module = renderer.bundle_module
                if self._bundles_written:
                    module = f"{module}_{self._bundles_written + 1}"
                rendered = renderer.render(
                    [by_target[target] for target in claimed],
                    module=module,
                    locations=self._locations,
                )[0]
                _write(rendered, ", ".join(claimed))
                self._bundles_written += 1

            self.controller.emit_group([item.target for item in items], _write_bundle)
            return written

        for item in items:
            model = item.model
            self.controller.emit(
                item.target,
                lambda model=model, target=item.target: _write(
                    renderer.render_one(model, locations=self._locations), target
                ),
            )
        return written

    def _config(self) -> RecgenConfig:
        if self.config is None:
            self.config = RecgenConfig(root=Path.cwd())
        return self.config

    def _resolve_renderer(self) -> SourceRenderer:
        if self.renderer is not None:
            return self.renderer
        render = self._config().render
        return SourceRenderer(render.templates_dir, layout=render.layout, bundle_module=render.bundle_module)

    def _resolve_sink(self) -> Sink:
        if self.sink is not None:
            return self.sink
        config = self._config()
        return FileSystemSink(config.output_directory, overwrite=config.output.overwrite)


__all__ = ["Orchestrator", "PlannedTarget", "RoundPlan", "RoundResult"]
