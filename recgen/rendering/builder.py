"""Renders generated type models into Python source with Jinja2 templates."""

from __future__ import annotations

import keyword
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from jinja2 import Environment, FileSystemLoader

from ..models import (
    AccessorCall,
    CollectionTransform,
    ContainerShape,
    Expr,
    FactoryKind,
    FieldRead,
    GeneratedTypeModel,
    MappingLookup,
    Param,
    ParameterizedType,
    SimpleType,
    TypeDefault,
    TypeRef,
    Var,
    Variant,
    Wrap,
)
from ..synthesis.naming import simple_name, snake_case
from ..synthesis.types import analyze_container

LAYOUTS = ("module", "bundle")
CONVERSION_CONSTRUCTOR = "from_source"
MERGE_CONSTRUCTOR = "from_sources"

_SCALAR_DEFAULTS = {
    "bool": "False",
    "boolean": "False",
    "int": "0",
    "integer": "0",
    "long": "0",
    "short": "0",
    "byte": "0",
    "float": "0.0",
    "double": "0.0",
    "str": '""',
    "string": '""',
    "bytes": 'b""',
}


@dataclass(frozen=True)
class RenderedSource:
    """One rendered Python module."""

    module: str
    path: str
    targets: Tuple[str, ...]
    text: str


def module_for(target_name: str) -> str:
    """Module holding ``target_name`` in the per-module layout."""
    namespace, _, simple = target_name.rpartition(".")
    module = snake_case(simple)
    return f"{namespace}.{module}" if namespace else module


def path_for(module: str) -> str:
    return module.replace(".", "/") + ".py"


class _ModuleScope:
    """Tracks the names bound in one generated module and the imports they need."""

    def __init__(
        self,
        module: str,
        local_targets: Iterable[str],
        locations: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.module = module
        self.locations = dict(locations or {})
        self._local: Dict[str, str] = {}
        self._bound: Dict[str, str] = {}
        self.runtime_imports: Dict[str, Set[str]] = {}
        self.typing_imports: Dict[str, Set[str]] = {}
        for target in local_targets:
            name = simple_name(target)
            self._local[target] = name
            self._bound[name] = target

    def name_for(self, qualified: str, *, generated: bool = False, runtime: bool = False) -> str:
        """Local name of ``qualified``, recording the import that binds it."""
        if qualified in self._local:
            return self._local[qualified]
        if "." not in qualified and not generated:
            return qualified
        module, name = self._origin(qualified, generated)
        local = self._bind(qualified, name, module)
        imports = self.runtime_imports if runtime else self.typing_imports
        imports.setdefault(module, set()).add(_import_clause(name, local))
        return local

    def method_import(self, qualified: str) -> Optional[str]:
        """Import statement a method body needs to use a generated type at runtime."""
        if qualified in self._local:
            return None
        local = self.name_for(qualified, generated=True)
        module, name = self._origin(qualified, True)
        return f"from {module} import {_import_clause(name, local)}"

    def _origin(self, qualified: str, generated: bool) -> Tuple[str, str]:
        namespace, _, name = qualified.rpartition(".")
        if generated:
            return self.locations.get(qualified) or module_for(qualified), name
        return namespace, name

    def _bind(self, qualified: str, name: str, module: str) -> str:
        bound = self._bound.get(name)
        if bound is None or bound == qualified:
            self._bound[name] = qualified
            return name
        alias = "".join(part[:1].upper() + part[1:] for part in module.split(".")) + name
        self._bound.setdefault(alias, qualified)
        return alias

    def import_lines(self, imports: Dict[str, Set[str]]) -> List[str]:
        return [f"from {module} import {', '.join(sorted(names))}" for module, names in sorted(imports.items())]


def _import_clause(name: str, local: str) -> str:
    return name if name == local else f"{name} as {local}"


def _hash_key(field_names: Sequence[str]) -> str:
    """Tuple expression hashed by a record; collection fields go through ``_frozen``."""
    items = [f"_frozen(self.{name})" for name in field_names]
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class SourceRenderer:
    """Turns models into Python modules declaring frozen dataclasses."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        layout: str = "module",
        bundle_module: str = "records",
    ) -> None:
        if layout not in LAYOUTS:
            raise ValueError(f"Unknown layout '{layout}'")
        self.layout = layout
        self.bundle_module = bundle_module
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def render(
        self,
        models: Sequence[GeneratedTypeModel],
        *,
        module: Optional[str] = None,
        locations: Optional[Mapping[str, str]] = None,
    ) -> List[RenderedSource]:
        """Render ``models`` according to the configured layout.

        ``module`` overrides the bundle module name. ``locations`` maps
        generated types rendered earlier to the module that holds them, for
        types that do not live at their per-module layout location.
        """
        if not models:
            return []
        if self.layout == "bundle":
            return [self._render_module(module or self.bundle_module, list(models), locations)]
        return [
            self._render_module(module_for(model.target_name), [model], locations) for model in models
        ]

    def render_one(
        self,
        model: GeneratedTypeModel,
        *,
        locations: Optional[Mapping[str, str]] = None,
    ) -> RenderedSource:
        module = self.bundle_module if self.layout == "bundle" else module_for(model.target_name)
        return self._render_module(module, [model], locations)

    def _render_module(
        self,
        module: str,
        models: List[GeneratedTypeModel],
        locations: Optional[Mapping[str, str]] = None,
    ) -> RenderedSource:
        scope = _ModuleScope(module, [model.target_name for model in models], locations)
        records = [self._record_context(model, scope) for model in models]
        uses_mapping_proxy = any(record["uses_mapping_proxy"] for record in records)
        template = self._env.get_template("bundle.py.j2" if self.layout == "bundle" else "module.py.j2")
        text = template.render(
            module=module,
            sources=sorted({model.source_name for model in models}),
            records=records,
            uses_mapping_proxy=uses_mapping_proxy,
            runtime_imports=scope.import_lines(scope.runtime_imports),
            typing_imports=scope.import_lines(scope.typing_imports),
        )
        return RenderedSource(
            module=module,
            path=path_for(module),
            targets=tuple(model.target_name for model in models),
            text=text,
        )

    def _record_context(self, model: GeneratedTypeModel, scope: _ModuleScope) -> Dict[str, object]:
        annotations = {field.name: self._annotation(field.type, field.declared_type, scope) for field in model.fields}
        state = {"mapping_proxy": False}

        def method(name: str, params: Sequence[Param], values: Sequence[Expr]) -> Dict[str, object]:
            imports: List[str] = []
            rendered_values = [self._expr(value, scope, imports, state) for value in values]
            return {
                "name": name,
                "classmethod": True,
                "params": ", ".join(f"{param.name}: {self._param_type(param, model, scope)}" for param in params),
                "imports": sorted(set(imports)),
                "assignments": list(zip([field.name for field in model.fields], rendered_values)),
            }

        constructor_name = MERGE_CONSTRUCTOR if model.variant is Variant.MERGE else CONVERSION_CONSTRUCTOR
        constructor = method(constructor_name, model.constructor_params, model.conversion_exprs)

        factories: List[Dict[str, object]] = []
        for factory in model.factory_methods:
            if factory.kind is FactoryKind.WITH_FIELD:
                param = factory.params[0]
                factories.append(
                    {
                        "name": factory.name,
                        "classmethod": False,
                        "params": f"{param.name}: {annotations[factory.field]}",
                        "imports": [],
                        "replace": (factory.field, self._expr(factory.values[0], scope, [], state)),
                    }
                )
                continue
            factories.append(method(factory.name, factory.params, factory.values))

        return {
            "name": scope.name_for(model.target_name),
            "source": model.source_name,
            "merge_sources": list(model.merge_sources),
            "bases": [self._plain_type(ref, scope, runtime=True) for ref in model.interfaces],
            "constants": [(constant.name, constant.value) for constant in model.constants],
            "fields": [(field.name, annotations[field.name]) for field in model.fields],
            "hash_key": _hash_key([field.name for field in model.fields]),
            "constructor": constructor,
            "factories": factories,
            "uses_mapping_proxy": state["mapping_proxy"],
        }

    def _param_type(
        self,
        param: Param,
        model: GeneratedTypeModel,
        scope: _ModuleScope,
    ) -> str:
        if isinstance(param.type, SimpleType) and param.type.name == model.target_name:
            return scope.name_for(model.target_name)
        return self._plain_type(param.type, scope)

    def _plain_type(self, ref: TypeRef, scope: _ModuleScope, *, runtime: bool = False) -> str:
        if isinstance(ref, SimpleType):
            return scope.name_for(ref.name, runtime=runtime)
        inner = ", ".join(self._plain_type(param, scope, runtime=runtime) for param in ref.params)
        return f"{scope.name_for(ref.name, runtime=runtime)}[{inner}]"

    def _annotation(self, resolved: TypeRef, declared: TypeRef, scope: _ModuleScope) -> str:
        """Render a field type; substituted containers become immutable collection types."""
        if isinstance(resolved, SimpleType):
            return scope.name_for(resolved.name, generated=resolved != declared)
        declared_params = resolved.params
        if isinstance(declared, ParameterizedType) and len(declared.params) == len(resolved.params):
            declared_params = declared.params
        rendered = [self._annotation(inner, outer, scope) for inner, outer in zip(resolved.params, declared_params)]
        if resolved != declared:
            info = analyze_container(resolved)
            if info is not None:
                if info.shape is ContainerShape.LIST:
                    return f"tuple[{rendered[0]}, ...]"
                if info.shape is ContainerShape.SET:
                    return f"frozenset[{rendered[0]}]"
                return f"Mapping[{rendered[0]}, {rendered[1]}]"
        return f"{scope.name_for(resolved.name)}[{', '.join(rendered)}]"

    def _expr(self, expr: Expr, scope: _ModuleScope, imports: List[str], state: Dict[str, bool]) -> str:
        if isinstance(expr, Var):
            return expr.name
        if isinstance(expr, AccessorCall):
            target = self._expr(expr.target, scope, imports, state)
            if expr.attribute:
                if keyword.iskeyword(expr.accessor):
                    return f'getattr({target}, "{expr.accessor}")'
                return f"{target}.{expr.accessor}"
            return f"{target}.{expr.accessor}()"
        if isinstance(expr, FieldRead):
            return f"{self._expr(expr.target, scope, imports, state)}.{expr.field}"
        if isinstance(expr, Wrap):
            line = scope.method_import(expr.generated_type)
            if line:
                imports.append(line)
            name = scope.name_for(expr.generated_type, generated=True)
            return f"{name}.{CONVERSION_CONSTRUCTOR}({self._expr(expr.value, scope, imports, state)})"
        if isinstance(expr, CollectionTransform):
            source = self._expr(expr.source, scope, imports, state)
            if expr.shape is ContainerShape.MAP:
                state["mapping_proxy"] = True
                key = self._expr(expr.key, scope, imports, state)
                value = self._expr(expr.value, scope, imports, state)
                return (
                    f"MappingProxyType({{{key}: {value} "
                    f"for {expr.key_var}, {expr.value_var} in ({source} or {{}}).items()}})"
                )
            element = self._expr(expr.element, scope, imports, state)
            factory = "tuple" if expr.shape is ContainerShape.LIST else "frozenset"
            return f"{factory}({element} for {expr.item_var} in ({source} or ()))"
        if isinstance(expr, MappingLookup):
            mapping = self._expr(expr.mapping, scope, imports, state)
            default = self._expr(expr.default, scope, imports, state)
            key = f"cls.{expr.key_constant}"
            return f"({mapping}[{key}] if {key} in {mapping} else {default})"
        if isinstance(expr, TypeDefault):
            return self._default_for(expr.type, state)
        raise TypeError(f"Unsupported expression {expr!r}")

    @staticmethod
    def _default_for(ref: TypeRef, state: Dict[str, bool]) -> str:
        if isinstance(ref, SimpleType):
            return _SCALAR_DEFAULTS.get(simple_name(ref.name).lower(), "None")
        info = analyze_container(ref)
        if info is None:
            return "None"
        if info.shape is ContainerShape.LIST:
            return "()"
        if info.shape is ContainerShape.SET:
            return "frozenset()"
        state["mapping_proxy"] = True
        return "MappingProxyType({})"

    def _create_env(self, templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = Path(__file__).with_name("templates")
        if str(default_dir) not in directories:
            directories.append(str(default_dir))
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)


__all__ = ["LAYOUTS", "RenderedSource", "SourceRenderer", "module_for", "path_for"]
