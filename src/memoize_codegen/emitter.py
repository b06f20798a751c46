"""
Source emission for wrapper models.

Lays out synthesized wrapper models as Python source: module header and
imports, class declaration, signatures and the body statements produced by the
synthesizer. Emitted modules use postponed annotations, so annotation text is
never evaluated when the module is imported.
"""

import ast
import linecache
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .constants import (
    ERROR_NAME_CLASH,
    ERROR_NOT_IMPORTABLE,
    ERROR_WRITE_FAILED,
    GENERATED_BY,
    RUNTIME_ALIAS,
    RUNTIME_MODULE,
)
from .exceptions import EmissionError
from .model import ParameterKind, ParameterModel, TypeRef, WrapperClassModel

logger = logging.getLogger(__name__)

INDENT = "    "


class SourceEmitter:
    """Renders wrapper models to source text, files and live classes."""

    def render_class(self, wrapper: WrapperClassModel) -> str:
        """Render the class definition of one wrapper.

        Args:
            wrapper: Wrapper model

        Returns:
            Class source, without imports
        """
        lines = [
            f"@{RUNTIME_ALIAS}.generated({wrapper.subject.expression})",
            f"class {wrapper.name}:",
            f'{INDENT}"""{wrapper.docstring}"""',
            "",
        ]

        constructor = wrapper.constructor
        lines.extend(
            _render_function(
                name="__init__",
                parameters=constructor.parameters,
                return_annotation="None",
                failures=constructor.declared_failures,
                body=constructor.body,
                is_async=False,
            )
        )

        for method in wrapper.methods:
            lines.append("")
            lines.extend(
                _render_function(
                    name=method.method.name,
                    parameters=method.method.parameters,
                    return_annotation=method.method.return_annotation,
                    failures=method.method.declared_failures,
                    body=method.body,
                    is_async=method.method.modifiers.is_async,
                )
            )

        return "\n".join(lines) + "\n"

    def render_module(self, wrappers: Sequence[WrapperClassModel], strict: bool = True) -> str:
        """Render a module holding one or more wrappers.

        Args:
            wrappers: Wrapper models targeting the same module
            strict: Require every referenced class to be importable

        Returns:
            Module source

        Raises:
            EmissionError: If wrappers target different modules, a referenced
                class is not importable (strict mode) or two references clash
        """
        if not wrappers:
            raise EmissionError("Nothing to emit: no wrappers given")

        target_modules = {wrapper.module for wrapper in wrappers}
        if len(target_modules) > 1:
            raise EmissionError(f"Wrappers target different modules: {', '.join(sorted(target_modules))}")

        imports, _ = self._resolve_references(wrappers, strict)
        target = wrappers[0].module

        lines = [
            f"# Generated by {GENERATED_BY}. Do not edit.",
            f'"""Memoizing wrappers for {", ".join(w.subject.path for w in wrappers)}."""',
            "",
            "from __future__ import annotations",
            "",
            f"from {RUNTIME_MODULE.rpartition('.')[0]} import {RUNTIME_MODULE.rpartition('.')[2]} as {RUNTIME_ALIAS}",
        ]
        for module, names in imports.items():
            lines.append(f"from {module} import {', '.join(names)}")
        lines.extend(["", f"__all__ = [{', '.join(repr(w.name) for w in wrappers)}]", ""])

        source = "\n".join(lines)
        for wrapper in wrappers:
            source += "\n\n" + self.render_class(wrapper)

        logger.debug("Rendered module %s with %d wrappers", target, len(wrappers))
        return source

    def bindings(self, wrappers: Sequence[WrapperClassModel]) -> dict[str, Any]:
        """Names that must be pre-bound to execute a non-strict module."""
        _, bindings = self._resolve_references(wrappers, strict=False)
        return bindings

    def write_module(self, wrappers: Sequence[WrapperClassModel], path: str | Path | None = None) -> Path:
        """Write a module file holding the wrappers.

        Args:
            wrappers: Wrapper models targeting the same module
            path: Destination file (default: next to the subject module)

        Returns:
            Path written

        Raises:
            EmissionError: If the module cannot be rendered or written
        """
        source = self.render_module(wrappers, strict=True)
        destination = Path(path) if path is not None else default_output_path(wrappers[0])

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(source, encoding="utf-8")
        except OSError as e:
            raise EmissionError(
                ERROR_WRITE_FAILED.format(path=destination, error=e), subject=wrappers[0].subject.path
            ) from e

        logger.info("Wrote %s", destination)
        return destination

    def materialize(self, wrapper: WrapperClassModel) -> type:
        """Compile and execute the emitted source in-process.

        Classes that are not importable (defined inside a function) are bound
        directly into the module namespace.

        Args:
            wrapper: Wrapper model

        Returns:
            The live wrapper class
        """
        source = self.render_module([wrapper], strict=False)
        filename = f"<{GENERATED_BY}:{wrapper.module}.{wrapper.name}>"
        # Keeps tracebacks through generated code readable
        linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)

        namespace: dict[str, Any] = {"__name__": wrapper.module, **self.bindings([wrapper])}
        exec(compile(source, filename, "exec"), namespace)
        logger.debug("Materialized %s", wrapper.name)
        return namespace[wrapper.name]

    def _resolve_references(
        self, wrappers: Sequence[WrapperClassModel], strict: bool
    ) -> tuple[dict[str, list[str]], dict[str, Any]]:
        """Group importable references by module and collect direct bindings."""
        imports: dict[str, list[str]] = {}
        bindings: dict[str, Any] = {}
        bound_paths: dict[str, str] = {}

        for wrapper in wrappers:
            for ref in wrapper.referenced_types:
                if ref.is_builtin:
                    continue

                name = ref.binding_name
                path = _binding_path(ref)
                previous = bound_paths.setdefault(name, path)
                if previous != path:
                    raise EmissionError(
                        ERROR_NAME_CLASH.format(subject=wrapper.subject.path, name=name, first=previous, second=path),
                        subject=wrapper.subject.path,
                    )

                if ref.importable:
                    names = imports.setdefault(ref.module, [])
                    if name not in names:
                        names.append(name)
                elif strict:
                    raise EmissionError(
                        ERROR_NOT_IMPORTABLE.format(subject=wrapper.subject.path, name=ref.path),
                        subject=wrapper.subject.path,
                    )
                else:
                    bindings[name] = ref.obj

        return imports, bindings


def default_output_path(wrapper: WrapperClassModel) -> Path:
    """File next to the subject module named after the wrapper module.

    Raises:
        EmissionError: If the subject module has no file on disk
    """
    module = sys.modules.get(wrapper.subject.module)
    module_file = getattr(module, "__file__", None)
    if not module_file:
        raise EmissionError(
            f"Cannot derive output path: module {wrapper.subject.module} has no file", subject=wrapper.subject.path
        )
    return Path(module_file).with_name(f"{wrapper.module.rpartition('.')[2]}.py")


def _binding_path(ref: TypeRef) -> str:
    if ref.importable:
        return f"{ref.module}.{ref.binding_name}"
    return ref.path


def _render_function(
    name: str,
    parameters: tuple[ParameterModel, ...],
    return_annotation: str | None,
    failures: tuple[TypeRef, ...],
    body: tuple[str, ...],
    is_async: bool,
) -> list[str]:
    lines = []
    if failures:
        lines.append(f"{INDENT}@{RUNTIME_ALIAS}.raises({', '.join(ref.expression for ref in failures)})")

    keyword = "async def" if is_async else "def"
    returns = f" -> {_annotation_source(return_annotation)}" if return_annotation is not None else ""
    lines.append(f"{INDENT}{keyword} {name}({render_parameters(parameters)}){returns}:")
    lines.extend(f"{INDENT * 2}{statement}" for statement in body)
    return lines


def render_parameters(parameters: tuple[ParameterModel, ...]) -> str:
    """Render a parameter list, ``self`` first, with ``/`` and ``*`` markers."""
    rendered = ["self"]
    has_positional_only = any(p.kind is ParameterKind.POSITIONAL_ONLY for p in parameters)
    slash_written = False
    star_written = False

    for parameter in parameters:
        if has_positional_only and not slash_written and parameter.kind is not ParameterKind.POSITIONAL_ONLY:
            rendered.append("/")
            slash_written = True

        if parameter.kind is ParameterKind.VAR_POSITIONAL:
            star_written = True
        elif parameter.kind is ParameterKind.KEYWORD_ONLY and not star_written:
            rendered.append("*")
            star_written = True

        rendered.append(_render_parameter(parameter))

    if has_positional_only and not slash_written:
        rendered.append("/")

    return ", ".join(rendered)


def _render_parameter(parameter: ParameterModel) -> str:
    prefix = ""
    if parameter.kind is ParameterKind.VAR_POSITIONAL:
        prefix = "*"
    elif parameter.kind is ParameterKind.VAR_KEYWORD:
        prefix = "**"

    text = f"{prefix}{parameter.name}"
    if parameter.annotation is not None:
        text += f": {_annotation_source(parameter.annotation)}"

    if parameter.default is not None:
        separator = " = " if parameter.annotation is not None else "="
        text += f"{separator}{parameter.default.source}"
    return text


def _annotation_source(annotation: str) -> str:
    """Annotation text if it parses as an expression, else a quoted string."""
    try:
        ast.parse(annotation, mode="eval")
    except SyntaxError:
        return repr(annotation)
    return annotation
