"""React checks (RCT-01 through RCT-08).

Only run on files that contain JSX or import React, so `use*` helpers of
other frameworks are left alone.
"""

import re

from tsreview.analyzer import HOOK_NAME_RE, PASCAL_CASE_RE, FunctionInfo, SourceUnit
from tsreview.config import Config
from tsreview.report import Finding

EFFECT_HOOKS = {"useEffect", "useLayoutEffect", "useInsertionEffect"}
INDEX_NAMES = {"index", "idx"}
HANDLER_PROP_RE = re.compile(r"^on[A-Z]")
HANDLER_NAME_RE = re.compile(r"^(?:handle|on)[A-Z]")
SETTER_NAME_RE = re.compile(r"^set[A-Z]")
TEMPLATE_KEY_RE = re.compile(r"^`\$\{\s*([\w$]+)\s*\}`$")


def uses_react(unit: SourceUnit) -> bool:
    return unit.is_jsx or any(
        imp.module == "react" or imp.module.startswith("react/") for imp in unit.imports
    )


def _is_component_or_hook(f: FunctionInfo) -> bool:
    if f.name:
        return bool(PASCAL_CASE_RE.match(f.name) or HOOK_NAME_RE.match(f.name))
    return f.default_export and f.has_jsx


def _key_index_name(value, index_names: set[str]) -> str | None:
    """Name of the index variable a `key` value is built from, if any."""
    values = [t.value for t in value]
    if len(values) == 1:
        if value[0].kind == "name" and values[0] in index_names:
            return values[0]
        m = TEMPLATE_KEY_RE.match(values[0]) if value[0].kind == "template" else None
        if m and m.group(1) in index_names:
            return m.group(1)
    elif len(values) == 4 and values[0] == "String" and values[1] == "(" and values[2] in index_names:
        return values[2]
    elif values[1:] == [".", "toString", "(", ")"] and values[0] in index_names:
        return values[0]
    return None


def _handler_name(value) -> str | None:
    """Bare `name` or `this.name` / `props.name` passed to an event prop."""
    values = [t.value for t in value]
    if len(values) == 1 and value[0].kind == "name":
        return values[0]
    if len(values) == 3 and values[1] == "." and value[2].kind == "name":
        return values[2]
    return None


def check_react(unit: SourceUnit, config: Config) -> list[Finding]:
    """Check hook usage, component naming and JSX props."""
    if not uses_react(unit):
        return []
    findings = []
    rel = unit.rel

    # RCT-01: rules of hooks
    for hook in unit.hook_calls:
        f = unit.enclosing_function(hook.index)
        problem = None
        if f is None:
            problem = "at module scope"
        elif f.callee == "renderHook" or _is_component_or_hook(f):
            if unit.control_depth[hook.index] > unit.control_depth[f.body_span[0]]:
                problem = "inside a condition or loop"
        elif f.callee:
            problem = f"inside a callback passed to `{f.callee}`"
        else:
            problem = f"inside `{f.name or 'an anonymous function'}`, which is neither a component nor a hook"
        if problem:
            findings.append(Finding(
                rule_id="RCT-01", severity="error",
                title="Hook called conditionally or outside a component",
                message=f"`{hook.name}` is called {problem}",
                file=rel, line=hook.line,
                guide_says="Call hooks only at the top level of components and custom hooks.",
            ))

    # RCT-02: JSX-returning exports in PascalCase
    for f in unit.functions:
        if (f.top_level and f.exported and f.has_jsx and f.name
                and not PASCAL_CASE_RE.match(f.name) and not HOOK_NAME_RE.match(f.name)):
            findings.append(Finding(
                rule_id="RCT-02", severity="warning",
                title="Component not in PascalCase",
                message=f"`{f.name}` returns JSX; name it `{f.name[:1].upper()}{f.name[1:]}`",
                file=rel, line=f.line,
                guide_says="Components are PascalCase so JSX treats them as components.",
            ))

    index_names = set(INDEX_NAMES)
    for f in unit.functions:
        if f.callee == "map" and len(f.params) >= 2 and not f.params[1].destructured:
            index_names.add(f.params[1].name)

    for attr in unit.jsx_attributes:
        # RCT-03: inline style objects
        if attr.name == "style" and attr.value and attr.value[0].value == "{":
            findings.append(Finding(
                rule_id="RCT-03", severity="note",
                title="Inline style object",
                message="Move the style object to a constant, a CSS module or the styling system",
                file=rel, line=attr.line,
                guide_says="Avoid inline style objects; they are recreated on every render.",
            ))

        # RCT-04: index keys
        elif attr.name == "key" and attr.value:
            name = _key_index_name(attr.value, index_names)
            if name:
                findings.append(Finding(
                    rule_id="RCT-04", severity="warning",
                    title="Array index used as key",
                    message=f"`key` is built from the index `{name}`; use a stable id from the item",
                    file=rel, line=attr.line,
                    guide_says="Keys identify items across renders; never use the array index.",
                ))

        # RCT-05: handler naming
        elif HANDLER_PROP_RE.match(attr.name) and attr.value:
            handler = _handler_name(attr.value)
            if handler and not (HANDLER_NAME_RE.match(handler) or SETTER_NAME_RE.match(handler)
                                or handler in ("undefined", "null")):
                findings.append(Finding(
                    rule_id="RCT-05", severity="note",
                    title="Event handler not named handleX",
                    message=f"`{attr.name}={{{handler}}}`; name the handler "
                            f"`handle{attr.name[2:]}`",
                    file=rel, line=attr.line,
                    guide_says="Handlers are named handleX and passed to onX props.",
                ))

    # RCT-06: effects without dependency arrays
    for hook in unit.hook_calls:
        if hook.name in EFFECT_HOOKS and hook.arg_count < 2:
            findings.append(Finding(
                rule_id="RCT-06", severity="warning",
                title="Effect without dependency array",
                message=f"`{hook.name}` runs after every render; pass a dependency array",
                file=rel, line=hook.line,
                guide_says="Effects always declare their dependencies.",
            ))

    # RCT-07: oversized props
    for props in unit.props_types:
        if props.member_count > config.max_props:
            findings.append(Finding(
                rule_id="RCT-07", severity="warning",
                title="Too many props",
                message=f"`{props.name}` has {props.member_count} members (limit {config.max_props}); "
                        f"split the component or group related props",
                file=rel, line=props.line,
                guide_says="Components with many props do too much; compose smaller ones.",
            ))

    # RCT-08: one component per file
    components = unit.components
    if len(components) > 1:
        names = ", ".join(f"`{c.name or 'default'}`" for c in components)
        findings.append(Finding(
            rule_id="RCT-08", severity="note",
            title="Multiple components in one file",
            message=f"{len(components)} components ({names}); move each into its own file",
            file=rel, line=components[1].line,
            guide_says="One component per file.",
        ))

    return findings
