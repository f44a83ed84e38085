from typing import Any, List

from .errors import ConfigurationError
from .schema import Schema, ValueType
from .views import ValidatedConfig


MASK = "****"
UNSET = "<unset>"


def format_failures(error: ConfigurationError) -> str:
    lines = [f"Configuration errors ({len(error.failures)}):"]
    lines.extend(f"  - {failure}" for failure in error.failures)
    return "\n".join(lines)


def _render(value: Any) -> str:
    if value is None:
        return UNSET
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def describe(config: ValidatedConfig, view: str = "full") -> str:
    """Startup summary of one view, one key per line, secrets masked."""
    scoped = getattr(config, view)
    lines = [f"Configuration ({scoped.name} view, {len(scoped)} keys):"]
    for key, value in scoped.items():
        shown = MASK if scoped.is_secret(key) and value is not None else _render(value)
        lines.append(f"  {key} [{scoped.tier_of(key).value}] = {shown}")
    return "\n".join(lines)


def dotenv_template(schema: Schema) -> str:
    """Render a ``.env.example`` body for the schema."""
    blocks: List[str] = []
    for entry in schema:
        var = entry.var
        comments = [f"# {var.description}"] if var.description else []
        flags = [entry.tier.value, var.expected, "required" if var.is_required else "optional"]
        if var.secret:
            flags.append("secret")
        comments.append(f"# {', '.join(flags)}")
        if var.secret or entry.default is None:
            value = ""
        elif var.type is ValueType.BOOLEAN:
            value = _render(entry.default)
        else:
            value = str(entry.default)
        blocks.append("\n".join(comments + [f"{entry.key}={value}"]))
    return "\n\n".join(blocks) + "\n"
