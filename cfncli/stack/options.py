"""Turn raw ``apply`` options into a ``StackRequest``.

Validation runs in a fixed order: exclusivity first (presence only, no I/O),
then enum and range checks, then ``@file`` resolution. Nothing here talks to
the network and nothing mutates its input.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from cfncli.core.result import Err, Ok, Result
from cfncli.core.structured import as_obj_list, as_str_dict
from cfncli.stack.errors import ConfigurationError, ContentResolutionError, OptionError
from cfncli.stack.model import (
    ApplyOptions,
    Capability,
    OnFailure,
    Parameter,
    StackRequest,
    Tag,
)

__all__ = [
    "EXCLUSIVE_GROUPS",
    "FILE_MARKER",
    "check_exclusivity",
    "parse_pairs",
    "process_options",
    "resolve_content",
    "transform_parameters",
]

FILE_MARKER = "@"

EXCLUSIVE_GROUPS: tuple[tuple[str, ...], ...] = (
    ("template_body", "template_url"),
    ("disable_rollback", "on_failure"),
    ("stack_policy_body", "stack_policy_url"),
)


def check_exclusivity(
    present: Iterable[str], exclusives: Sequence[str]
) -> Result[None, ConfigurationError]:
    """Fail if more than one of ``exclusives`` was supplied."""
    supplied = set(present)
    collided = tuple(name for name in exclusives if name in supplied)
    if len(collided) > 1:
        return Err(
            ConfigurationError(
                f"{', '.join(collided)} are mutually exclusive",
                options=collided,
                hint="pass only one of: " + ", ".join(f"--{_flag(n)}" for n in collided),
            )
        )
    return Ok(None)


def _flag(option: str) -> str:
    return option.replace("_", "-")


def _read_file(path: Path) -> bytes:
    return path.read_bytes()


def resolve_content(
    value: str | None, *, option: str
) -> Result[str | None, ContentResolutionError]:
    """Return ``value``, or the contents of the file it names with ``@path``.

    The file is read once, as bytes, so line endings come through untouched.
    """
    if value is None or not value.startswith(FILE_MARKER):
        return Ok(value)

    path = Path(value[len(FILE_MARKER) :]).expanduser()
    try:
        return Ok(_read_file(path).decode("utf-8"))
    except FileNotFoundError:
        return Err(ContentResolutionError(option=option, path=path, reason="file not found"))
    except IsADirectoryError:
        return Err(ContentResolutionError(option=option, path=path, reason="is a directory"))
    except PermissionError:
        return Err(ContentResolutionError(option=option, path=path, reason="permission denied"))
    except UnicodeDecodeError as e:
        return Err(ContentResolutionError(option=option, path=path, reason=f"not UTF-8 ({e.reason})"))
    except OSError as e:
        return Err(ContentResolutionError(option=option, path=path, reason=e.strerror or str(e)))


def transform_parameters(parameters: Mapping[str, str] | None) -> tuple[Parameter, ...]:
    """Convert ``{key: value}`` into CloudFormation's list-of-structs shape."""
    if not parameters:
        return ()
    return tuple(Parameter(parameter_key=k, parameter_value=v) for k, v in parameters.items())


def _split_pair(raw: str) -> tuple[str, str] | None:
    # Whichever separator comes first wins, so "Arn=arn:aws:..." keeps its colons.
    positions = [i for i in (raw.find("="), raw.find(":")) if i >= 0]
    if not positions:
        return None
    i = min(positions)
    key = raw[:i].strip()
    if not key:
        return None
    return key, raw[i + 1 :]


def _stringify(value: object) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    items = as_obj_list(value)
    if items is not None:
        parts = [_stringify(item) for item in items]
        if any(p is None for p in parts) or any(isinstance(i, list) for i in items):
            return None
        return ",".join(p for p in parts if p is not None)
    return None


_LIST_FIELDS: dict[str, tuple[str, str]] = {
    "parameters": ("ParameterKey", "ParameterValue"),
    "tags": ("Key", "Value"),
}


def _pairs_from_json(text: str, *, option: str, source: str) -> Result[dict[str, str], ConfigurationError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ConfigurationError(f"{option}: invalid JSON in {source}: {e}", options=(option,)))

    out: dict[str, str] = {}

    table = as_str_dict(obj)
    if table is not None:
        for key, raw_value in table.items():
            value = _stringify(raw_value)
            if value is None:
                return Err(
                    ConfigurationError(
                        f"{option}: unsupported value for '{key}' in {source}",
                        options=(option,),
                    )
                )
            out[key] = value
        return Ok(out)

    # CloudFormation CLI style: [{"ParameterKey": ..., "ParameterValue": ...}]
    # or, for tags, [{"Key": ..., "Value": ...}]
    key_field, value_field = _LIST_FIELDS.get(option, _LIST_FIELDS["parameters"])
    entries = as_obj_list(obj)
    if entries is not None:
        for entry_obj in entries:
            entry = as_str_dict(entry_obj)
            key = entry.get(key_field) if entry is not None else None
            value = _stringify(entry.get(value_field)) if entry is not None else None
            if not isinstance(key, str) or not key or value is None:
                return Err(
                    ConfigurationError(
                        f"{option}: expected {key_field}/{value_field} entries in {source}",
                        options=(option,),
                    )
                )
            out[key] = value
        return Ok(out)

    return Err(
        ConfigurationError(
            f"{option}: {source} must contain a JSON object or list",
            options=(option,),
        )
    )


def parse_pairs(values: Iterable[str], *, option: str) -> Result[dict[str, str], OptionError]:
    """Parse ``KEY:VALUE``/``KEY=VALUE`` strings and ``@file.json`` references.

    Later entries override earlier ones with the same key.
    """
    out: dict[str, str] = {}
    for raw in values:
        if raw.startswith(FILE_MARKER):
            content = resolve_content(raw, option=option)
            if isinstance(content, Err):
                return content
            parsed = _pairs_from_json(content.value or "", option=option, source=raw[1:])
            if isinstance(parsed, Err):
                return parsed
            out.update(parsed.value)
            continue

        pair = _split_pair(raw)
        if pair is None:
            return Err(
                ConfigurationError(
                    f"{option}: expected KEY:VALUE or KEY=VALUE, got '{raw}'",
                    options=(option,),
                )
            )
        out[pair[0]] = pair[1]
    return Ok(out)


def _parse_on_failure(raw: str | None) -> Result[OnFailure | None, ConfigurationError]:
    if raw is None:
        return Ok(None)
    try:
        return Ok(OnFailure(raw.strip().upper()))
    except ValueError:
        allowed = ", ".join(m.value for m in OnFailure)
        return Err(
            ConfigurationError(
                f"on_failure: invalid value '{raw}'",
                options=("on_failure",),
                hint=f"expected one of: {allowed}",
            )
        )


def _parse_capabilities(
    raw: Sequence[str] | None,
) -> Result[frozenset[Capability], ConfigurationError]:
    if raw is None:
        return Ok(frozenset())
    caps: set[Capability] = set()
    for item in raw:
        try:
            caps.add(Capability(item.strip().upper()))
        except ValueError:
            allowed = ", ".join(m.value for m in Capability)
            return Err(
                ConfigurationError(
                    f"capabilities: invalid value '{item}'",
                    options=("capabilities",),
                    hint=f"expected one of: {allowed}",
                )
            )
    return Ok(frozenset(caps))


def process_options(options: ApplyOptions) -> Result[StackRequest, OptionError]:
    """Validate and normalize ``options`` into a new ``StackRequest``."""
    stack_name = options.stack_name.strip()
    if not stack_name:
        return Err(ConfigurationError("stack_name is required", options=("stack_name",)))

    present = options.present()
    for group in EXCLUSIVE_GROUPS:
        checked = check_exclusivity(present, group)
        if isinstance(checked, Err):
            return checked

    on_failure = _parse_on_failure(options.on_failure)
    if isinstance(on_failure, Err):
        return on_failure

    capabilities = _parse_capabilities(options.capabilities)
    if isinstance(capabilities, Err):
        return capabilities

    if options.timeout_in_minutes is not None and options.timeout_in_minutes <= 0:
        return Err(
            ConfigurationError(
                f"timeout_in_minutes must be greater than 0, got {options.timeout_in_minutes}",
                options=("timeout_in_minutes",),
            )
        )

    template_body = resolve_content(options.template_body, option="template_body")
    if isinstance(template_body, Err):
        return template_body

    stack_policy_body = resolve_content(options.stack_policy_body, option="stack_policy_body")
    if isinstance(stack_policy_body, Err):
        return stack_policy_body

    parameters: tuple[Parameter, ...] = ()
    if options.parameters is not None:
        parsed = parse_pairs(options.parameters, option="parameters")
        if isinstance(parsed, Err):
            return parsed
        parameters = transform_parameters(parsed.value)

    tags: tuple[Tag, ...] = ()
    if options.tags is not None:
        parsed_tags = parse_pairs(options.tags, option="tags")
        if isinstance(parsed_tags, Err):
            return parsed_tags
        tags = tuple(Tag(key=k, value=v) for k, v in parsed_tags.value.items())

    return Ok(
        StackRequest(
            stack_name=stack_name,
            template_body=template_body.value,
            template_url=options.template_url,
            parameters=parameters,
            disable_rollback=options.disable_rollback,
            on_failure=on_failure.value,
            capabilities=capabilities.value,
            resource_types=tuple(options.resource_types or ()),
            stack_policy_body=stack_policy_body.value,
            stack_policy_url=options.stack_policy_url,
            tags=tags,
            notification_arns=tuple(options.notification_arns or ()),
            timeout_in_minutes=options.timeout_in_minutes,
        )
    )
