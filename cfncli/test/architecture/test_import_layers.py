from __future__ import annotations

from ._utils import iter_source_files, matches_prefix, package_root, parse_imports


def _offenders(subdir: str, forbidden: tuple[str, ...]) -> list[str]:
    root = package_root()
    offenders: list[str] = []
    for file_path in iter_source_files(root / subdir):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")
    return offenders


def test_stack_domain_has_no_io_dependencies() -> None:
    offenders = _offenders(
        "stack", ("cfncli.services", "cfncli.cli", "cfncli.output", "boto3", "botocore", "typer")
    )
    assert not offenders, "stack -> outer layer violations:\n" + "\n".join(offenders)


def test_services_do_not_import_cli_modules() -> None:
    offenders = _offenders("services", ("cfncli.cli", "typer"))
    assert not offenders, "services -> cli dependency violations:\n" + "\n".join(offenders)


def test_core_is_a_leaf() -> None:
    offenders = _offenders(
        "core", ("cfncli.stack", "cfncli.services", "cfncli.cli", "cfncli.output")
    )
    assert not offenders, "core dependency violations:\n" + "\n".join(offenders)
