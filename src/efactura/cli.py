"""Command line entry points for the e-Factura tools."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Sequence

from .commands import build, check

CommandCallable = Callable[[Sequence[str] | None], int | None]


@dataclass(frozen=True)
class CommandSpec:
    """Metadata describing a CLI command exposed by :mod:`efactura.cli`."""

    name: str
    summary: str
    handler: CommandCallable
    module: str
    aliases: tuple[str, ...] = ()

    def run(self, argv: Sequence[str] | None) -> int:
        """Execute the command and normalise the resulting exit code."""

        try:
            result = self.handler(argv)
        except SystemExit as exc:  # argparse exits on --help and usage errors
            code = exc.code
            if code is None:
                return 0
            if isinstance(code, int):
                return code
            print(str(code), file=sys.stderr)
            return 1
        if result is None:
            return 0
        return int(result)


_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="build",
        summary="Build CIUS-RO UBL XML files from JSON invoices.",
        handler=build.main,
        module="efactura.commands.build",
        aliases=("generate",),
    ),
    CommandSpec(
        name="check",
        summary="Validate JSON invoices without generating XML.",
        handler=check.main,
        module="efactura.commands.check",
        aliases=("validate",),
    ),
)

_COMMAND_INDEX: Mapping[str, CommandSpec] = {
    name: spec for spec in _COMMANDS for name in (spec.name, *spec.aliases)
}


def available_commands() -> Iterable[CommandSpec]:
    """Return the commands registered in the CLI."""

    return _COMMANDS


def build_parser() -> argparse.ArgumentParser:
    """Return the base argument parser shared across commands."""

    parser = argparse.ArgumentParser(prog="efactura", description="RO e-Factura tools")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    for spec in _COMMANDS:
        subparser = subparsers.add_parser(
            spec.name,
            aliases=list(spec.aliases),
            help=spec.summary,
            description=spec.summary,
            add_help=False,
        )
        subparser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)

    return parser


def run(command: str, argv: Sequence[str] | None = None) -> int:
    """Execute *command* forwarding ``argv`` to the underlying handler."""

    spec = _COMMAND_INDEX.get(command)
    if spec is None:
        raise ValueError(f"Unknown command: {command}")
    return spec.run(list(argv or []))


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the command line interface."""

    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    # Only the command name is parsed here; its options belong to the handler.
    namespace, _ = parser.parse_known_args(arguments[:1])
    return run(namespace.command, arguments[1:])


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
