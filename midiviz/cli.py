from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Iterator, TextIO

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .errors import UnknownTypeError
from .factory import TypeFactory, build_effect_factory, build_synthesizer_factory
from .logging_utils import configure_logging, log_exception
from .project import Project, load_project, read_project
from .properties import PropertyOwner
from .track import evaluate_tracks, to_render_objects

_LOGGER = logging.getLogger("midiviz.cli")
_CONSOLE = Console()
_ERROR_CONSOLE = Console(stderr=True)


def render_error(context: str, exc: BaseException) -> None:
    _ERROR_CONSOLE.print(f"[bold red]{context} failed:[/] {type(exc).__name__}: {exc}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="midiviz")
    sub = parser.add_subparsers(dest="command", required=True)

    catalog = sub.add_parser("catalog", help="List synthesizer and effect types.")
    catalog.add_argument("--kind", choices=["synthesizers", "effects"], default=None)

    properties = sub.add_parser("properties", help="Show the properties of a type.")
    properties.add_argument("type_name", type=str)

    frame = sub.add_parser("frame", help="Print the render objects of one frame as JSON.")
    frame.add_argument("project", type=Path)
    frame.add_argument("--time", type=float, required=True, help="Query time in beats.")
    frame.add_argument("--bpm", type=float, default=None)

    export = sub.add_parser("export", help="Write one JSON line per frame.")
    export.add_argument("project", type=Path)
    export.add_argument("--start", type=float, required=True, help="First beat.")
    export.add_argument("--end", type=float, required=True, help="Last beat.")
    export.add_argument("--fps", type=int, default=None)
    export.add_argument("--bpm", type=float, default=None)
    export.add_argument("--output", type=Path, default=None)
    return parser


def _print_catalog(factories: dict[str, TypeFactory[Any]], kind: str | None) -> None:
    for name, factory in factories.items():
        if kind is not None and kind != name:
            continue
        table = Table(title=name.capitalize())
        table.add_column("Category")
        table.add_column("Type")
        table.add_column("Label")
        for category, entries in factory.categories().items():
            for entry in entries:
                table.add_row(category, entry.type_name, entry.label)
        _CONSOLE.print(table)


def _print_properties(instance: PropertyOwner) -> None:
    table = Table(title=instance.type_name)
    table.add_column("Name")
    table.add_column("Default")
    table.add_column("UI")
    table.add_column("Range")
    table.add_column("Label")
    for info in instance.describe_properties():
        bounds = ""
        if "min" in info or "max" in info:
            bounds = f"{info.get('min', '')}..{info.get('max', '')}"
        table.add_row(info["name"], repr(info["default"]), info["ui_type"], bounds, info["label"])
    _CONSOLE.print(table)


def _open_project(path: Path, settings: Settings, bpm: float | None) -> Project:
    project = load_project(
        read_project(path),
        build_synthesizer_factory(),
        build_effect_factory(),
        default_bpm=settings.default_bpm,
    )
    if bpm is not None:
        project.bpm = bpm
    return project


def frame_payload(project: Project, time: float) -> dict[str, Any]:
    frames = evaluate_tracks(project.tracks, time, project.bpm)
    return {
        "time": time,
        "objects": [record.model_dump(mode="json") for record in to_render_objects(frames)],
        "errors": {frame.track_id: str(frame.error) for frame in frames if frame.error is not None},
    }


def frame_times(start: float, end: float, bpm: float, fps: int) -> Iterator[float]:
    """Beat positions of every video frame between ``start`` and ``end`` inclusive."""
    step = bpm / 60.0 / fps
    index = 0
    while True:
        time = start + index * step
        if time > end + 1e-9:
            return
        yield time
        index += 1


def _export(project: Project, start: float, end: float, fps: int, handle: TextIO) -> int:
    count = 0
    for time in frame_times(start, end, project.bpm, fps):
        handle.write(json.dumps(frame_payload(project, time)) + "\n")
        count += 1
    return count


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    configure_logging(settings)
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "catalog":
            factories: dict[str, TypeFactory[Any]] = {
                "synthesizers": build_synthesizer_factory(),
                "effects": build_effect_factory(),
            }
            _print_catalog(factories, args.kind)
            return 0

        if args.command == "properties":
            synthesizers = build_synthesizer_factory()
            effects = build_effect_factory()
            if args.type_name in synthesizers:
                _print_properties(synthesizers.create(args.type_name))
            elif args.type_name in effects:
                _print_properties(effects.create(args.type_name))
            else:
                raise UnknownTypeError(args.type_name, kind="synthesizer or effect")
            return 0

        if args.command == "frame":
            project = _open_project(args.project, settings, args.bpm)
            _CONSOLE.print_json(json.dumps(frame_payload(project, args.time)))
            return 0

        if args.command == "export":
            if args.end < args.start:
                parser.error("--end must not be before --start")
            project = _open_project(args.project, settings, args.bpm)
            fps = args.fps if args.fps is not None else settings.export_fps
            if fps <= 0:
                parser.error("--fps must be positive")
            if args.output is None:
                count = _export(project, args.start, args.end, fps, _CONSOLE.file)
            else:
                with args.output.open("w", encoding="utf-8") as handle:
                    count = _export(project, args.start, args.end, fps, handle)
                _CONSOLE.print(f"Wrote {count} frames to {args.output}")
            _LOGGER.info("Exported %d frames", count)
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("midiviz CLI failed: %s", exc, exc_info=settings.debug)
        log_exception("midiviz CLI", exc, settings)
        render_error("midiviz CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
