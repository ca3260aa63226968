"""Command-line entry point."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from PyQt6.QtCore import Qt

from .config import load_config
from .io.projects_store import DEFAULT_STORE_NAME, ProjectsStore
from .io.stitcher import StitchError, StitchResult
from .logging import configure_logging
from .math.layout import build_session_targets
from .math.vector import Vector3
from .sensor.source import ReplaySensorSource, load_sensor_log
from .sensor.synthetic import sweep_samples
from .session.camera import SimulatedCamera
from .session.controller import CaptureController
from .workers.task_runner import StitchTask, TaskRunner


def _parse_vector(text: str) -> Vector3:
    parts = [part for part in text.replace(" ", "").split(",") if part]
    try:
        return Vector3.from_iterable(float(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected x,y,z but got {text!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photosphere", description="Photosphere capture guidance tools")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--store", type=Path, default=Path(DEFAULT_STORE_NAME), help="Projects JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Drive a capture session from a recorded sensor log")
    replay.add_argument("log", type=Path)
    replay.add_argument("--config", type=Path)
    replay.add_argument("--up", type=_parse_vector, help="Fixed world-up direction x,y,z")
    replay.add_argument("--photo-dir", type=Path, default=Path("photos"))
    replay.add_argument("--save", action="store_true", help="Store the finished session as a project")

    simulate = sub.add_parser("simulate", help="Run a session against a synthetic sweep over every target")
    simulate.add_argument("--config", type=Path)
    simulate.add_argument("--up", type=_parse_vector, default=Vector3(0.0, 0.0, 1.0))
    simulate.add_argument("--dwell", type=int, default=40)
    simulate.add_argument("--photo-dir", type=Path, default=Path("photos"))
    simulate.add_argument("--save", action="store_true")

    sub.add_parser("projects", help="List stored projects")

    stitch = sub.add_parser("stitch", help="Stitch a stored project into a panorama")
    stitch.add_argument("project_id")
    stitch.add_argument("--output-dir", type=Path, default=Path("panoramas"))
    return parser


def _run_session(controller: CaptureController, source: ReplaySensorSource) -> Optional[List[str]]:
    controller.start()
    delivered = source.run()
    controller.stop()
    session = controller.session
    captured = session.state.captured_count if session else 0
    total = session.state.target_count if session else 0
    logger.info("Delivered {} samples; captured {}/{} targets", delivered, captured, total)
    return controller.completed_photos


def _finish(photos: Optional[List[str]], store: ProjectsStore, save: bool) -> int:
    if photos is None:
        logger.warning("Session ended before every target was captured")
        return 1
    for path in photos:
        print(path)
    if save:
        project = store.add_project(photos)
        print(f"Saved {project.name} ({project.id})")
    return 0


def cmd_replay(args: argparse.Namespace, store: ProjectsStore) -> int:
    config = load_config(args.config)
    source = ReplaySensorSource(load_sensor_log(args.log))
    controller = CaptureController(
        source,
        SimulatedCamera(args.photo_dir),
        config,
        world_up=args.up,
        follow_gravity=args.up is None,
    )
    return _finish(_run_session(controller, source), store, args.save)


def cmd_simulate(args: argparse.Namespace, store: ProjectsStore) -> int:
    config = load_config(args.config)
    targets = build_session_targets(args.up, radius=config.layout.radius, **config.layout.layout_options())
    source = ReplaySensorSource(
        sweep_samples((target.position for target in targets), args.up, dwell_samples=args.dwell)
    )
    controller = CaptureController(source, SimulatedCamera(args.photo_dir), config, world_up=args.up)
    return _finish(_run_session(controller, source), store, args.save)


def cmd_projects(store: ProjectsStore) -> int:
    projects = store.load()
    if not projects:
        print("No projects yet.")
    for project in projects:
        panorama = project.panorama_path or "-"
        print(f"{project.id}  {project.name}  photos={len(project.photos)}  panorama={panorama}")
    return 0


def cmd_stitch(args: argparse.Namespace, store: ProjectsStore) -> int:
    project = store.get(args.project_id)
    if project is None:
        logger.error("Unknown project {}", args.project_id)
        return 1
    if not project.can_stitch:
        logger.error("{} needs at least two photos to stitch", project.name)
        return 1

    outcome: dict[str, object] = {}
    task = StitchTask(project.photos, args.output_dir)
    direct = Qt.ConnectionType.DirectConnection
    task.signals.finished.connect(lambda result: outcome.setdefault("result", result), direct)
    task.signals.failed.connect(lambda error: outcome.setdefault("error", error), direct)
    runner = TaskRunner(max_threads=1)
    runner.submit(task)
    runner.wait()

    error = outcome.get("error")
    if isinstance(error, StitchError):
        logger.error("{}", error)
        for line in error.log:
            print(line)
        return 2
    result = outcome.get("result")
    if not isinstance(result, StitchResult):
        logger.error("Stitch job produced no result")
        return 2
    for line in result.log:
        print(line)
    store.update_panorama(project.id, str(result.saved_path))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Run the ``photosphere`` command line."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    store = ProjectsStore(args.store)

    if args.command == "replay":
        return cmd_replay(args, store)
    if args.command == "simulate":
        return cmd_simulate(args, store)
    if args.command == "projects":
        return cmd_projects(store)
    return cmd_stitch(args, store)


if __name__ == "__main__":
    sys.exit(main())
