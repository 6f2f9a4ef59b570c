import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from project_control.api.service import ProjectControlService
from project_control.config import (
    Settings,
    category_collapse_key,
    get_vault_root,
    load_settings,
    save_settings,
    section_collapse_key,
    toggle_collapsed,
)
from project_control.sync.stale import find_stale_projects
from project_control.sync.status import DEFAULT_SECTION, ProjectStatus
from project_control.vault.files import FilePrioritiesStore
from project_control.vault.frontmatter import FrontmatterAttributeStore
from project_control.vault.paths import ProjectIndex


def build_service(settings: Settings, vault_root: Path) -> tuple[ProjectControlService, ProjectIndex]:
    index = ProjectIndex(vault_root, settings.project_folder)
    service = ProjectControlService(
        attributes=FrontmatterAttributeStore(index),
        priorities=FilePrioritiesStore(vault_root / settings.priorities_file),
        notify=print,
    )
    return service, index


def resolve_project(index: ProjectIndex, value: str) -> str:
    """Accept a project name or a vault-relative path to any note inside the project."""
    if "/" not in value and "\\" not in value:
        return value
    project = index.project_for_path(value)
    return project.name if project is not None else value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="project-control", description="Keep project notes and the priorities file in sync.")
    parser.add_argument("--vault", help="Vault root (defaults to $PROJECT_CONTROL_VAULT or the current directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the parsed priorities file as JSON")
    subparsers.add_parser("unlisted", help="List tagged projects missing from the priorities file")
    subparsers.add_parser("resync", help="Move every project to the section matching its status")
    subparsers.add_parser("stale", help="List complete or inactive projects")

    status_parser = subparsers.add_parser("status", help="Change a project's status")
    status_parser.add_argument("project")
    status_parser.add_argument("status", choices=[status.value for status in ProjectStatus])

    group_parser = subparsers.add_parser("group", help="Change a project's priority group")
    group_parser.add_argument("project")
    group_parser.add_argument("group", nargs="?", default=None)

    move_parser = subparsers.add_parser("move", help="Move a project within the priorities file")
    move_parser.add_argument("project")
    move_parser.add_argument("section")
    move_parser.add_argument("--group", default=None)
    anchor = move_parser.add_mutually_exclusive_group()
    anchor.add_argument("--before", metavar="PROJECT", default=None)
    anchor.add_argument("--after", metavar="PROJECT", default=None)

    add_parser = subparsers.add_parser("add", help="Add a project to the priorities file")
    add_parser.add_argument("project")
    add_parser.add_argument("--section", default=DEFAULT_SECTION)
    add_parser.add_argument("--emoji", default=None)

    remove_parser = subparsers.add_parser("remove", help="Remove a project from the priorities file")
    remove_parser.add_argument("project")

    collapse_parser = subparsers.add_parser("collapse", help="Collapse or expand a section in the saved view state")
    collapse_parser.add_argument("section")
    collapse_parser.add_argument("--category", default=None)
    collapse_parser.add_argument("--expand", action="store_true")

    return parser


async def run(args: argparse.Namespace, settings: Settings, vault_root: Path) -> int:
    service, index = build_service(settings, vault_root)

    if args.command == "show":
        doc = await service.load_document()
        if doc is None:
            print("Could not load priorities file.", file=sys.stderr)
            return 1
        data = doc.to_dict()
        for section in data["sections"]:
            section["collapsed"] = section_collapse_key(section["name"]) in settings.collapsed_sections
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    if args.command == "unlisted":
        for name in await service.unlisted_projects():
            print(name)
        return 0

    if args.command == "collapse":
        if args.category:
            key = category_collapse_key(args.section, args.category)
        else:
            key = section_collapse_key(args.section)
        if toggle_collapsed(settings, key, not args.expand):
            save_settings(settings)
        print(f"{key}: {'expanded' if args.expand else 'collapsed'}")
        return 0

    if args.command == "stale":
        stale = find_stale_projects(index, service.attributes, settings.stale_days)
        if not stale:
            print("No stale projects found")
        for project in stale:
            print(f"{project.name}\t{project.reason}")
        return 0

    project = getattr(args, "project", None)
    if project is not None:
        project = resolve_project(index, project)

    if args.command == "resync":
        await service.bulk_resync()
    elif args.command == "status":
        service.change_project_status(project, args.status)
    elif args.command == "group":
        service.change_project_group(project, args.group)
    elif args.command == "move":
        anchor = args.before or args.after
        service.on_manual_move(
            project,
            args.section,
            args.group,
            anchor=anchor,
            before=args.before is not None,
        )
    elif args.command == "add":
        service.add_to_priorities(project, args.section, args.emoji)
    elif args.command == "remove":
        service.remove_from_priorities(project)

    await service.queue.drain()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    vault_root = Path(args.vault) if args.vault else get_vault_root()
    return asyncio.run(run(args, load_settings(), vault_root))
