import re
from dataclasses import dataclass
from pathlib import Path

_REPEATED_SLASHES = re.compile(r"/+")


@dataclass(frozen=True)
class ProjectInfo:
    name: str
    folder: Path
    main_file: Path | None


def normalize_path(path: str) -> str:
    if not path:
        return ""
    normalized = path.replace("\\", "/")
    normalized = normalized.rstrip("/")
    return _REPEATED_SLASHES.sub("/", normalized)


def project_name_from_path(full_path: str, project_folder: str) -> str | None:
    normalized_path = normalize_path(full_path)
    normalized_folder = normalize_path(project_folder)
    if not normalized_folder or not normalized_path.startswith(normalized_folder + "/"):
        return None

    relative = normalized_path[len(normalized_folder) + 1 :]
    name = relative.split("/")[0]
    return name or None


class ProjectIndex:
    """Resolves project names to folders under ``<vault>/<project_folder>``."""

    def __init__(self, vault_root: str | Path, project_folder: str) -> None:
        self.vault_root = Path(vault_root)
        self.project_folder = normalize_path(project_folder)

    @property
    def base_dir(self) -> Path:
        return self.vault_root / self.project_folder

    def list_projects(self) -> list[ProjectInfo]:
        base = self.base_dir
        if not base.is_dir():
            return []
        projects: list[ProjectInfo] = []
        for child in sorted(base.iterdir(), key=lambda path: path.name):
            if child.is_dir():
                projects.append(self._info_for(child))
        return projects

    def resolve(self, project_name: str) -> ProjectInfo | None:
        if not project_name or "/" in project_name or project_name in {".", ".."}:
            return None
        folder = self.base_dir / project_name
        if not folder.is_dir():
            return None
        return self._info_for(folder)

    def project_for_path(self, path: str) -> ProjectInfo | None:
        name = project_name_from_path(path, self.project_folder)
        if name is None:
            return None
        return self.resolve(name)

    def _info_for(self, folder: Path) -> ProjectInfo:
        main_file = folder / f"{folder.name}.md"
        return ProjectInfo(
            name=folder.name,
            folder=folder,
            main_file=main_file if main_file.is_file() else None,
        )
