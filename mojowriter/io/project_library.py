"""Project library: every saved project kept in one JSON document."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.project import Project
from ..errors import ProjectError
from .file_handler import FileHandler

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Result of merging a backup file into the library."""

    added: int = 0
    updated: int = 0
    skipped: int = 0


def _is_valid_entry(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("id"), str)
        and isinstance(entry.get("name"), str)
        and isinstance(entry.get("last_modified"), (int, float))
        and not isinstance(entry.get("last_modified"), bool)
    )


class ProjectLibrary:
    """Handles loading, saving, importing and exporting projects."""

    def __init__(
        self,
        projects_file: Union[str, Path],
        history_limit: Optional[int] = None,
        file_handler: Optional[FileHandler] = None,
    ):
        self.projects_file = Path(projects_file)
        self.history_limit = history_limit
        self.file_handler = file_handler or FileHandler()

    def _read_all(self) -> List[Dict[str, Any]]:
        if not self.projects_file.exists():
            return []
        try:
            data = self.file_handler.read_json(self.projects_file)
        except ValueError as e:
            raise ProjectError(f"Project library {self.projects_file} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise ProjectError(f"Project library {self.projects_file} must contain a list")
        return data

    def _write_all(self, entries: List[Dict[str, Any]]) -> None:
        self.file_handler.write_json(self.projects_file, entries)

    def list_projects(self) -> List[Dict[str, Any]]:
        """Return id, name and last_modified of each project, newest first."""
        summaries = [
            {"id": e["id"], "name": e["name"], "last_modified": e["last_modified"]}
            for e in self._read_all()
            if _is_valid_entry(e)
        ]
        return sorted(summaries, key=lambda s: s["last_modified"], reverse=True)

    def save_project(self, project: Project) -> None:
        """Insert or replace a project."""
        project.touch()
        entries = [e for e in self._read_all() if e.get("id") != project.id]
        entries.insert(0, project.to_dict())
        self._write_all(entries)
        logger.info(f"Saved project '{project.name}' ({project.id})")

    def load_project(self, project_id: str) -> Project:
        """Load a project by id."""
        for entry in self._read_all():
            if entry.get("id") == project_id:
                try:
                    return Project.from_dict(entry, history_limit=self.history_limit)
                except (KeyError, TypeError, ValueError) as e:
                    raise ProjectError(f"Project {project_id} is corrupt: {e}") from e
        raise ProjectError(f"Project not found: {project_id}")

    def delete_project(self, project_id: str) -> bool:
        entries = self._read_all()
        remaining = [e for e in entries if e.get("id") != project_id]
        if len(remaining) == len(entries):
            return False
        self._write_all(remaining)
        logger.info(f"Deleted project {project_id}")
        return True

    def export_all(self, backup_file: Union[str, Path]) -> int:
        """Write every project to a backup file. Returns the number exported."""
        entries = self._read_all()
        if not entries:
            raise ProjectError("No projects to export.")
        self.file_handler.write_json(backup_file, entries)
        return len(entries)

    def import_file(self, backup_file: Union[str, Path]) -> ImportSummary:
        """Merge projects from a backup file; entries with the same id are replaced."""
        try:
            imported = self.file_handler.read_json(backup_file)
        except (OSError, ValueError) as e:
            raise ProjectError(f"Import failed: {e}") from e
        if not isinstance(imported, list):
            raise ProjectError("Invalid project file: The file should contain a list of projects.")

        merged = {e.get("id"): e for e in self._read_all()}
        summary = ImportSummary()
        for entry in imported:
            if not _is_valid_entry(entry):
                logger.warning(f"Skipping invalid project object during import: {str(entry)[:80]}")
                summary.skipped += 1
                continue
            if entry["id"] in merged:
                summary.updated += 1
            else:
                summary.added += 1
            merged[entry["id"]] = entry

        self._write_all(list(merged.values()))
        return summary
