"""File handling utilities."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


class FileHandler:
    """Handles reading and writing text, JSON and YAML files."""

    def read_text(self, file_path: Union[str, Path]) -> Optional[str]:
        """Read a UTF-8 text file, returning None when it does not exist."""
        path = Path(file_path)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def write_file(self, file_path: Union[str, Path], content: str) -> None:
        """Write content to file, replacing it atomically."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete_file(self, file_path: Union[str, Path]) -> bool:
        """Delete a file. Returns False when there was nothing to delete."""
        path = Path(file_path)
        if not path.exists():
            return False
        path.unlink()
        return True

    def read_json(self, file_path: Union[str, Path]) -> Any:
        """Read JSON file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, file_path: Union[str, Path], data: Any) -> None:
        """Write JSON file."""
        self.write_file(file_path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")

    def read_yaml(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Read YAML file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return yaml.safe_load(f)
