"""
Run manifest generation for reproducibility tracking.

Each script writes a manifest capturing config, outputs and summary numbers.
"""
import json
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any, Optional
import hashlib


def get_git_commit() -> Optional[str]:
    """
    Get current git commit hash if available.

    Returns:
        Commit hash string or None if not in a git repo
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0:
        return result.stdout.strip()
    return None


def hash_file(file_path: Path) -> str:
    """
    Compute SHA256 hash of a file.

    Args:
        file_path: Path to file

    Returns:
        Hexadecimal hash string
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def create_run_manifest(
    script_name: str,
    config: Dict[str, Any],
    output_files: List[Path],
    metadata: Optional[Dict[str, Any]] = None,
    manifest_path: Optional[Path] = None
) -> Dict[str, Any]:
    """
    Create a run manifest capturing execution context.

    Args:
        script_name: Name of the script (e.g., "01_run_thread_safe_rng")
        config: Configuration dictionary
        output_files: List of output file paths
        metadata: Optional additional metadata (e.g., summary statistics, digests)
        manifest_path: Optional path to save manifest JSON

    Returns:
        Manifest dictionary
    """
    manifest = {
        "script": script_name,
        "timestamp": datetime.now().isoformat(),
        "git_commit": get_git_commit(),
        "config_snapshot": config,
        "outputs": [],
        "metadata": metadata or {}
    }

    # Add output file info
    for output_file in output_files:
        if output_file.exists():
            manifest["outputs"].append({
                "path": str(output_file),
                "size_bytes": output_file.stat().st_size,
                "hash": hash_file(output_file)[:16]  # truncate for readability
            })

    if manifest_path is not None:
        save_json(manifest, manifest_path)

    return manifest


def save_json(data: Dict[str, Any], file_path: Path) -> None:
    """
    Save dictionary to JSON file with pretty formatting.

    Args:
        data: Dictionary to save
        file_path: Output file path
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w") as f:
        json.dump(data, f, indent=2, default=str)
