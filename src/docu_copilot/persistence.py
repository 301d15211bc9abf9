"""Project persistence — save/load workflow state to the local workspace."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from . import config
from .models import WorkflowState

logger = logging.getLogger("docu.persistence")

CURRENT_SCHEMA_VERSION = "1.0"
STATE_FILE = "workflow_state.json"


def ensure_workspace_exists() -> Path:
    """Create the workspace directory if it doesn't exist and return its path."""
    config.WORKSPACE_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Workspace directory ensured at %s", config.WORKSPACE_DIR)
    return config.WORKSPACE_DIR


def slugify(name: str, fallback: str = "untitled") -> str:
    """Convert a title to a safe file or directory slug.

    'Checkout Flow: V2 (Final)' -> 'checkout-flow-v2-final'
    """
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or fallback


def save_workflow_state(project_dir: Path, state: WorkflowState) -> Path:
    """Serialize workflow state atomically (temp file, then rename)."""
    project_dir.mkdir(parents=True, exist_ok=True)
    data = {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "last_saved": datetime.now().isoformat(),
        **state.to_dict(),
    }
    state_file = project_dir / STATE_FILE
    temp_file = project_dir / f"{STATE_FILE}.tmp"
    with open(temp_file, "w") as f:
        json.dump(data, f, indent=2, default=str)
    temp_file.replace(state_file)
    logger.info("Workflow state saved to %s", state_file)
    return state_file


def load_workflow_state(project_dir: Path) -> WorkflowState:
    """Load workflow state, or a fresh one when nothing was saved yet."""
    state_file = project_dir / STATE_FILE
    if not state_file.exists():
        return WorkflowState()

    with open(state_file, "r") as f:
        saved = json.load(f)

    saved_version = saved.get("schema_version", "unknown")
    if saved_version != CURRENT_SCHEMA_VERSION:
        logger.warning(
            "Workflow state %s has schema version %s (current: %s)",
            state_file, saved_version, CURRENT_SCHEMA_VERSION,
        )
    logger.info("Workflow state loaded from %s", state_file)
    return WorkflowState.from_dict(saved)
