"""
Project records - construction and search helpers.

Projects are stored as rows of the "projects" sheet. A project record is a
plain dict so that columns added by hand in the sheet survive a rewrite.

Record Shape:
=============
    {
        "id": "p-3f2a...",        # opaque, generated once, persisted
        "code": "P-25417",        # human-facing code, P-YY###
        "name": "信義區三房翻修案",
        "clientName": "王小姐",
        "type": "翻修",
        "status": "設計中",
        "budget": 1200000,
        "dueDate": "2025-09-30",
        "driveFolder": "https://drive.google.com/drive/folders/..."
    }
"""

import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.environments.base import InputValidationError
from app.environments.google.sheets.mapper import new_record_id


PROJECTS_SHEET = "projects"

DEFAULT_PROJECT_TYPE = "翻修"
INITIAL_PROJECT_STATUS = "設計中"


class ProjectDraft(BaseModel):
    """Project as entered in the "new project" form."""
    name: str = Field("", description="Project name (required)")
    client_name: str = Field("", alias="clientName")
    code: Optional[str] = Field(None, description="Leave empty to generate P-YY###")
    type: Optional[str] = Field(None, description="Project category, default 翻修")
    budget: Any = Field(None, description="Number or numeric text")
    due_date: str = Field("", alias="dueDate")

    class Config:
        populate_by_name = True

    def validate_required(self) -> None:
        if not self.name.strip():
            raise InputValidationError("請輸入專案名稱", fields=["name"])


def coerce_budget(value: Any) -> float:
    """
    Budget as a number.

    Accepts numbers and numeric text with thousands separators
    ("1,200,000"). Anything else becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    text = str(value).replace(",", "").strip()
    if not text:
        return 0
    try:
        number = float(text)
    except ValueError:
        return 0
    return int(number) if number.is_integer() else number


def generate_project_code(now: Optional[datetime] = None) -> str:
    """P- + two-digit year + three random digits, e.g. P-25417."""
    now = now or datetime.now()
    return f"P-{now.strftime('%y')}{random.randint(100, 999)}"


def build_project(draft: ProjectDraft, drive_folder: str = "") -> Dict[str, Any]:
    """Create a new project record from a validated draft."""
    return {
        "id": new_record_id("p-"),
        "code": (draft.code or "").strip() or generate_project_code(),
        "name": draft.name.strip(),
        "clientName": draft.client_name or "",
        "type": draft.type or DEFAULT_PROJECT_TYPE,
        "status": INITIAL_PROJECT_STATUS,
        "budget": coerce_budget(draft.budget),
        "dueDate": draft.due_date or "",
        "driveFolder": drive_folder or "",
    }


def matches_query(project: Dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match over name, client and code."""
    q = (query or "").strip().lower()
    if not q:
        return True
    content = " ".join(str(project.get(key) or "") for key in ("name", "clientName", "code"))
    return q in content.lower()


def filter_projects(projects: List[Dict[str, Any]], query: str) -> List[Dict[str, Any]]:
    return [p for p in projects if matches_query(p, query)]
