"""JSON persistence for listing results."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping, Optional


class JsonStore:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def write(
        self,
        data: Iterable[dict[str, object]],
        *,
        filename: str,
        criteria: Optional[Mapping[str, object]] = None,
        subdir: str | None = None,
    ) -> Path:
        target_dir = self.root / subdir if subdir else self.root
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / filename
        items = list(data)
        serialisable = {
            "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "criteria": dict(criteria) if criteria is not None else None,
            "count": len(items),
            "items": items,
        }
        path.write_text(json.dumps(serialisable, indent=2, ensure_ascii=False))
        return path
