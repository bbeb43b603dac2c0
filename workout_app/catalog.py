from dataclasses import dataclass
from typing import Dict, List, Optional

from .defaults import DEFAULT_CATALOG, DIFFICULTIES, REST_NAME
from .storage import load_json


@dataclass(frozen=True)
class Exercise:
    name: str
    video_path: Optional[str] = None

    @property
    def is_rest(self) -> bool:
        return self.name == REST_NAME

    def to_dict(self) -> dict:
        return {"name": self.name, "video_path": self.video_path, "is_rest": self.is_rest}


REST = Exercise(REST_NAME, None)


class Catalog:
    """
    Static exercise catalog: focus area -> difficulty tier -> ordered exercises.
    Built once by the application entry point and passed to whatever needs it.
    """

    def __init__(self, data: Dict[str, Dict[str, list]]):
        self._areas: Dict[str, Dict[str, List[Exercise]]] = {}
        for area, by_level in data.items():
            self._areas[area] = {}
            for level, items in (by_level or {}).items():
                self._areas[area][level] = [
                    Exercise(item["name"], item.get("video_path")) for item in items if item.get("name")
                ]

    @classmethod
    def load(cls, path: str):
        data = load_json(path, None)
        if not isinstance(data, dict):
            data = DEFAULT_CATALOG
        return cls(data)

    @property
    def focus_areas(self) -> List[str]:
        return list(self._areas.keys())

    def exercises(self, area: str, level: str) -> List[Exercise]:
        return list(self._areas.get(area, {}).get(level, []))

    def entries(self):
        """Yield (area, level, exercise) for every catalog entry."""
        for area, by_level in self._areas.items():
            for level, items in by_level.items():
                for ex in items:
                    yield area, level, ex

    def find(self, name: str) -> Optional[Exercise]:
        for _, _, ex in self.entries():
            if ex.name == name:
                return ex
        return None

    def video_paths(self) -> List[str]:
        """Unique video paths across the catalog, in catalog order."""
        seen = set()
        paths = []
        for _, _, ex in self.entries():
            if ex.video_path and ex.video_path not in seen:
                seen.add(ex.video_path)
                paths.append(ex.video_path)
        return paths

    def browse(self, area: str = "All", difficulty: str = "All"):
        """
        Flattened, filtered listing for the exercise browser.

        "All" disables a filter. Results are sorted by area, then tier order,
        then exercise name.
        """
        rows = []
        for entry_area, level, ex in self.entries():
            if area != "All" and entry_area != area:
                continue
            if difficulty != "All" and level != difficulty:
                continue
            rows.append({"focus_area": entry_area, "difficulty": level, "exercise": ex})

        def _level_rank(level):
            return DIFFICULTIES.index(level) if level in DIFFICULTIES else len(DIFFICULTIES)

        rows.sort(key=lambda r: (r["focus_area"], _level_rank(r["difficulty"]), r["exercise"].name))
        return rows
