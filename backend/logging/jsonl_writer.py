from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, TextIO


class JsonlWriter:
    """Append-only JSONL writer for reduction histories.

    **Invariants:**
      * **Record ordering:** each ``write(record)`` appends exactly one JSON
        object line, in call order. Existing lines are never rewritten.
      * **Key ordering:** keys keep the insertion order of the input dict.
      * **Separators:** compact ``(",", ":")`` separators, ``ensure_ascii=False``
        so connective glyphs are written literally, UTF-8 encoded.
      * **Flush:** every ``write`` flushes before returning.
    """

    def __init__(self, path: str | Path, *, json_kwargs: Optional[Dict[str, Any]] = None) -> None:
        self._path = Path(path)
        if self._path.parent and not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[TextIO] = self._path.open("a", encoding="utf-8")
        self._closed = False
        base_kwargs: Dict[str, Any] = {"separators": (",", ":"), "ensure_ascii": False}
        if json_kwargs:
            base_kwargs.update(json_kwargs)
        self._json_kwargs = base_kwargs

    @property
    def path(self) -> Path:
        return self._path

    def write(self, obj: Dict[str, Any]) -> None:
        if self._closed or self._file is None:
            raise ValueError("Cannot write to a closed JsonlWriter.")
        line = json.dumps(obj, **self._json_kwargs)
        self._file.write(f"{line}\n")
        self._file.flush()

    def write_session(self, session_id: str, formula: str, records: Iterable[Dict[str, Any]]) -> int:
        """Write one line per history step, tagged with the session and formula."""
        count = 0
        for record in records:
            self.write({"session": session_id, "formula": formula, **record})
            count += 1
        return count

    def close(self) -> None:
        if not self._closed and self._file is not None:
            self._file.close()
            self._file = None
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def read_jsonl(path: str | Path) -> list:
    """Load every record of a JSONL file, skipping blank lines."""
    with Path(path).open("r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
