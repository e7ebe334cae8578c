# cache/store.py
# Instruction streams cached by a hash of the prompt that produced them

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from errors import InstructionValidationError
from guardrails import parse_instruction_stream
from schemas.instructions import Instruction, dump_instructions

logger = logging.getLogger(__name__)


def prompt_hash(prompt: str) -> str:
    """Stable cache key for a prompt: first 12 hex chars of its MD5."""
    return hashlib.md5(prompt.encode("utf-8")).hexdigest()[:12]


class InstructionStore:
    """Key-value store for planned instruction streams."""

    def get(self, key: str) -> Optional[List[Instruction]]:
        raise NotImplementedError

    def put(self, key: str, instructions: List[Instruction]):
        raise NotImplementedError


class MemoryInstructionStore(InstructionStore):
    def __init__(self):
        self._entries: Dict[str, List[dict]] = {}

    def get(self, key: str) -> Optional[List[Instruction]]:
        raw = self._entries.get(key)
        if raw is None:
            return None
        return parse_instruction_stream(raw)

    def put(self, key: str, instructions: List[Instruction]):
        self._entries[key] = dump_instructions(instructions)


class FileInstructionStore(InstructionStore):
    """
    One pretty-printed JSON file per prompt under `cache_dir`.

    Entries may be edited by hand to correct a plan; they are re-validated
    on every read. Writes are not locked: the same key always gets an
    equivalent plan.
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"instructions_{key}.json"

    def get(self, key: str) -> Optional[List[Instruction]]:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise InstructionValidationError(f"Cache entry {path} is not valid JSON: {e}",
                                             [{"step_id": -1, "errors": [str(e)]}])
        return parse_instruction_stream(raw)

    def put(self, key: str, instructions: List[Instruction]):
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(dump_instructions(instructions), f, indent=2, ensure_ascii=False)
        logger.info("cached %d instructions at %s", len(instructions), path)
