"""Pipeline orchestration for the resolve and tokenize flows."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import TagDocConfig, load_config
from .factory import DocFactory
from .logging import get_logger
from .models import Diagnostic
from .parsers.comments import parse_comment
from .resolver import GraphResolver
from .stores.symbol_store import SymbolStore


@dataclass
class ResolveOutcome:
    """Result of one resolve run."""

    store: SymbolStore
    diagnostics: List[Diagnostic] = field(default_factory=list)
    created: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "records": self.store.to_dicts(),
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }


class Orchestrator:
    """Coordinates record creation and resolution for a batch of symbols."""

    def __init__(self, config: TagDocConfig | None = None) -> None:
        self._config = config
        self.logger = get_logger("orchestrator")

    def run_resolve(
        self,
        input_path: Path | str,
        *,
        output_path: Path | str | None = None,
        config_path: Path | str | None = None,
    ) -> ResolveOutcome:
        """Create records for every symbol in ``input_path`` and resolve them.

        When ``output_path`` is given the JSON payload is written there.
        """
        source = Path(input_path).expanduser()
        self.logger.info("Reading symbols from %s", source)
        entries = self.load_symbols(source)

        config = self._resolve_config(source, config_path)
        outcome = self.resolve_entries(entries, config=config)

        if output_path is not None:
            target = Path(output_path).expanduser()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.dumps(outcome), encoding="utf-8")
            self.logger.info("Wrote %d records to %s", len(outcome.store), target)
        return outcome

    def resolve_entries(
        self, entries: Iterable[Mapping[str, Any]], *, config: TagDocConfig | None = None
    ) -> ResolveOutcome:
        config = config or self._config or TagDocConfig(root=Path.cwd())
        factory = DocFactory(strict=config.resolve.strict)
        created = 0
        for entry in entries:
            factory.create_from_mapping(entry)
            created += 1
        self.logger.debug("Created %d records", created)

        GraphResolver(config.resolve).resolve(factory.store)
        if factory.diagnostics:
            self.logger.warning("%d annotation(s) could not be parsed", len(factory.diagnostics))
        return ResolveOutcome(store=factory.store, diagnostics=factory.diagnostics, created=created)

    @staticmethod
    def load_symbols(path: Path) -> List[Mapping[str, Any]]:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path.name} must contain a JSON array of symbols")
        return data

    @staticmethod
    def tokenize(comment: Optional[str]) -> List[Dict[str, str]]:
        return [tag.to_dict() for tag in parse_comment(comment)]

    @staticmethod
    def dumps(outcome: ResolveOutcome) -> str:
        return json.dumps(outcome.to_payload(), indent=2, sort_keys=True, default=str) + "\n"

    def _resolve_config(self, source: Path, config_path: Path | str | None) -> TagDocConfig:
        if self._config is not None:
            return self._config
        location = Path(config_path) if config_path is not None else source.parent
        return load_config(location)


__all__ = ["Orchestrator", "ResolveOutcome"]
