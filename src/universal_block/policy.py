# src/universal_block/policy.py
import importlib
import logging
import pkgutil
from typing import Any, Dict, Iterable, List, Optional

from .model import TagPolicy

logger = logging.getLogger(__name__)


class TagPolicyTable:
    """
    Lookup table of tag policies, keyed by lowercase tag name.

    Default entries are discovered from the `universal_block.policies` package:
    every module exposing a `DEFINITION` (instance of `TagPolicy`) is registered.
    Additional entries can be registered at runtime or loaded from config,
    so the transcoders never need to know about specific dynamic tags.
    """

    def __init__(self, policies: Optional[Iterable[TagPolicy]] = None):
        self._policies: Dict[str, TagPolicy] = {}
        for policy in policies or []:
            self.register(policy)

    @classmethod
    def discover(cls) -> "TagPolicyTable":
        """Builds a table from every policy definition module in `universal_block.policies`."""
        table = cls()
        import universal_block.policies as policies_pkg

        for _, name, _ in pkgutil.iter_modules(policies_pkg.__path__):
            full_name = f"universal_block.policies.{name}"
            module = importlib.import_module(full_name)
            definition = getattr(module, "DEFINITION", None)
            if isinstance(definition, TagPolicy):
                table.register(definition)
                logger.debug(f"Tag policy loaded: {definition.tag_name}")
        return table

    @classmethod
    def from_config(cls, entries: Optional[Dict[str, Dict[str, Any]]] = None) -> "TagPolicyTable":
        """
        Default table extended with entries from a `tag_policies` config section, e.g.
        {"include": {"content_model": "empty", "force_self_closing": true}}.
        """
        table = cls.discover()
        for tag_name, raw in (entries or {}).items():
            table.register(TagPolicy(tag_name=tag_name, **(raw or {})))
        return table

    def register(self, policy: TagPolicy) -> None:
        """Adds a policy, replacing any existing entry for the same tag."""
        self._policies[policy.tag_name] = policy

    def lookup(self, tag_name: Optional[str]) -> Optional[TagPolicy]:
        """Case-insensitive lookup. Unknown (or missing) tags yield None."""
        if not tag_name:
            return None
        return self._policies.get(tag_name.lower())

    def self_closing_tags(self) -> List[str]:
        """Tags whose policy forces self-closing rendering."""
        return [name for name, p in self._policies.items() if p.force_self_closing is True]

    def to_config(self) -> Dict[str, Dict[str, Any]]:
        """Plain-dict form, suitable for shipping to worker processes."""
        return {
            name: policy.model_dump(mode="json", exclude={"tag_name"})
            for name, policy in self._policies.items()
        }

    def __contains__(self, tag_name: str) -> bool:
        return self.lookup(tag_name) is not None

    def __len__(self) -> int:
        return len(self._policies)


_default_table: Optional[TagPolicyTable] = None


def default_policies() -> TagPolicyTable:
    """Shared read-only table with the shipped policies (set, loop, if)."""
    global _default_table
    if _default_table is None:
        _default_table = TagPolicyTable.discover()
    return _default_table
