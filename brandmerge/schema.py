"""
Versioned brand schema.

Each revision is an ordered list of field specs. The order is the key order
of the emitted brand objects, so ``brand`` and ``slug`` always come first.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

FieldKind = Literal["boolean", "integer", "array", "text", "notes", "derived"]

DEFAULT_REVISION = "v2"


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind = "text"
    aliases: Tuple[str, ...] = ()


class SchemaRevision(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fields: Tuple[FieldSpec, ...]

    def known_columns(self) -> FrozenSet[str]:
        """Canonical names plus every alias the revision accepts."""
        names = set()
        for spec in self.fields:
            names.add(spec.name)
            names.update(spec.aliases)
        return frozenset(names)


def _f(name: str, kind: FieldKind = "text", *aliases: str) -> FieldSpec:
    return FieldSpec(name=name, kind=kind, aliases=tuple(aliases))


V2 = SchemaRevision(
    name="v2",
    fields=(
        _f("brand"),
        _f("slug"),
        _f("parent_company"),
        _f("ownership_transparency"),
        _f("hq"),
        _f("year_founded", "integer"),
        _f("self_manufactured", "boolean"),
        _f("in_house_testing", "boolean"),
        _f("made_in_usa", "boolean"),
        _f("manufacturing_locations", "array"),
        _f("certification", "array", "certifications"),
        _f("assembled_in"),
        _f("ingredient_sourcing"),
        _f("ingredient_philosophy"),
        _f("proprietary_blends"),
        _f("product_categories", "array"),
        _f("product_types", "array"),
        _f("top_products", "array"),
        _f("unique_offering"),
        _f("glass_or_plastic"),
        _f("woman_owned", "boolean"),
        _f("vegan"),
        _f("allergen_free"),
        _f("clinically_tested"),
        _f("sustainability", "text", "sustainablity"),
        _f("non_profit_partner"),
        _f("recalls_notices"),
        _f("sources", "derived"),
        _f("verification_status", "derived"),
        _f("last_verified", "derived"),
        _f("testing_qa_notes", "notes"),
    ),
)

# Legacy revision: the four product-claim columns were Yes/No checkboxes
# and certifications was plural.
V1 = SchemaRevision(
    name="v1",
    fields=tuple(
        {
            "certification": _f("certifications", "array", "certification"),
            "proprietary_blends": _f("proprietary_blends", "boolean"),
            "vegan": _f("vegan", "boolean"),
            "allergen_free": _f("allergen_free", "boolean"),
            "clinically_tested": _f("clinically_tested", "boolean"),
        }.get(spec.name, spec)
        for spec in V2.fields
    ),
)

REVISIONS: Dict[str, SchemaRevision] = {V1.name: V1, V2.name: V2}


def get_revision(name: Optional[str] = None) -> SchemaRevision:
    try:
        return REVISIONS[name or DEFAULT_REVISION]
    except KeyError:
        raise ValueError(
            f"Unknown schema revision {name!r}; expected one of {', '.join(sorted(REVISIONS))}"
        ) from None
