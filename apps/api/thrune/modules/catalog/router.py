from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from thrune.core.deps import get_catalog
from thrune.rules.catalog import Catalog
from thrune.rules.costs import classify_skill

from .schemas import (
    ArchetypeOut,
    CultureOut,
    HeritageOut,
    SkillCostQuoteOut,
    SkillsOut,
    SkillValidateIn,
    SkillValidateOut,
)

router = APIRouter(tags=["catalog"])


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"{what} not found"})


@router.get("/skills", response_model=SkillsOut)
def api_list_skills(catalog: Catalog = Depends(get_catalog)) -> SkillsOut:
    return SkillsOut(items=list(catalog.skills), total=len(catalog.skills))


@router.post("/skills/validate", response_model=SkillValidateOut)
def api_validate_skills(body: SkillValidateIn, catalog: Catalog = Depends(get_catalog)) -> SkillValidateOut:
    invalid = [s for s in body.skills if not catalog.is_valid_skill(s)]
    return SkillValidateOut(valid=not invalid, invalid=invalid)


@router.get("/skills/{skill}/cost", response_model=SkillCostQuoteOut)
def api_quote_skill_cost(
    skill: str,
    heritage_id: Optional[str] = Query(None),
    primary_archetype_id: Optional[str] = Query(None),
    secondary_archetype_id: Optional[str] = Query(None),
    catalog: Catalog = Depends(get_catalog),
) -> SkillCostQuoteOut:
    tier = classify_skill(catalog, skill, heritage_id, primary_archetype_id, secondary_archetype_id)
    return SkillCostQuoteOut(
        skill=skill,
        cost=int(tier),
        tier=tier.name.lower(),
        heritage_id=heritage_id,
        primary_archetype_id=primary_archetype_id,
        secondary_archetype_id=secondary_archetype_id,
    )


@router.get("/heritages", response_model=List[HeritageOut])
def api_list_heritages(catalog: Catalog = Depends(get_catalog)) -> List[HeritageOut]:
    return [HeritageOut(**asdict(h)) for h in catalog.heritages]


@router.get("/heritages/{heritage_id}", response_model=HeritageOut)
def api_get_heritage(heritage_id: str, catalog: Catalog = Depends(get_catalog)) -> HeritageOut:
    h = catalog.heritage(heritage_id)
    if h is None:
        raise _not_found("heritage")
    return HeritageOut(**asdict(h))


@router.get("/heritages/{heritage_id}/cultures", response_model=List[CultureOut])
def api_list_cultures(heritage_id: str, catalog: Catalog = Depends(get_catalog)) -> List[CultureOut]:
    if catalog.heritage(heritage_id) is None:
        raise _not_found("heritage")
    return [CultureOut(**asdict(c)) for c in catalog.cultures_for(heritage_id)]


@router.get("/archetypes", response_model=List[ArchetypeOut])
def api_list_archetypes(catalog: Catalog = Depends(get_catalog)) -> List[ArchetypeOut]:
    return [ArchetypeOut(**asdict(a)) for a in catalog.archetypes]


@router.get("/archetypes/{archetype_id}", response_model=ArchetypeOut)
def api_get_archetype(archetype_id: str, catalog: Catalog = Depends(get_catalog)) -> ArchetypeOut:
    a = catalog.archetype(archetype_id)
    if a is None:
        raise _not_found("archetype")
    return ArchetypeOut(**asdict(a))
