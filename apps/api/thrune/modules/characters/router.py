from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from thrune.core.deps import get_catalog
from thrune.rules.catalog import Catalog

from .schemas import (
    AttributePurchaseIn,
    AuditOut,
    CharacterCreateIn,
    CharacterDeleteOut,
    CharacterOut,
    CharacterPatchIn,
    CharacterRetireIn,
    CharactersListOut,
    PageOut,
    ProgressionOut,
    PurchaseOut,
    RecalculateOut,
    SecondArchetypeIn,
    SkillCostsOut,
    SkillPurchaseIn,
)
from .service import (
    audit,
    create_character,
    delete_character,
    get_character,
    list_characters,
    patch_character,
    progression,
    purchase_attribute,
    purchase_second_archetype,
    purchase_skill,
    recalculate_skill_costs,
    refund_skill,
    retire_character,
    skill_costs,
)

router = APIRouter(tags=["characters"])


def _clamp_limit(raw: int | None) -> int:
    if raw is None:
        return 50
    try:
        v = int(raw)
    except Exception:
        return 50
    return min(max(v, 1), 200)


def _clamp_offset(raw: int | None) -> int:
    if raw is None:
        return 0
    try:
        v = int(raw)
    except Exception:
        return 0
    return max(v, 0)


@router.get("/characters", response_model=CharactersListOut)
def api_list_characters(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    user_id: str | None = Query(None),
    include_retired: bool = Query(False),
) -> CharactersListOut:
    lim = _clamp_limit(limit)
    off = _clamp_offset(offset)
    items, total = list_characters(limit=lim, offset=off, user_id=user_id, include_retired=include_retired)
    has_more = (off + lim) < total
    return CharactersListOut(items=items, page=PageOut(offset=off, limit=lim, total=total, has_more=has_more))


@router.post("/characters", response_model=CharacterOut, status_code=201)
def api_create_character(body: CharacterCreateIn, catalog: Catalog = Depends(get_catalog)) -> CharacterOut:
    return create_character(catalog, body.model_dump())


@router.get("/characters/{character_id}", response_model=CharacterOut)
def api_get_character(character_id: str = Path(...)) -> CharacterOut:
    return get_character(character_id)


@router.patch("/characters/{character_id}", response_model=CharacterOut)
def api_patch_character(character_id: str, body: CharacterPatchIn) -> CharacterOut:
    return patch_character(character_id, body.model_dump(exclude_unset=True))


@router.delete("/characters/{character_id}", response_model=CharacterDeleteOut)
def api_delete_character(character_id: str) -> CharacterDeleteOut:
    return CharacterDeleteOut(**delete_character(character_id))


@router.post("/characters/{character_id}/retire", response_model=CharacterOut)
def api_retire_character(character_id: str, body: CharacterRetireIn | None = None) -> CharacterOut:
    return retire_character(character_id, reason=body.reason if body else None)


@router.post("/characters/{character_id}/skills", response_model=PurchaseOut)
def api_purchase_skill(
    character_id: str, body: SkillPurchaseIn, catalog: Catalog = Depends(get_catalog)
) -> PurchaseOut:
    return PurchaseOut(**purchase_skill(catalog, character_id, body.skill))


@router.delete("/characters/{character_id}/skills/{skill}", response_model=PurchaseOut)
def api_refund_skill(character_id: str, skill: str) -> PurchaseOut:
    return PurchaseOut(**refund_skill(character_id, skill))


@router.post("/characters/{character_id}/attributes", response_model=PurchaseOut)
def api_purchase_attribute(character_id: str, body: AttributePurchaseIn) -> PurchaseOut:
    return PurchaseOut(**purchase_attribute(character_id, body.attribute, body.points))


@router.post("/characters/{character_id}/second_archetype", response_model=PurchaseOut)
def api_purchase_second_archetype(
    character_id: str, body: SecondArchetypeIn, catalog: Catalog = Depends(get_catalog)
) -> PurchaseOut:
    return PurchaseOut(**purchase_second_archetype(catalog, character_id, body.archetype_id))


@router.get("/characters/{character_id}/skill_costs", response_model=SkillCostsOut)
def api_skill_costs(character_id: str, catalog: Catalog = Depends(get_catalog)) -> SkillCostsOut:
    return SkillCostsOut(**skill_costs(catalog, character_id))


@router.get("/characters/{character_id}/progression", response_model=ProgressionOut)
def api_progression(character_id: str, catalog: Catalog = Depends(get_catalog)) -> ProgressionOut:
    return ProgressionOut(**progression(catalog, character_id))


@router.get("/characters/{character_id}/audit", response_model=AuditOut)
def api_audit(character_id: str, catalog: Catalog = Depends(get_catalog)) -> AuditOut:
    return AuditOut(**audit(catalog, character_id))


@router.post("/characters/{character_id}/recalculate", response_model=RecalculateOut)
def api_recalculate(character_id: str, catalog: Catalog = Depends(get_catalog)) -> RecalculateOut:
    return RecalculateOut(**recalculate_skill_costs(catalog, character_id))
