from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Query
from thrune.core.db import connect

from .schemas import (
    CustomAchievementCreateIn,
    CustomAchievementOut,
    CustomAchievementPatchIn,
    CustomMilestoneCreateIn,
    CustomMilestoneOut,
    CustomMilestonePatchIn,
    DefinitionsOut,
    DeleteOut,
    RaritySettings,
    RaritySettingsPatchIn,
    RarityRecalcOut,
    RevokeOut,
    StaticAchievementIn,
    StaticAchievementOut,
    StaticMilestoneIn,
    StaticMilestoneOut,
    UnlockIn,
    UnlockOut,
)
from .service import (
    create_custom_achievement,
    create_custom_milestone,
    delete_custom_achievement,
    delete_custom_milestone,
    get_custom_achievement,
    get_custom_milestone,
    get_rarity_settings,
    list_custom_achievements,
    list_custom_milestones,
    list_static_achievements,
    list_static_milestones,
    list_unlocks,
    load_definitions,
    patch_custom_achievement,
    patch_custom_milestone,
    put_rarity_settings,
    put_static_achievement,
    put_static_milestone,
    recalculate_rarity,
    reset_static_achievement,
    reset_static_milestone,
    revoke_achievement,
    unlock_achievement,
)

router = APIRouter(tags=["achievements"])


@router.get("/achievements/definitions", response_model=DefinitionsOut)
def api_definitions() -> DefinitionsOut:
    conn = connect()
    try:
        milestones, achievements = load_definitions(conn)
    finally:
        conn.close()
    return DefinitionsOut(milestones=[asdict(m) for m in milestones], achievements=[asdict(a) for a in achievements])


# custom achievements
@router.get("/achievements", response_model=List[CustomAchievementOut])
def api_list_achievements(include_inactive: bool = Query(False)) -> List[CustomAchievementOut]:
    return list_custom_achievements(include_inactive=include_inactive)


@router.post("/achievements", response_model=CustomAchievementOut, status_code=201)
def api_create_achievement(body: CustomAchievementCreateIn) -> CustomAchievementOut:
    return create_custom_achievement(body.model_dump())


@router.get("/achievements/{achievement_id}", response_model=CustomAchievementOut)
def api_get_achievement(achievement_id: str) -> CustomAchievementOut:
    return get_custom_achievement(achievement_id)


@router.patch("/achievements/{achievement_id}", response_model=CustomAchievementOut)
def api_patch_achievement(achievement_id: str, body: CustomAchievementPatchIn) -> CustomAchievementOut:
    return patch_custom_achievement(achievement_id, body.model_dump(exclude_unset=True))


@router.delete("/achievements/{achievement_id}", response_model=DeleteOut)
def api_delete_achievement(achievement_id: str) -> DeleteOut:
    return DeleteOut(**delete_custom_achievement(achievement_id))


# custom milestones
@router.get("/milestones", response_model=List[CustomMilestoneOut])
def api_list_milestones(include_inactive: bool = Query(False)) -> List[CustomMilestoneOut]:
    return list_custom_milestones(include_inactive=include_inactive)


@router.post("/milestones", response_model=CustomMilestoneOut, status_code=201)
def api_create_milestone(body: CustomMilestoneCreateIn) -> CustomMilestoneOut:
    return create_custom_milestone(body.model_dump())


@router.get("/milestones/{milestone_id}", response_model=CustomMilestoneOut)
def api_get_milestone(milestone_id: str) -> CustomMilestoneOut:
    return get_custom_milestone(milestone_id)


@router.patch("/milestones/{milestone_id}", response_model=CustomMilestoneOut)
def api_patch_milestone(milestone_id: str, body: CustomMilestonePatchIn) -> CustomMilestoneOut:
    return patch_custom_milestone(milestone_id, body.model_dump(exclude_unset=True))


@router.delete("/milestones/{milestone_id}", response_model=DeleteOut)
def api_delete_milestone(milestone_id: str) -> DeleteOut:
    return DeleteOut(**delete_custom_milestone(milestone_id))


# static definitions, addressed by position
@router.get("/static_milestones", response_model=List[StaticMilestoneOut])
def api_list_static_milestones() -> List[StaticMilestoneOut]:
    return list_static_milestones()


@router.put("/static_milestones/{index}", response_model=StaticMilestoneOut)
def api_put_static_milestone(index: int, body: StaticMilestoneIn) -> StaticMilestoneOut:
    return put_static_milestone(index, body.model_dump())


@router.delete("/static_milestones/{index}", response_model=StaticMilestoneOut)
def api_reset_static_milestone(index: int) -> StaticMilestoneOut:
    return reset_static_milestone(index)


@router.get("/static_achievements", response_model=List[StaticAchievementOut])
def api_list_static_achievements() -> List[StaticAchievementOut]:
    return list_static_achievements()


@router.put("/static_achievements/{index}", response_model=StaticAchievementOut)
def api_put_static_achievement(index: int, body: StaticAchievementIn) -> StaticAchievementOut:
    return put_static_achievement(index, body.model_dump())


@router.delete("/static_achievements/{index}", response_model=StaticAchievementOut)
def api_reset_static_achievement(index: int) -> StaticAchievementOut:
    return reset_static_achievement(index)


# manual unlocks
@router.get("/characters/{character_id}/achievements", response_model=List[UnlockOut])
def api_list_unlocks(character_id: str) -> List[UnlockOut]:
    return list_unlocks(character_id)


@router.post("/characters/{character_id}/achievements", response_model=UnlockOut)
def api_unlock(character_id: str, body: UnlockIn) -> UnlockOut:
    row, already = unlock_achievement(character_id, body.achievement_id)
    return UnlockOut(**row, already_unlocked=already)


@router.delete("/characters/{character_id}/achievements/{achievement_id}", response_model=RevokeOut)
def api_revoke(character_id: str, achievement_id: str) -> RevokeOut:
    return RevokeOut(**revoke_achievement(character_id, achievement_id))


# rarity
@router.get("/achievement_settings", response_model=RaritySettings)
def api_get_settings() -> RaritySettings:
    return RaritySettings(**get_rarity_settings())


@router.patch("/achievement_settings", response_model=RaritySettings)
def api_patch_settings(body: RaritySettingsPatchIn) -> RaritySettings:
    return RaritySettings(**put_rarity_settings(body.model_dump(exclude_unset=True)))


@router.post("/achievements/recalculate_rarity", response_model=RarityRecalcOut)
def api_recalculate_rarity() -> RarityRecalcOut:
    return RarityRecalcOut(**recalculate_rarity())
