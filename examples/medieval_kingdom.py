"""Medieval kingdom: the reference content set for the engine."""
from __future__ import annotations

from kingdomengine.achievement import (
    AchievementCategory,
    AchievementDef,
    AchievementRequirement,
    AchievementReward,
    Rarity,
)
from kingdomengine.action import ActionDef
from kingdomengine.building import BuildingDef
from kingdomengine.cost_scaling import CostCurve
from kingdomengine.definition import GameConfig, GameSettings
from kingdomengine.effect import Effect, EffectType
from kingdomengine.event import EventChoice, EventDef
from kingdomengine.loop_action import LoopActionDef, LoopCategory
from kingdomengine.requirement import Req
from kingdomengine.resource import ResourceDef
from kingdomengine.state import GameState
from kingdomengine.technology import TechnologyDef
from kingdomengine.upgrade import PrestigeUpgradeDef

BASIC_RESOURCES = ("gold", "wood", "stone", "food")


def _bonus(**amounts: float):
    def _apply(state: GameState) -> GameState:
        return state.add_resources(amounts)

    return _apply


# ── Resources & buildings ────────────────────────────────────────────


def _resources() -> list[ResourceDef]:
    return [
        ResourceDef("gold", "Gold", initial_amount=10, click_base=1),
        ResourceDef("wood", "Wood"),
        ResourceDef("stone", "Stone"),
        ResourceDef("food", "Food", click_base=0.1),
        ResourceDef("prestige", "Prestige"),
        ResourceDef("research_points", "Research Points"),
    ]


def _buildings() -> list[BuildingDef]:
    return [
        BuildingDef(
            "woodcutter", "Woodcutter", "Fells trees for a steady supply of wood.",
            base_cost={"gold": 15}, cost_scale=1.15,
            base_prod={"wood": 1.2}, category="production",
        ),
        BuildingDef(
            "quarry", "Quarry", "Cuts stone from the hills.",
            base_cost={"gold": 30, "wood": 5}, cost_scale=1.18,
            base_prod={"stone": 0.8}, category="production",
        ),
        BuildingDef(
            "farm", "Farm", "Feeds the kingdom.",
            base_cost={"gold": 25, "wood": 8}, cost_scale=1.16,
            base_prod={"food": 1.5}, category="production",
        ),
        BuildingDef(
            "blacksmith", "Blacksmith", "Turns wood and stone into coin.",
            base_cost={"gold": 50, "wood": 15, "stone": 10}, cost_scale=1.20,
            base_prod={"gold": 2.5}, base_use={"wood": 0.3, "stone": 0.2},
            category="industry",
        ),
        BuildingDef(
            "castle", "Castle", "Projects royal power. Consumes food.",
            base_cost={"gold": 200, "wood": 50, "stone": 100, "food": 20}, cost_scale=1.25,
            base_prod={"prestige": 0.1}, base_use={"food": 0.5}, category="military",
        ),
        BuildingDef(
            "library", "Library", "Scribes copy texts and produce research.",
            base_cost={"gold": 100, "wood": 30}, cost_scale=1.2,
            base_prod={"research_points": 0.5}, base_use={"gold": 0.1},
            requires_tech=["writing"], category="research",
        ),
        BuildingDef(
            "university", "University", "Scholars debate, study and eat.",
            base_cost={"gold": 300, "stone": 80, "wood": 60}, cost_scale=1.22,
            base_prod={"research_points": 1.5}, base_use={"gold": 0.5, "food": 0.3},
            requires_tech=["mathematics"], category="research",
        ),
        BuildingDef(
            "laboratory", "Laboratory", "Alchemists at work.",
            base_cost={"gold": 500, "stone": 150, "research_points": 50}, cost_scale=1.25,
            base_prod={"research_points": 3}, base_use={"gold": 1},
            requires_tech=["chemistry"], category="research",
        ),
    ]


def _technologies() -> list[TechnologyDef]:
    return [
        TechnologyDef(
            "writing", "Writing", "Record knowledge for future generations.",
            base_cost={"gold": 50}, research_time=30, unlocks_buildings=["library"],
        ),
        TechnologyDef(
            "mathematics", "Mathematics", "Numbers beyond counting sheep.",
            base_cost={"gold": 100, "research_points": 10}, research_time=60,
            requires_tech=["writing"], unlocks_buildings=["university"],
        ),
        TechnologyDef(
            "engineering", "Engineering", "Better tools yield a stockpile of stone.",
            base_cost={"gold": 150, "stone": 50, "research_points": 20}, research_time=90,
            requires_tech=["mathematics"], effect=_bonus(stone=50),
        ),
        TechnologyDef(
            "chemistry", "Chemistry", "The study of substances.",
            base_cost={"gold": 200, "research_points": 40}, research_time=120,
            requires_tech=["mathematics"], unlocks_buildings=["laboratory"],
        ),
        TechnologyDef(
            "physics", "Physics", "The laws that move the world.",
            base_cost={"gold": 300, "research_points": 80}, research_time=150,
            requires_tech=["engineering", "chemistry"],
        ),
        TechnologyDef(
            "biology", "Biology", "Crop rotation fills the granaries.",
            base_cost={"gold": 250, "food": 100, "research_points": 60}, research_time=150,
            requires_tech=["chemistry"], effect=_bonus(food=200),
        ),
    ]


# ── Prestige upgrades ────────────────────────────────────────────────


def _upgrades() -> list[PrestigeUpgradeDef]:
    return [
        PrestigeUpgradeDef(
            "royalDecrees", "Royal Decrees", "Each level adds 25% to click gains.",
            cost_curve=CostCurve.exponential(5, 1.6), max_level=20,
            effects=[Effect.linear(EffectType.CLICK_MULT, 0.25)],
        ),
        PrestigeUpgradeDef(
            "masterCraftsmen", "Master Craftsmen", "Each level cuts building costs by 3%.",
            cost_curve=CostCurve.exponential(8, 1.7), max_level=25,
            effects=[Effect.exponential(EffectType.COST_MULT, 0.97)],
        ),
        PrestigeUpgradeDef(
            "fertileLands", "Fertile Lands", "Each level adds 20% to food production.",
            cost_curve=CostCurve.exponential(6, 1.65), max_level=25,
            effects=[Effect.exponential(EffectType.PRODUCTION_MULT, 1.2, target="food")],
        ),
        PrestigeUpgradeDef(
            "militaryMight", "Military Might", "Each level adds 20% to prestige production.",
            cost_curve=CostCurve.exponential(10, 1.7), max_level=20,
            effects=[Effect.exponential(EffectType.PRODUCTION_MULT, 1.2, target="prestige")],
        ),
    ]


# ── Events ───────────────────────────────────────────────────────────


def _events() -> list[EventDef]:
    return [
        EventDef(
            "banditRaid", "Bandit Raid", "Bandits descend on the outlying villages.",
            weight=0.3, default_choice=1,
            choices=[
                EventChoice("Fight Back", takes={"wood": 2, "stone": 1}),
                EventChoice("Pay Tribute", gives={"gold": 5}, takes={"food": 1}, requires={"food": 1}),
            ],
        ),
        EventDef(
            "royalTax", "Royal Tax", "The crown demands its due.",
            weight=0.2, default_choice=0,
            choices=[
                EventChoice("Pay Tax", takes={"gold": 15}, requires={"gold": 15}),
                EventChoice("Refuse", takes={"prestige": 1}),
            ],
        ),
        EventDef(
            "bountifulHarvest", "Bountiful Harvest", "The fields overflow this season.",
            weight=0.1, default_choice=0,
            choices=[
                EventChoice("Harvest All", gives={"gold": 10, "wood": 5, "stone": 3, "food": 2}),
                EventChoice("Wait"),
            ],
        ),
        EventDef(
            "drought", "Drought", "No rain has fallen for weeks.",
            weight=0.2, default_choice=1,
            choices=[
                EventChoice("Pray for Rain", takes={"food": 1}),
                EventChoice("Accept Fate"),
            ],
        ),
        EventDef(
            "plague", "Plague", "Sickness spreads through the town.",
            weight=0.15, default_choice=1,
            choices=[
                EventChoice("Quarantine", takes={"prestige": 1}),
                EventChoice("Continue as Normal"),
            ],
        ),
        EventDef(
            "merchantVisit", "Merchant Visit", "A travelling merchant wants timber.",
            weight=0.2, default_choice=1,
            choices=[
                EventChoice("Accept Offer", gives={"gold": 10}, takes={"wood": 5}, requires={"wood": 5}),
                EventChoice("Reject"),
            ],
        ),
        EventDef(
            "mysteriousStranger", "Mysterious Stranger", "A cloaked figure offers a secret.",
            weight=0.1, default_choice=1,
            choices=[
                EventChoice("Accept", gives={"prestige": 1}, takes={"gold": 20}, requires={"gold": 20}),
                EventChoice("Decline"),
            ],
        ),
        EventDef(
            "festival", "Festival", "The people want to celebrate.",
            weight=0.1, default_choice=0,
            choices=[
                EventChoice("Participate", gives={"gold": 5, "food": 3, "prestige": 1}),
                EventChoice("Stay Home"),
            ],
        ),
    ]


# ── Actions ──────────────────────────────────────────────────────────


def _actions() -> list[ActionDef]:
    return [
        ActionDef("gatherWood", "Gather Wood", gains={"wood": 2}, category="basic"),
        ActionDef("gatherStone", "Gather Stone", gains={"stone": 1}, category="basic"),
        ActionDef("huntFood", "Hunt Food", gains={"food": 1}, category="basic"),
        ActionDef(
            "sellWood", "Sell Wood", cost={"wood": 10}, gains={"gold": 5},
            unlock_conditions=[Req.resource("wood", ">=", 50)], one_time_unlock=True,
            category="trade",
        ),
        ActionDef(
            "sellStone", "Sell Stone", cost={"stone": 5}, gains={"gold": 8},
            unlock_conditions=[Req.resource("stone", ">=", 25)], one_time_unlock=True,
            category="trade",
        ),
        ActionDef(
            "sellFood", "Sell Food", cost={"food": 20}, gains={"gold": 15},
            unlock_conditions=[Req.resource("food", ">=", 100)], one_time_unlock=True,
            category="trade",
        ),
        ActionDef(
            "craftTools", "Craft Tools", cost={"wood": 5}, gains={"stone": 2},
            unlock_conditions=[Req.building("blacksmith")], category="building",
        ),
        ActionDef(
            "forgeWeapons", "Forge Weapons", cost={"stone": 3}, gains={"gold": 10},
            unlock_conditions=[Req.building("blacksmith")], category="building",
        ),
        ActionDef(
            "farmWork", "Farm Work", cost={"food": 2}, gains={"wood": 5},
            unlock_conditions=[Req.building("farm")], category="building",
        ),
        ActionDef(
            "advancedMining", "Advanced Mining", gains={"stone": 3},
            unlock_conditions=[Req.technology("engineering")], category="technology",
        ),
        ActionDef(
            "scientificResearch", "Scientific Research", gains={"research_points": 2},
            unlock_conditions=[Req.technology("chemistry")], category="technology",
        ),
        ActionDef(
            "royalDiplomacy", "Royal Diplomacy", gains={"prestige": 1}, cooldown=60,
            unlock_conditions=[Req.technology("writing")], category="technology",
        ),
    ]


def _loop_actions() -> list[LoopActionDef]:
    g, c, r, m = (
        LoopCategory.GATHERING,
        LoopCategory.CRAFTING,
        LoopCategory.RESEARCH,
        LoopCategory.MILITARY,
    )
    return [
        LoopActionDef("basicGathering", "Basic Gathering", gains={"food": 5},
                      loop_points_required=1000, category=g),
        LoopActionDef("continuousMining", "Continuous Mining", cost={"food": 5},
                      gains={"stone": 10}, loop_points_required=1000,
                      unlock_conditions=[Req.building("quarry")], category=g),
        LoopActionDef("continuousLogging", "Continuous Logging", cost={"food": 5},
                      gains={"wood": 8}, loop_points_required=800,
                      unlock_conditions=[Req.building("woodcutter")], category=g),
        LoopActionDef("continuousFarming", "Continuous Farming", cost={"food": 5},
                      gains={"food": 12}, loop_points_required=1200,
                      unlock_conditions=[Req.building("farm"), Req.resource("food", ">=", 100)],
                      category=g),
        LoopActionDef("massToolProduction", "Mass Tool Production", cost={"wood": 20},
                      gains={"stone": 15}, loop_points_required=1500,
                      unlock_conditions=[Req.building("blacksmith")], category=c),
        LoopActionDef("weaponForging", "Weapon Forging", cost={"stone": 30},
                      gains={"gold": 25}, loop_points_required=2000,
                      unlock_conditions=[Req.building("blacksmith")], category=c),
        LoopActionDef("ongoingResearch", "Ongoing Research", cost={"food": 10},
                      gains={"research_points": 5}, loop_points_required=3000,
                      unlock_conditions=[Req.building("library")], category=r),
        LoopActionDef("advancedStudies", "Advanced Studies", cost={"food": 15, "gold": 5},
                      gains={"research_points": 10}, loop_points_required=5000,
                      unlock_conditions=[Req.building("university")], category=r),
        LoopActionDef("trainingSoldiers", "Training Soldiers", cost={"food": 20, "gold": 10},
                      gains={"prestige": 2}, loop_points_required=2500,
                      unlock_conditions=[Req.building("castle")], category=m),
        LoopActionDef("fortification", "Fortification",
                      cost={"stone": 50, "wood": 30, "gold": 20},
                      gains={"prestige": 5}, loop_points_required=4000,
                      unlock_conditions=[Req.building("castle")], category=m),
    ]


# ── Achievements ─────────────────────────────────────────────────────


def _req(type: str, target: str, value: float, operator: str = ">=") -> AchievementRequirement:
    return AchievementRequirement(type=type, target=target, value=value, operator=operator)


def _mult(target: str, value: float, permanent: bool = True) -> AchievementReward:
    return AchievementReward(type="multiplier", target=target, value=value, permanent=permanent)


def _grant(resource: str, amount: float) -> AchievementReward:
    return AchievementReward(type="resource", target=resource, value=amount)


def _ach(key, name, description, category, rarity, points, requirements, rewards, **kw) -> AchievementDef:
    return AchievementDef(
        key=key, name=name, description=description, category=category, rarity=rarity,
        points=points, requirements=requirements, rewards=rewards, **kw,
    )


def _achievements() -> list[AchievementDef]:
    R, B, T = AchievementCategory.RESOURCE, AchievementCategory.BUILDING, AchievementCategory.TECHNOLOGY
    A, E, P = AchievementCategory.ACTION, AchievementCategory.EVENT, AchievementCategory.PRESTIGE
    TM, CB, H = AchievementCategory.TIME, AchievementCategory.COMBO, AchievementCategory.HIDDEN
    common, uncommon, rare = Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE
    epic, legendary = Rarity.EPIC, Rarity.LEGENDARY
    all_buildings = ("woodcutter", "quarry", "farm", "blacksmith", "castle")
    all_techs = ("writing", "mathematics", "engineering", "chemistry", "physics", "biology")

    return [
        # Resources
        _ach("firstGold", "First Gold", "Earn your first 100 Gold", R, common, 10,
             [_req("resource", "gold", 100)], [_mult("click_gain", 1.1, permanent=False)]),
        _ach("woodCollector", "Wood Collector", "Accumulate 1,000 Wood", R, common, 15,
             [_req("resource", "wood", 1000)], [_grant("wood", 100)]),
        _ach("stoneMason", "Stone Mason", "Accumulate 500 Stone", R, common, 15,
             [_req("resource", "stone", 500)], [_grant("stone", 50)]),
        _ach("foodStockpile", "Food Stockpile", "Accumulate 2,000 Food", R, common, 20,
             [_req("resource", "food", 2000)], [_grant("food", 200)]),
        _ach("prestigious", "Prestigious", "Gain 10 Prestige", R, uncommon, 50,
             [_req("resource", "prestige", 10)], [_mult("prod_mul", 1.2)]),
        _ach("scholar", "Scholar", "Gain 100 Research Points", R, uncommon, 30,
             [_req("resource", "research_points", 100)], [_grant("research_points", 20)]),
        _ach("resourceMaster", "Resource Master",
             "Have 10,000 of each basic resource simultaneously", R, rare, 100,
             [_req("resource", k, 10000) for k in BASIC_RESOURCES], [_mult("prod_mul", 1.5)]),
        _ach("lifetimeWealth", "Lifetime Wealth", "Generate 1,000,000 Gold lifetime", R, epic, 200,
             [_req("resource", "lifetime.gold", 1_000_000)], [_mult("prod_mul", 2.0)]),
        # Buildings
        _ach("firstBuilding", "First Building", "Build your first building", B, common, 10,
             [_req("building", "total", 1)], [_grant("gold", 50)]),
        _ach("architect", "Architect", "Build 10 buildings total", B, common, 25,
             [_req("building", "total", 10)], [_mult("cost", 0.95, permanent=False)]),
        _ach("cityPlanner", "City Planner", "Build 5 different building types", B, uncommon, 40,
             [_req("building", k, 1) for k in all_buildings], [_mult("prod_mul", 1.3)]),
        _ach("industrialist", "Industrialist", "Build 50 buildings total", B, rare, 75,
             [_req("building", "total", 50)], [_mult("cost", 0.9)]),
        _ach("metropolis", "Metropolis", "Build 100 buildings total", B, epic, 150,
             [_req("building", "total", 100)], [_mult("prod_mul", 1.8)]),
        # Technologies
        _ach("firstDiscovery", "First Discovery", "Research your first technology", T, common, 20,
             [_req("technology", "writing", 1)], [_grant("research_points", 10)]),
        _ach("scholarTech", "Scholar", "Research 3 technologies", T, uncommon, 50,
             [_req("technology", k, 1) for k in all_techs[:3]], [_mult("prod_mul", 1.4)]),
        _ach("scientist", "Scientist", "Research all technologies", T, legendary, 300,
             [_req("technology", k, 1) for k in all_techs], [_mult("prod_mul", 3.0)]),
        # Actions
        _ach("clicker", "Clicker", "Perform 100 manual clicks", A, common, 15,
             [_req("click", "total", 100)], [_mult("click_gain", 1.2, permanent=False)]),
        _ach("dedicated", "Dedicated", "Perform 1,000 manual clicks", A, uncommon, 40,
             [_req("click", "total", 1000)], [_mult("click_gain", 1.5, permanent=False)]),
        _ach("clickMaster", "Click Master", "Perform 10,000 manual clicks", A, epic, 100,
             [_req("click", "total", 10000)], [_mult("click_gain", 2.0)]),
        _ach("actionHero", "Action Hero", "Unlock every trade action", A, rare, 60,
             [_req("action", k, 1) for k in ("sellWood", "sellStone", "sellFood")],
             [_mult("prod_mul", 1.6)]),
        # Events
        _ach("eventful", "Eventful", "Experience 10 events", E, common, 20,
             [_req("event", "count", 10)], [_grant("gold", 100)]),
        _ach("eventMaster", "Event Master", "Experience 50 events", E, rare, 80,
             [_req("event", "count", 50)], [_mult("prod_mul", 1.5)]),
        # Prestige
        _ach("firstAscension", "First Ascension", "Perform your first prestige", P, uncommon, 50,
             [_req("prestige", "count", 1)], [_mult("prod_mul", 1.3)]),
        _ach("ascended", "Ascended", "Perform 5 prestiges", P, rare, 100,
             [_req("prestige", "count", 5)], [_mult("prod_mul", 1.8)]),
        _ach("prestigeMaster", "Prestige Master", "Perform 25 prestiges", P, legendary, 250,
             [_req("prestige", "count", 25)], [_mult("prod_mul", 3.0)]),
        # Time
        _ach("dedicatedPlayer", "Dedicated Player", "Play for 1 hour total", TM, common, 30,
             [_req("time", "total", 3600)], [_mult("prod_mul", 1.2)]),
        _ach("marathon", "Marathon", "Play for 8 hours total", TM, rare, 100,
             [_req("time", "total", 28800)], [_mult("prod_mul", 1.8)]),
        _ach("speedRunner", "Speed Runner", "Reach 1,000 Gold in under 10 minutes", TM, rare, 75,
             [_req("resource", "gold", 1000), _req("time", "session", 600, "<=")],
             [_mult("prod_mul", 1.5, permanent=False)], repeatable=True),
        # Combos
        _ach("balancedKingdom", "Balanced Kingdom", "Have 100+ of each resource simultaneously",
             CB, uncommon, 50,
             [_req("resource", k, 100) for k in BASIC_RESOURCES], [_mult("prod_mul", 1.4)]),
        _ach("industrialComplex", "Industrial Complex", "Have 10+ of each building type",
             CB, epic, 150,
             [_req("building", k, 10) for k in all_buildings], [_mult("prod_mul", 2.5)]),
        # Hidden
        _ach("perfectionist", "Perfectionist", "Complete every resource achievement", H, legendary, 500,
             [AchievementRequirement("combo", "category_complete", 1, category="resource")],
             [_mult("prod_mul", 5.0)], hidden=True),
        _ach("completionist", "Completionist", "Unlock all achievements", H, legendary, 1000,
             [_req("combo", "all_complete", 1)], [_mult("prod_mul", 10.0)], hidden=True),
    ]


def define_game() -> GameConfig:
    return GameConfig(
        settings=GameSettings(name="Medieval Kingdom"),
        resources=_resources(),
        buildings=_buildings(),
        technologies=_technologies(),
        upgrades=_upgrades(),
        events=_events(),
        actions=_actions(),
        loop_actions=_loop_actions(),
        achievements=_achievements(),
    )
