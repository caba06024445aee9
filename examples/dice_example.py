"""Dice economy: seven dice tiers, a small skill tree, milestones and missions."""
from __future__ import annotations

from idlecore.definition import EconomyConfig, EconomyDefinition
from idlecore.goal import GoalDefinition, GoalMetric, GoalScope, Reward, RewardType
from idlecore.modifier import Modifier, Stat
from idlecore.scaling import Scaling
from idlecore.skills import SkillNodeDef
from idlecore.units import UnitDef, UnitTier


def _dice(tier: UnitTier, name: str, payout: float, dm: float, cost: float, growth: float) -> UnitDef:
    return UnitDef(
        tier=tier,
        display_name=name,
        base_payout=payout,
        dm_per_roll=dm,
        shop_base_cost=cost,
        shop_scaling=Scaling.exponential(growth),
    )


def _daily(id: str, metric: GoalMetric, target: float, reward: Reward, name: str) -> GoalDefinition:
    return GoalDefinition.mission(id, GoalScope.DAILY, metric, target, reward, display_name=name)


def _weekly(id: str, metric: GoalMetric, target: float, reward: Reward, name: str) -> GoalDefinition:
    return GoalDefinition.mission(id, GoalScope.WEEKLY, metric, target, reward, display_name=name)


def define_economy() -> EconomyDefinition:
    money = RewardType.MONEY
    dm = RewardType.DARK_MATTER
    shards = RewardType.TIME_SHARDS

    return EconomyDefinition(
        config=EconomyConfig(
            name="Dice Example",
            starting_money=0.0,
            ascension_cost=1000.0,
        ),
        units=[
            _dice(UnitTier.BASIC, "Basic Dice", 1, 0.0, 10, 1.15),
            _dice(UnitTier.BRONZE, "Bronze Dice", 3, 0.0, 100, 1.18),
            _dice(UnitTier.SILVER, "Silver Dice", 10, 0.05, 500, 1.2),
            _dice(UnitTier.GOLD, "Gold Dice", 50, 0.2, 2500, 1.22),
            _dice(UnitTier.EMERALD, "Emerald Dice", 250, 1.0, 15000, 1.25),
            _dice(UnitTier.RUBY, "Ruby Dice", 1500, 5.0, 100000, 1.28),
            _dice(UnitTier.DIAMOND, "Diamond Dice", 10000, 25.0, 1000000, 1.3),
        ],
        skills=[
            SkillNodeDef(
                "core",
                display_name="Dark Matter Core",
                description="The source of all power. Unlocks the skill tree.",
                cost=0,
                branch="core",
            ),
            SkillNodeDef(
                "loose_change",
                display_name="Loose Change",
                description="+25% money from all dice rolls.",
                cost=5000,
                prerequisites=["core"],
                modifiers=[Modifier.add(Stat.GLOBAL_MONEY_MULTIPLIER, 0.25)],
                branch="money",
            ),
            SkillNodeDef(
                "compound_interest",
                display_name="Compound Interest",
                description="+50% money from all rolls (multiplicative).",
                cost=50000,
                prerequisites=["loose_change"],
                modifiers=[Modifier.mult(Stat.GLOBAL_MONEY_MULTIPLIER, 1.5)],
                branch="money",
            ),
            SkillNodeDef(
                "jackpot_chance",
                display_name="Jackpot Chance",
                description="Rolls have a 3% chance to pay 10x their final money value.",
                cost=1500000,
                prerequisites=["compound_interest"],
                modifiers=[
                    Modifier.add(Stat.JACKPOT_CHANCE, 0.03),
                    Modifier.mult(Stat.JACKPOT_MULTIPLIER, 5.0),
                ],
                branch="money",
            ),
            SkillNodeDef(
                "first_assistant",
                display_name="First Assistant",
                description="Unlocks Helper Hands. +1 helper hand cap.",
                cost=7500,
                prerequisites=["core"],
                modifiers=[Modifier.add(Stat.HELPER_MAX_COUNT, 1)],
                branch="automation",
            ),
            SkillNodeDef(
                "greased_gears",
                display_name="Greased Gears",
                description="Helper Hands roll 20% faster.",
                cost=15000,
                prerequisites=["first_assistant"],
                modifiers=[Modifier.mult(Stat.HELPER_SPEED_MULTIPLIER, 1.2)],
                branch="automation",
            ),
            SkillNodeDef(
                "more_hands",
                display_name="More Hands",
                description="+5 to max Helper Hand cap.",
                cost=60000,
                prerequisites=["first_assistant"],
                modifiers=[Modifier.add(Stat.HELPER_MAX_COUNT, 5)],
                branch="automation",
            ),
            SkillNodeDef(
                "two_at_once",
                display_name="Two-at-Once",
                description="Each Helper Hand rolls 2 different dice per cycle.",
                cost=80000,
                prerequisites=["greased_gears"],
                modifiers=[Modifier.add(Stat.HELPER_EXTRA_ROLLS, 1)],
                branch="automation",
            ),
            SkillNodeDef(
                "overtime",
                display_name="Overtime",
                description="Helper Hands work at full speed while you are away.",
                cost=400000,
                prerequisites=["more_hands"],
                modifiers=[Modifier.mult(Stat.OFFLINE_EFFICIENCY, 4.0)],
                branch="automation",
            ),
            SkillNodeDef(
                "daily_rewards",
                display_name="Daily Rewards",
                description="Check in every day for a growing streak of rewards.",
                cost=5000,
                prerequisites=["core"],
                unlocks=["daily_login"],
                branch="utility",
            ),
            SkillNodeDef(
                "roll_burst",
                display_name="Roll Burst",
                description="Active skill: roll every die at once. 30s cooldown.",
                cost=60000,
                prerequisites=["loose_change"],
                unlocks=["roll_burst"],
                branch="active",
            ),
            SkillNodeDef(
                "rapid_cooldown",
                display_name="Rapid Cooldown",
                description="Active skill cooldowns are 25% shorter.",
                cost=100000,
                prerequisites=["roll_burst"],
                modifiers=[Modifier.mult(Stat.SKILL_COOLDOWN_MULTIPLIER, 0.75)],
                branch="active",
            ),
            SkillNodeDef(
                "hyperburst",
                display_name="Hyperburst",
                description="Active skill: double all roll payouts for 10s. 45s cooldown.",
                cost=2500000,
                prerequisites=["rapid_cooldown"],
                unlocks=["hyperburst"],
                branch="active",
            ),
        ],
        milestones=[
            GoalDefinition.milestone("money_1k", GoalMetric.LIFETIME_MONEY, 1000,
                                     Reward(shards, 5), display_name="First Grand"),
            GoalDefinition.milestone("money_10k", GoalMetric.LIFETIME_MONEY, 10000,
                                     Reward(shards, 15), display_name="Getting Rich", tier=2),
            GoalDefinition.milestone("money_1m", GoalMetric.LIFETIME_MONEY, 1000000,
                                     Reward(RewardType.PERMANENT_MONEY_BOOST, 0.05),
                                     display_name="Millionaire", tier=4),
            GoalDefinition.milestone("dm_1000", GoalMetric.LIFETIME_DARK_MATTER, 1000,
                                     Reward(RewardType.PERMANENT_DARK_MATTER_BOOST, 0.05),
                                     display_name="Dark Hoarder", tier=3),
            GoalDefinition.milestone("rolls_100", GoalMetric.TOTAL_ROLLS, 100,
                                     Reward(shards, 5), display_name="Roller"),
            GoalDefinition.milestone("jackpot_10", GoalMetric.TOTAL_JACKPOTS, 10,
                                     Reward(shards, 10), display_name="Lucky Streak"),
            GoalDefinition.milestone("dice_5", GoalMetric.MAX_UNITS_OWNED, 5,
                                     Reward(shards, 5), display_name="Small Collection"),
            GoalDefinition.milestone("fracture_1", GoalMetric.TOTAL_PRESTIGES, 1,
                                     Reward(shards, 25), display_name="First Fracture"),
            GoalDefinition.milestone("missions_10", GoalMetric.TOTAL_MISSIONS_COMPLETED, 10,
                                     Reward(shards, 20), display_name="Task Master"),
            GoalDefinition.milestone("destroy_1", GoalMetric.TOTAL_UNITS_DESTROYED, 1,
                                     Reward(shards, 10), display_name="First Sacrifice"),
        ],
        daily_missions=[
            _daily("daily_roll_50", GoalMetric.ROLLS, 50, Reward(money, 500), "Roll 50 Dice"),
            _daily("daily_earn_1000", GoalMetric.MONEY_EARNED, 1000, Reward(money, 250),
                   "Earn 1,000 Money"),
            _daily("daily_buy_3", GoalMetric.UNITS_BOUGHT, 3, Reward(dm, 5), "Buy 3 Dice"),
            _daily("daily_skill_1", GoalMetric.SKILLS_UNLOCKED, 1, Reward(money, 300),
                   "Unlock 1 Skill"),
            _daily("daily_jackpot_1", GoalMetric.JACKPOTS, 1, Reward(dm, 10), "Hit a Jackpot"),
        ],
        weekly_missions=[
            _weekly("weekly_roll_500", GoalMetric.ROLLS, 500, Reward(dm, 25), "Roll 500 Dice"),
            _weekly("weekly_earn_50k", GoalMetric.MONEY_EARNED, 50000, Reward(dm, 30),
                    "Earn 50,000 Money"),
            _weekly("weekly_dm_100", GoalMetric.DARK_MATTER_EARNED, 100, Reward(money, 5000),
                    "Earn 100 Dark Matter"),
            _weekly("weekly_buy_10", GoalMetric.UNITS_BOUGHT, 10, Reward(dm, 20), "Buy 10 Dice"),
            _weekly("weekly_skill_5", GoalMetric.SKILLS_UNLOCKED, 5, Reward(dm, 50),
                    "Unlock 5 Skills"),
            _weekly("weekly_jackpot_5", GoalMetric.JACKPOTS, 5, Reward(dm, 40), "Hit 5 Jackpots"),
            _weekly("weekly_spend_10k", GoalMetric.MONEY_SPENT, 10000,
                    Reward(RewardType.MONEY_BOOST, 50, duration=600), "Spend 10,000 Money"),
        ],
    )
