from greencredits.core.enums import BadgeCounter
from greencredits.models.credit import (
    BadgeDefinition,
    CreditActions,
    QualityWeights,
    RewardCatalog,
)

REWARD_CATALOG = RewardCatalog(
    version="2025.1",
    actions=CreditActions(),
    quality=QualityWeights(),
    badges=(
        BadgeDefinition(key="first_report", name="First Step", icon="🌱",
                        counter=BadgeCounter.report_count, threshold=1),
        BadgeDefinition(key="eco_warrior", name="Eco Warrior", icon="♻️",
                        counter=BadgeCounter.report_count, threshold=10),
        BadgeDefinition(key="green_champion", name="Green Champion", icon="🏆",
                        counter=BadgeCounter.report_count, threshold=50),
        BadgeDefinition(key="planet_hero", name="Planet Hero", icon="🌍",
                        counter=BadgeCounter.report_count, threshold=100),
        BadgeDefinition(key="credit_collector", name="Credit Collector", icon="💰",
                        counter=BadgeCounter.total_credits, threshold=500),
        BadgeDefinition(key="elite_guardian", name="Elite Guardian", icon="👑",
                        counter=BadgeCounter.total_credits, threshold=1000),
    ),
)
