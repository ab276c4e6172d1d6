"""Quest grouping and star suggestions.

Quests come in three types: duties (expected, missing one costs stars),
bonus quests (extra effort earns stars) and violations (bad behaviour costs
stars).  Children only ever see active bonus quests.
"""

from typing import NamedTuple, Optional, Protocol, Sequence

QUEST_TYPES = ("duty", "bonus", "violation")
QUEST_SCOPES = ("self", "family", "other")
QUEST_CATEGORIES = (
    "health",
    "study",
    "chores",
    "hygiene",
    "learning",
    "social",
    "creativity",
    "exercise",
    "reading",
    "music",
    "art",
    "kindness",
    "responsibility",
    "other",
)


class QuestLike(Protocol):
    type: str
    scope: str
    category: Optional[str]
    is_active: bool


class QuestGroup(NamedTuple):
    key: str
    title_en: str
    title_zh: str
    quests: list


class StarRange(NamedTuple):
    min: int
    max: int
    default: int


def group_quests(quests: Sequence[QuestLike]) -> list[QuestGroup]:
    """Group quests the way the parent quest list shows them.

    Empty groups are left out.
    """
    groups = [
        QuestGroup("duties", "My Duties", "日常本分",
                   [q for q in quests if q.type == "duty"]),
        QuestGroup("family", "Helping Family", "帮助家人",
                   [q for q in quests if q.type == "bonus" and q.scope == "family"]),
        QuestGroup("self", "Self Bonus", "自我提升",
                   [q for q in quests if q.type == "bonus" and q.scope == "self"]),
        QuestGroup("others", "Helping Others", "帮助他人",
                   [q for q in quests if q.type == "bonus" and q.scope == "other"]),
        QuestGroup("violations", "Violations", "违规行为",
                   [q for q in quests if q.type == "violation"]),
    ]
    return [g for g in groups if g.quests]


def child_visible_quests(quests: Sequence[QuestLike]) -> list:
    return [q for q in quests if q.type == "bonus" and q.is_active]


def group_quests_by_category(quests: Sequence[QuestLike]) -> dict[str, list]:
    grouped: dict[str, list] = {}
    for quest in quests:
        grouped.setdefault(quest.category or "other", []).append(quest)
    return grouped


def suggested_stars(
    type: str, scope: Optional[str] = None, category: Optional[str] = None
) -> StarRange:
    """Return the usual star range for a new quest of this kind."""
    if type == "duty":
        if category == "hygiene":
            return StarRange(-10, -3, -5)
        if category == "chores":
            return StarRange(-15, -5, -10)
        if category == "learning":
            return StarRange(-20, -10, -15)
        return StarRange(-15, -5, -10)
    if type == "bonus":
        if scope == "self":
            return StarRange(5, 30, 15)
        if scope == "other":
            return StarRange(10, 25, 20)
        if scope == "family":
            return StarRange(10, 25, 15)
        return StarRange(5, 30, 15)
    if type == "violation":
        return StarRange(-50, -10, -30)
    return StarRange(-50, 50, 0)
