"""Phrase tables for the keyword threat classifier.

Each table maps a lowercase phrase to its event category. Iteration order is
match order, so more specific phrases are listed where the cascade should
see them first.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models.threat import EventCategory as C

KeywordTable = Mapping[str, C]


def _table(entries: dict) -> KeywordTable:
    return MappingProxyType(entries)


CRITICAL_KEYWORDS: KeywordTable = _table({
    "nuclear strike": C.MILITARY,
    "nuclear attack": C.MILITARY,
    "nuclear war": C.MILITARY,
    "invasion": C.CONFLICT,
    "declaration of war": C.CONFLICT,
    "martial law": C.MILITARY,
    "coup": C.MILITARY,
    "coup attempt": C.MILITARY,
    "genocide": C.CONFLICT,
    "ethnic cleansing": C.CONFLICT,
    "chemical attack": C.TERRORISM,
    "biological attack": C.TERRORISM,
    "dirty bomb": C.TERRORISM,
    "mass casualty": C.CONFLICT,
    "pandemic declared": C.HEALTH,
    "health emergency": C.HEALTH,
    "nato article 5": C.MILITARY,
    "evacuation order": C.DISASTER,
    "meltdown": C.DISASTER,
    "nuclear meltdown": C.DISASTER,
})

HIGH_KEYWORDS: KeywordTable = _table({
    "war": C.CONFLICT,
    "armed conflict": C.CONFLICT,
    "airstrike": C.CONFLICT,
    "air strike": C.CONFLICT,
    "drone strike": C.CONFLICT,
    "missile": C.MILITARY,
    "missile launch": C.MILITARY,
    "troops deployed": C.MILITARY,
    "military escalation": C.MILITARY,
    "bombing": C.CONFLICT,
    "casualties": C.CONFLICT,
    "hostage": C.TERRORISM,
    "terrorist": C.TERRORISM,
    "terror attack": C.TERRORISM,
    "assassination": C.CRIME,
    "cyber attack": C.CYBER,
    "ransomware": C.CYBER,
    "data breach": C.CYBER,
    "sanctions": C.ECONOMIC,
    "embargo": C.ECONOMIC,
    "earthquake": C.DISASTER,
    "tsunami": C.DISASTER,
    "hurricane": C.DISASTER,
    "typhoon": C.DISASTER,
})

MEDIUM_KEYWORDS: KeywordTable = _table({
    "protest": C.PROTEST,
    "protests": C.PROTEST,
    "riot": C.PROTEST,
    "riots": C.PROTEST,
    "unrest": C.PROTEST,
    "demonstration": C.PROTEST,
    "strike action": C.PROTEST,
    "military exercise": C.MILITARY,
    "naval exercise": C.MILITARY,
    "arms deal": C.MILITARY,
    "weapons sale": C.MILITARY,
    "diplomatic crisis": C.DIPLOMATIC,
    "ambassador recalled": C.DIPLOMATIC,
    "expel diplomats": C.DIPLOMATIC,
    "trade war": C.ECONOMIC,
    "tariff": C.ECONOMIC,
    "recession": C.ECONOMIC,
    "inflation": C.ECONOMIC,
    "market crash": C.ECONOMIC,
    "flood": C.DISASTER,
    "flooding": C.DISASTER,
    "wildfire": C.DISASTER,
    "volcano": C.DISASTER,
    "eruption": C.DISASTER,
    "outbreak": C.HEALTH,
    "epidemic": C.HEALTH,
    "infection spread": C.HEALTH,
    "oil spill": C.ENVIRONMENTAL,
    "pipeline explosion": C.INFRASTRUCTURE,
    "blackout": C.INFRASTRUCTURE,
    "power outage": C.INFRASTRUCTURE,
    "internet outage": C.INFRASTRUCTURE,
    "derailment": C.INFRASTRUCTURE,
})

LOW_KEYWORDS: KeywordTable = _table({
    "election": C.DIPLOMATIC,
    "vote": C.DIPLOMATIC,
    "referendum": C.DIPLOMATIC,
    "summit": C.DIPLOMATIC,
    "treaty": C.DIPLOMATIC,
    "agreement": C.DIPLOMATIC,
    "negotiation": C.DIPLOMATIC,
    "talks": C.DIPLOMATIC,
    "peacekeeping": C.DIPLOMATIC,
    "humanitarian aid": C.DIPLOMATIC,
    "ceasefire": C.DIPLOMATIC,
    "peace treaty": C.DIPLOMATIC,
    "climate change": C.ENVIRONMENTAL,
    "emissions": C.ENVIRONMENTAL,
    "pollution": C.ENVIRONMENTAL,
    "deforestation": C.ENVIRONMENTAL,
    "drought": C.ENVIRONMENTAL,
    "vaccine": C.HEALTH,
    "vaccination": C.HEALTH,
    "disease": C.HEALTH,
    "virus": C.HEALTH,
    "public health": C.HEALTH,
    "covid": C.HEALTH,
    "interest rate": C.ECONOMIC,
    "gdp": C.ECONOMIC,
    "unemployment": C.ECONOMIC,
    "regulation": C.ECONOMIC,
})

TECH_HIGH_KEYWORDS: KeywordTable = _table({
    "major outage": C.INFRASTRUCTURE,
    "service down": C.INFRASTRUCTURE,
    "global outage": C.INFRASTRUCTURE,
    "zero-day": C.CYBER,
    "critical vulnerability": C.CYBER,
    "supply chain attack": C.CYBER,
    "mass layoff": C.ECONOMIC,
})

TECH_MEDIUM_KEYWORDS: KeywordTable = _table({
    "outage": C.INFRASTRUCTURE,
    "breach": C.CYBER,
    "hack": C.CYBER,
    "vulnerability": C.CYBER,
    "layoff": C.ECONOMIC,
    "layoffs": C.ECONOMIC,
    "antitrust": C.ECONOMIC,
    "monopoly": C.ECONOMIC,
    "ban": C.ECONOMIC,
    "shutdown": C.INFRASTRUCTURE,
})

TECH_LOW_KEYWORDS: KeywordTable = _table({
    "ipo": C.ECONOMIC,
    "funding": C.ECONOMIC,
    "acquisition": C.ECONOMIC,
    "merger": C.ECONOMIC,
    "launch": C.TECH,
    "release": C.TECH,
    "update": C.TECH,
    "partnership": C.ECONOMIC,
    "startup": C.TECH,
    "ai model": C.TECH,
    "open source": C.TECH,
})

CARE_HIGH_KEYWORDS: KeywordTable = _table({
    "developmental disability": C.HEALTH,
    "behavioral analysis ai": C.TECH,
    "care ai korea": C.TECH,
    "vision ai surveillance": C.TECH,
    "aba technology": C.TECH,
    "발달장애": C.HEALTH,
    "ai 돌봄": C.TECH,
    "행동분석": C.HEALTH,
    "carevia": C.TECH,
    "care robot recall": C.INFRASTRUCTURE,
    "welfare fraud": C.ECONOMIC,
    "disability rights": C.POLITICAL,
})

CARE_MEDIUM_KEYWORDS: KeywordTable = _table({
    "care robot": C.TECH,
    "assistive technology": C.TECH,
    "digital therapeutic": C.HEALTH,
    "augmentative communication": C.TECH,
    "aac device": C.TECH,
    "rehabilitation ai": C.HEALTH,
    "복지 ai": C.TECH,
    "케어 로봇": C.TECH,
    "공공조달 ai": C.ECONOMIC,
    "welfare policy": C.POLITICAL,
    "disability ai": C.TECH,
    "elderly care ai": C.HEALTH,
    "naver ai health": C.TECH,
    "kakao health": C.TECH,
})

CARE_LOW_KEYWORDS: KeywordTable = _table({
    "disability startup": C.ECONOMIC,
    "care funding": C.ECONOMIC,
    "assistive robotics": C.TECH,
    "welfare budget": C.ECONOMIC,
    "healthcare ai": C.HEALTH,
    "digital health": C.HEALTH,
    "rehabilitation robot": C.TECH,
    "special education": C.HEALTH,
    "therapy ai": C.HEALTH,
    "돌봄 서비스": C.HEALTH,
    "장애인 복지": C.POLITICAL,
    "케어테크": C.TECH,
})

# Lifestyle and entertainment phrases; any hit short-circuits to info/general
EXCLUSIONS = (
    "protein", "couples", "relationship", "dating", "diet", "fitness",
    "recipe", "cooking", "shopping", "fashion", "celebrity", "movie",
    "tv show", "sports", "game", "concert", "festival", "wedding",
    "vacation", "travel tips", "life hack", "self-care", "wellness",
)

# Short or ambiguous tokens that must match on word boundaries only
SHORT_KEYWORDS = frozenset({
    "war", "coup", "ban", "vote", "riot", "riots", "hack", "talks", "ipo", "gdp",
    "virus", "disease", "flood",
})
