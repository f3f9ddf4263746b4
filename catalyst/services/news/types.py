"""Dataclasses for news classification and scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class CatalystClass(str, Enum):
    """Catalyst categories, in tie-break priority order.

    When two classes aggregate to the same weight the one declared first wins.
    """

    PIVOTAL_TRIAL_SUCCESS = "PIVOTAL_TRIAL_SUCCESS"
    FDA_MARKETING_AUTH = "FDA_MARKETING_AUTH"
    FDA_ADCOM_POSITIVE = "FDA_ADCOM_POSITIVE"
    REGULATORY_DESIGNATION = "REGULATORY_DESIGNATION"
    TIER1_PARTNERSHIP = "TIER1_PARTNERSHIP"
    MAJOR_GOV_CONTRACT = "MAJOR_GOV_CONTRACT"
    GOVERNMENT_EQUITY_OR_GRANT = "GOVERNMENT_EQUITY_OR_GRANT"
    ACQUISITION_BUYOUT = "ACQUISITION_BUYOUT"
    IPO_DEBUT_POP = "IPO_DEBUT_POP"
    COURT_WIN_INJUNCTION = "COURT_WIN_INJUNCTION"
    MEME_OR_INFLUENCER = "MEME_OR_INFLUENCER"
    RESTRUCTURING_OR_FINANCING = "RESTRUCTURING_OR_FINANCING"
    POLICY_OR_POLITICS_TAILWIND = "POLICY_OR_POLITICS_TAILWIND"
    EARNINGS_BEAT_OR_GUIDE_UP = "EARNINGS_BEAT_OR_GUIDE_UP"
    INDEX_INCLUSION = "INDEX_INCLUSION"
    UPLISTING_TO_NASDAQ = "UPLISTING_TO_NASDAQ"
    OTHER = "OTHER"


@dataclass(slots=True)
class NewsItem:
    """Normalized news item produced by provider adapters."""

    id: str
    title: str
    summary: str = ""
    url: Optional[str] = None
    source: str = ""
    published_at: Optional[str] = None
    symbols: List[str] = field(default_factory=list)
    market_cap: Optional[float] = None
    lang: str = "en"

    @property
    def primary_symbol(self) -> Optional[str]:
        return self.symbols[0] if self.symbols else None


@dataclass(slots=True)
class ClassifiedItem:
    """News item with its catalyst class and raw rule-hit weight."""

    item: NewsItem
    klass: CatalystClass
    raw_score: float
    reasons: Tuple[str, ...] = ()


@dataclass(slots=True)
class ScoredItem:
    """Classified item with a normalized impact score in [0, 1]."""

    classified: ClassifiedItem
    score: float
    features: Dict[str, float] = field(default_factory=dict)

    @property
    def item(self) -> NewsItem:
        return self.classified.item

    @property
    def klass(self) -> CatalystClass:
        return self.classified.klass


__all__ = ["CatalystClass", "ClassifiedItem", "NewsItem", "ScoredItem"]
