"""Impact scoring for classified news items."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from catalyst.core.utils import clamp, finite_float
from catalyst.services.news import patterns as P
from catalyst.services.news.classifier import item_text
from catalyst.services.news.types import CatalystClass, ClassifiedItem, ScoredItem

C = CatalystClass

BASELINE: Dict[CatalystClass, float] = {
    C.PIVOTAL_TRIAL_SUCCESS: 0.72,
    C.FDA_MARKETING_AUTH: 0.70,
    C.FDA_ADCOM_POSITIVE: 0.66,
    C.REGULATORY_DESIGNATION: 0.54,
    C.TIER1_PARTNERSHIP: 0.60,
    C.MAJOR_GOV_CONTRACT: 0.60,
    C.GOVERNMENT_EQUITY_OR_GRANT: 0.58,
    C.ACQUISITION_BUYOUT: 0.62,
    C.IPO_DEBUT_POP: 0.55,
    C.COURT_WIN_INJUNCTION: 0.56,
    C.MEME_OR_INFLUENCER: 0.50,
    C.RESTRUCTURING_OR_FINANCING: 0.48,
    C.POLICY_OR_POLITICS_TAILWIND: 0.44,
    C.EARNINGS_BEAT_OR_GUIDE_UP: 0.50,
    C.INDEX_INCLUSION: 0.45,
    C.UPLISTING_TO_NASDAQ: 0.52,
    C.OTHER: 0.20,
}

WIRE_SENSITIVE = frozenset(
    {
        C.FDA_MARKETING_AUTH,
        C.FDA_ADCOM_POSITIVE,
        C.TIER1_PARTNERSHIP,
        C.MAJOR_GOV_CONTRACT,
        C.GOVERNMENT_EQUITY_OR_GRANT,
        C.ACQUISITION_BUYOUT,
        C.EARNINGS_BEAT_OR_GUIDE_UP,
        C.INDEX_INCLUSION,
        C.UPLISTING_TO_NASDAQ,
    }
)

# Classes where a filing, publication or presentation can itself be the news.
PROCESS_SENSITIVE = frozenset(
    {
        C.PIVOTAL_TRIAL_SUCCESS,
        C.FDA_MARKETING_AUTH,
        C.FDA_ADCOM_POSITIVE,
        C.REGULATORY_DESIGNATION,
        C.OTHER,
    }
)

# (feature, pattern, delta)
PIVOTAL_BOOSTS: Tuple[Tuple[str, Pattern[str], float], ...] = (
    ("late_stage", P.LATE_STAGE, 0.04),
    ("stat_sig", P.STAT_SIG, 0.04),
    ("preclinical_nhp", P.PRECLIN_NHP, 0.04),
    ("cell_model_early", P.CELL_MODEL_EARLY, 0.03),
)
NO_STRONG_TOPLINE_PENALTY = -0.03
HOT_DISEASE_BOOST = 0.03

MNA_BOOSTS: Tuple[Tuple[str, Pattern[str], float], ...] = (
    ("mna_definitive", P.MNA_DEFINITIVE, 0.05),
    ("mna_tender", P.MNA_TENDER, 0.03),
    ("mna_revised", P.MNA_REVISED, 0.04),
    ("mna_cash_and_stock", P.MNA_CASH_AND_STOCK, 0.02),
    ("mna_per_share", P.MNA_PER_SHARE, 0.04),
)
MNA_NON_BINDING_PENALTY = -0.10

MAJOR_INDEX_BOOST = 0.06
ON_WIRE_BOOST = 0.03
CRYPTO_COMPLETED_BOOST = 0.08
CRYPTO_DISCUSS_BOOST = 0.04
CRYPTO_LARGE_DOLLAR_BOOST = 0.03
RESULTS_EXCEPTION_BOOST = 0.06

# Upper clamps applied before the universal boosters.
CAPS = {
    "approval_variant": 0.55,
    "process_without_outcome": 0.40,
    "mna_admin_only": 0.35,
    "minor_index": 0.40,
    "offwire": 0.45,
    "generic_results": 0.30,
}

# Low-signal cohorts; re-applied after the boosters so nothing lifts them.
HARD_CAPS: Tuple[Tuple[str, Pattern[str], float], ...] = (
    ("proxy_advisor", P.PROXY_ADVISOR, 0.20),
    ("law_firm_pr", P.LAW_FIRM_PR, 0.10),
    ("awards_pr", P.AWARDS_PR, 0.15),
    ("security_incident_update", P.SECURITY_INCIDENT_UPDATE, 0.15),
    ("investor_conference", P.INVESTOR_CONFS, 0.20),
    ("analyst_rating", P.ANALYST_RATING, 0.30),
    ("shelf_or_atm", P.SHELF_OR_ATM, 0.15),
    ("strategic_alternatives", P.STRATEGIC_ALTS, 0.35),
)
PLAIN_DILUTION_CAP = 0.15

SMALL_CAP_LIMIT = 1_000_000_000
BOOSTERS = {
    "small_cap": 0.14,
    "superlative": 0.04,
    "large_dollars": 0.06,
    "big_move": 0.06,
    "single_symbol": 0.03,
}


class _Tally:
    """Running score plus a record of every applied adjustment."""

    def __init__(self, base: float) -> None:
        self.value = base
        self.features: Dict[str, float] = {"baseline": base}

    def add(self, name: str, delta: float) -> None:
        self.value += delta
        self.features[name] = self.features.get(name, 0.0) + delta

    def cap(self, name: str, ceiling: float) -> None:
        if self.value > ceiling:
            self.value = ceiling
            self.features[f"cap:{name}"] = ceiling


def _class_adjustments(tally: _Tally, klass: CatalystClass, text: str, on_wire: bool) -> None:
    if klass is C.PIVOTAL_TRIAL_SUCCESS:
        for name, pattern, delta in PIVOTAL_BOOSTS:
            if pattern.search(text):
                tally.add(name, delta)
        if not P.STRONG_TOPLINE.search(text):
            tally.add("no_strong_topline", NO_STRONG_TOPLINE_PENALTY)
        early = P.PRECLIN_NHP.search(text) or P.CELL_MODEL_EARLY.search(text)
        if early and P.HOT_DISEASE.search(text):
            tally.add("hot_disease", HOT_DISEASE_BOOST)

    if klass is C.ACQUISITION_BUYOUT:
        for name, pattern, delta in MNA_BOOSTS:
            if pattern.search(text):
                tally.add(name, delta)
        if P.MNA_NON_BINDING.search(text):
            tally.add("mna_non_binding", MNA_NON_BINDING_PENALTY)

    if klass is C.INDEX_INCLUSION and P.MAJOR_INDEX.search(text):
        tally.add("major_index", MAJOR_INDEX_BOOST)

    if klass in WIRE_SENSITIVE and on_wire:
        tally.add("on_wire", ON_WIRE_BOOST)

    if P.CRYPTO_TREASURY_BUY.search(text) and P.CRYPTO_COMPLETED.search(text):
        tally.add("crypto_completed", CRYPTO_COMPLETED_BOOST)
    elif P.CRYPTO_TREASURY_DISCUSS.search(text):
        tally.add("crypto_discussion", CRYPTO_DISCUSS_BOOST)
    if (P.CRYPTO_TREASURY_BUY.search(text) or P.CRYPTO_TREASURY_DISCUSS.search(text)) and P.LARGE_DOLLAR_AMOUNT.search(
        text
    ):
        tally.add("crypto_large_dollars", CRYPTO_LARGE_DOLLAR_BOOST)

    if _generic_results(text) is False:
        tally.add("results_exception", RESULTS_EXCEPTION_BOOST)


def _generic_results(text: str) -> Optional[bool]:
    """True for plain results, False for results with an exception, None otherwise."""

    if not P.FINANCIAL_RESULTS_ONLY.search(text) or P.EARNINGS_BEAT_GUIDE_UP.search(text):
        return None
    return not P.results_exception(text)


def _process_without_outcome(text: str) -> bool:
    process = P.REG_PROCESS.search(text) or P.JOURNAL.search(text) or P.CONFERENCE_ONLY.search(text)
    return bool(process) and not P.STRONG_OUTCOME.search(text)


def _clamps(tally: _Tally, klass: CatalystClass, text: str, on_wire: bool, exempt: bool) -> None:
    if klass is C.FDA_MARKETING_AUTH and P.APPROVAL_VARIANT.search(text):
        tally.cap("approval_variant", CAPS["approval_variant"])
    if klass in PROCESS_SENSITIVE and _process_without_outcome(text):
        tally.cap("process_without_outcome", CAPS["process_without_outcome"])
    if klass is C.ACQUISITION_BUYOUT and P.MNA_ADMIN_ONLY.search(text):
        tally.cap("mna_admin_only", CAPS["mna_admin_only"])
    if klass is C.INDEX_INCLUSION and P.MINOR_INDEX.search(text) and not P.MAJOR_INDEX.search(text):
        tally.cap("minor_index", CAPS["minor_index"])
    if klass in WIRE_SENSITIVE and not on_wire and not exempt:
        tally.cap("offwire", CAPS["offwire"])
    if _generic_results(text):
        tally.cap("generic_results", CAPS["generic_results"])


def _boosters(tally: _Tally, classified: ClassifiedItem, text: str) -> None:
    item = classified.item
    market_cap = finite_float(getattr(item, "market_cap", None))
    if market_cap is not None and 0 < market_cap < SMALL_CAP_LIMIT:
        tally.add("small_cap", BOOSTERS["small_cap"])
    if P.SUPERLATIVE.search(text):
        tally.add("superlative", BOOSTERS["superlative"])
    if P.LARGE_DOLLAR_AMOUNT.search(text):
        tally.add("large_dollars", BOOSTERS["large_dollars"])
    if P.BIG_MOVE.search(text):
        tally.add("big_move", BOOSTERS["big_move"])
    symbols = getattr(item, "symbols", None) or []
    if len(symbols) == 1:
        tally.add("single_symbol", BOOSTERS["single_symbol"])


def _hard_caps(tally: _Tally, text: str) -> None:
    for name, pattern, ceiling in HARD_CAPS:
        if pattern.search(text):
            tally.cap(name, ceiling)
    if P.PLAIN_DILUTION.search(text) and not P.PREMIUM_QUALIFIER.search(text):
        tally.cap("plain_dilution", PLAIN_DILUTION_CAP)


def score(classified: ClassifiedItem) -> ScoredItem:
    """Score ``classified`` in [0, 1].

    Stages run in a fixed order: class adjustments, clamps, universal
    boosters, then the low-signal hard caps. The result depends only on the
    class and the item's fields.
    """

    text = item_text(classified.item)
    url = getattr(classified.item, "url", None)
    on_wire = P.is_wire_pr(url if isinstance(url, str) else None, text)
    exempt = P.offwire_admitted(text)

    tally = _Tally(BASELINE.get(classified.klass, BASELINE[C.OTHER]))
    _class_adjustments(tally, classified.klass, text, on_wire)
    _clamps(tally, classified.klass, text, on_wire, exempt)
    _boosters(tally, classified, text)
    _hard_caps(tally, text)
    return ScoredItem(classified=classified, score=clamp(tally.value), features=tally.features)


def score_batch(items: Iterable[ClassifiedItem]) -> List[ScoredItem]:
    return [score(item) for item in items]


__all__ = ["BASELINE", "PROCESS_SENSITIVE", "WIRE_SENSITIVE", "score", "score_batch"]
