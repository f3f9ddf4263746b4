"""Rule-based catalyst classifier.

Guards and positive rules are declared as tables and evaluated by a single
reducer, so each rule can be audited and tested on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from catalyst.core.utils import safe_text
from catalyst.services.news import patterns as P
from catalyst.services.news.types import CatalystClass, ClassifiedItem, NewsItem

log = logging.getLogger("catalyst.news.classifier")

RULESET_VERSION = "3"

Predicate = Callable[[str], bool]
C = CatalystClass


@dataclass(frozen=True, slots=True)
class Guard:
    """Negative-signal pattern that short-circuits classification."""

    name: str
    test: Predicate
    score: float = 0.0


@dataclass(frozen=True, slots=True)
class Rule:
    """Positive detector contributing ``weight`` to ``klass`` when it matches.

    Wire-gated rules only count when the item is on a press wire or the text
    carries an off-wire exemption.
    """

    name: str
    klass: CatalystClass
    weight: float
    test: Predicate
    wire_gated: bool = False


def _has(pattern) -> Predicate:
    return lambda x: bool(pattern.search(x))


def _proxy_or_vote_admin(x: str) -> bool:
    return bool((P.PROXY_ADVISOR.search(x) or P.VOTE_ADMIN_ONLY.search(x)) and not P.MNA_BINDING.search(x))


def _plain_dilution(x: str) -> bool:
    return bool(P.PLAIN_DILUTION.search(x) and not P.PREMIUM_QUALIFIER.search(x))


GUARDS: Tuple[Guard, ...] = (
    Guard("misinformation", _has(P.MISINFO)),
    Guard("security_incident_update", _has(P.SECURITY_INCIDENT_UPDATE)),
    Guard("awards_pr", _has(P.AWARDS_PR)),
    Guard("proxy_or_vote_admin", _proxy_or_vote_admin),
    Guard("investor_conference", _has(P.INVESTOR_CONFS)),
    Guard("law_firm_pr", _has(P.LAW_FIRM_PR)),
    Guard("shelf_or_atm", _has(P.SHELF_OR_ATM)),
    Guard("analyst_media", _has(P.ANALYST_MEDIA)),
    Guard("typo_erratum", _has(P.TYPO_ERRATUM)),
    Guard("plain_dilution", _plain_dilution, score=0.1),
)


def _mna_low_impact(x: str) -> bool:
    return bool(P.MNA_NON_BINDING.search(x) or P.MNA_ADMIN_ONLY.search(x) or P.MNA_ASSET_OR_PROPERTY.search(x))


def _mna_binding(x: str) -> bool:
    binding = P.MNA_BINDING.search(x) or (P.MNA_WILL_ACQUIRE.search(x) and P.MNA_PER_SHARE_OR_VALUE.search(x))
    return bool(binding) and not _mna_low_impact(x)


def _gov_contract(x: str) -> bool:
    return bool(P.GOV_WORDS.search(x) and P.CONTRACT_ANY.search(x))


def _is_partnership(x: str) -> bool:
    return bool(
        P.PARTNERSHIP_ANY.search(x)
        or P.CONTRACT_ANY.search(x)
        or P.DEAL_SIGNED.search(x)
        or P.tier1_adoption(x)
    )


def _has_scale(x: str) -> bool:
    return bool(P.LARGE_DOLLARS.search(x) or P.SCALE.search(x))


def _beat_or_raise(x: str) -> bool:
    return bool(P.EARNINGS_BEAT_GUIDE_UP.search(x))


def _results_exception(x: str) -> bool:
    return not _beat_or_raise(x) and bool(P.FINANCIAL_RESULTS_ONLY.search(x)) and P.results_exception(x)


def _cell_model(hot: bool) -> Predicate:
    return lambda x: bool(P.CELL_MODEL_EARLY.search(x)) and bool(P.HOT_DISEASE.search(x)) == hot


RULES: Tuple[Rule, ...] = (
    # Bio / regulatory
    Rule("approval", C.FDA_MARKETING_AUTH, 10, _has(P.APPROVAL), wire_gated=True),
    Rule("adcom_positive", C.FDA_ADCOM_POSITIVE, 8, _has(P.ADCOM), wire_gated=True),
    Rule(
        "pivotal_or_topline",
        C.PIVOTAL_TRIAL_SUCCESS,
        9,
        lambda x: bool(P.PIVOTAL.search(x) or P.TOPLINE.search(x)),
        wire_gated=True,
    ),
    Rule("designation", C.REGULATORY_DESIGNATION, 6, _has(P.DESIGNATION), wire_gated=True),
    Rule("preclinical_nhp_strong", C.PIVOTAL_TRIAL_SUCCESS, 6, _has(P.PRECLIN_NHP)),
    Rule("cell_model_early_signal_hot", C.PIVOTAL_TRIAL_SUCCESS, 6, _cell_model(hot=True)),
    Rule("cell_model_early_signal", C.PIVOTAL_TRIAL_SUCCESS, 5, _cell_model(hot=False)),
    # M&A
    Rule("mna_binding", C.ACQUISITION_BUYOUT, 9, _mna_binding),
    Rule("mna_low_impact", C.OTHER, 2, _mna_low_impact),
    # Government / partnerships
    Rule(
        "gov_contract",
        C.MAJOR_GOV_CONTRACT,
        8,
        lambda x: _gov_contract(x) and not P.GOV_ROUTINE.search(x),
        wire_gated=True,
    ),
    Rule(
        "gov_routine",
        C.OTHER,
        2,
        lambda x: _gov_contract(x) and bool(P.GOV_ROUTINE.search(x)),
        wire_gated=True,
    ),
    Rule("gov_equity", C.GOVERNMENT_EQUITY_OR_GRANT, 9, _has(P.GOV_EQUITY)),
    Rule(
        "tier1",
        C.TIER1_PARTNERSHIP,
        8,
        lambda x: _is_partnership(x) and bool(P.TIER1.search(x)),
        wire_gated=True,
    ),
    Rule(
        "scale",
        C.TIER1_PARTNERSHIP,
        6,
        lambda x: _is_partnership(x) and not P.TIER1.search(x) and _has_scale(x),
        wire_gated=True,
    ),
    Rule(
        "tier1_name_drop_only",
        C.MEME_OR_INFLUENCER,
        4,
        lambda x: bool(P.TIER1.search(x) and P.NAME_DROP_CONTEXT.search(x)) and not _is_partnership(x),
    ),
    # Corporate
    Rule("earnings", C.EARNINGS_BEAT_OR_GUIDE_UP, 6, _beat_or_raise),
    Rule("results_exception", C.EARNINGS_BEAT_OR_GUIDE_UP, 5, _results_exception),
    Rule("index_inclusion", C.INDEX_INCLUSION, 3, _has(P.INDEX_INCLUSION)),
    Rule("uplist", C.UPLISTING_TO_NASDAQ, 5, _has(P.UPLIST)),
    Rule("compliance_regained", C.UPLISTING_TO_NASDAQ, 6, _has(P.LISTING_COMPLIANCE)),
    Rule("ipo_debut", C.IPO_DEBUT_POP, 6, _has(P.IPO_DEBUT)),
    Rule("policy_tailwind", C.POLICY_OR_POLITICS_TAILWIND, 4, _has(P.POLICY_TAILWIND)),
    Rule("special_dividend", C.RESTRUCTURING_OR_FINANCING, 7, _has(P.SPECIAL_DIVIDEND)),
    # Legal / meme
    Rule("court", C.COURT_WIN_INJUNCTION, 6, _has(P.COURT_WIN)),
    Rule("influencer", C.MEME_OR_INFLUENCER, 6, _has(P.MEME_OR_INFLUENCER)),
    # Crypto / treasury and financing
    Rule("crypto_treasury_buy", C.RESTRUCTURING_OR_FINANCING, 7, _has(P.CRYPTO_TREASURY_BUY)),
    Rule("crypto_treasury_discuss", C.RESTRUCTURING_OR_FINANCING, 6, _has(P.CRYPTO_TREASURY_DISCUSS)),
    Rule("anti_dilution_positive", C.RESTRUCTURING_OR_FINANCING, 7, _has(P.ANTI_DILUTION_POSITIVE)),
    # Routine quarterly reporting is suppressed, not just left unscored.
    Rule(
        "generic_fin_results_only",
        C.OTHER,
        -4,
        lambda x: bool(P.FINANCIAL_RESULTS_ONLY.search(x)) and not _beat_or_raise(x) and not P.results_exception(x),
    ),
)

STRONG_FLOORS: Dict[CatalystClass, float] = {
    C.ACQUISITION_BUYOUT: 8,
    C.FDA_MARKETING_AUTH: 8,
    C.PIVOTAL_TRIAL_SUCCESS: 8,
    C.MAJOR_GOV_CONTRACT: 8,
    C.RESTRUCTURING_OR_FINANCING: 7,
    C.UPLISTING_TO_NASDAQ: 6,
}

_CONTRACT_CLASSES = (C.TIER1_PARTNERSHIP, C.MAJOR_GOV_CONTRACT, C.GOVERNMENT_EQUITY_OR_GRANT)


def item_text(item: NewsItem) -> str:
    """Normalized ``title\\nsummary`` used by the classifier and scorer."""

    title = P.normalize(safe_text(getattr(item, "title", "")))
    body = P.normalize(safe_text(getattr(item, "summary", "")))
    return f"{title}\n{body}"


def _apply_synergies(by_class: Dict[CatalystClass, float], text: str, reasons: List[str]) -> None:
    if C.PIVOTAL_TRIAL_SUCCESS in by_class and C.FDA_MARKETING_AUTH in by_class:
        by_class[C.FDA_MARKETING_AUTH] += 3
        reasons.append("synergy_pivotal_approval")
    if any(k in by_class for k in _CONTRACT_CLASSES) and _has_scale(text):
        by_class[C.OTHER] = by_class.get(C.OTHER, 0.0) + 2
        reasons.append("synergy_scale_dilutes")


def _select(by_class: Dict[CatalystClass, float]) -> Tuple[CatalystClass, float]:
    best: Optional[CatalystClass] = None
    best_weight = 0.0
    for klass in CatalystClass:  # declaration order breaks ties
        if klass not in by_class:
            continue
        weight = by_class[klass]
        if best is None or weight > best_weight:
            best, best_weight = klass, weight
    return (best or C.OTHER), best_weight


def _classify_text(text: str, url: Optional[str]) -> Tuple[CatalystClass, float, Tuple[str, ...]]:
    for guard in GUARDS:
        if guard.test(text):
            return C.OTHER, guard.score, (guard.name,)

    admitted = P.is_wire_pr(url, text) or P.offwire_admitted(text)
    by_class: Dict[CatalystClass, float] = {}
    reasons: List[str] = []
    for rule in RULES:
        if rule.wire_gated and not admitted:
            continue
        if rule.test(text):
            by_class[rule.klass] = by_class.get(rule.klass, 0.0) + rule.weight
            reasons.append(rule.name)

    if not by_class:
        return C.OTHER, 0.0, ()

    _apply_synergies(by_class, text, reasons)

    total = sum(by_class.values())
    strong = any(by_class.get(klass, 0.0) >= floor for klass, floor in STRONG_FLOORS.items())
    if total <= 0 and not strong:
        return C.OTHER, 0.0, tuple(reasons)

    klass, weight = _select(by_class)
    return klass, weight, tuple(reasons)


def classify(item: NewsItem) -> ClassifiedItem:
    """Classify a single news item; never raises."""

    try:
        text = item_text(item)
        url = getattr(item, "url", None)
        klass, raw, reasons = _classify_text(text, url if isinstance(url, str) else None)
    except Exception as exc:  # noqa: BLE001 - one bad item must not abort a batch
        log.warning("classifier.item_failed", extra={"item_id": getattr(item, "id", None), "error": str(exc)})
        klass, raw, reasons = C.OTHER, 0.0, ("error",)
    return ClassifiedItem(item=item, klass=klass, raw_score=raw, reasons=reasons)


def classify_batch(items: Iterable[NewsItem]) -> List[ClassifiedItem]:
    return [classify(item) for item in items]


__all__ = [
    "GUARDS",
    "Guard",
    "RULES",
    "RULESET_VERSION",
    "Rule",
    "STRONG_FLOORS",
    "classify",
    "classify_batch",
    "item_text",
]
