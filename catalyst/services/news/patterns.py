"""Regex catalog and text predicates shared by the classifier and scorer."""

from __future__ import annotations

import re
from typing import Optional, Pattern
from urllib.parse import urlparse

_I = re.IGNORECASE


def _rx(pattern: str) -> Pattern[str]:
    return re.compile(pattern, _I)


TIER1_COUNTERPARTIES = (
    "Nvidia", "Microsoft", "OpenAI", "Apple", "Amazon", "AWS", "Google", "Alphabet",
    "Meta", "Facebook", "Tesla", "Oracle", "Salesforce", "Adobe", "IBM", "Intel",
    "AMD", "Broadcom", "Qualcomm", "TSMC", "Samsung", "Cisco", "Dell", "HPE",
    "Supermicro", "Snowflake", "Palantir", "Siemens", "Sony", "Workday",
    "ServiceNow", "Shopify", "Twilio", "Atlassian", "Zoom", "Datadog",
    "CrowdStrike", "Okta", "MongoDB", "Cloudflare", "Stripe", "Block", "Square",
    "Walmart", "Target", "Costco", "Home Depot", "Lowe's", "Best Buy", "Alibaba",
    "Tencent", "JD.com", "ByteDance", "TikTok", "Lockheed Martin", "Raytheon",
    "RTX", "Boeing", "Northrop Grumman", "General Dynamics", "L3Harris",
    "BAE Systems", "Thales", "Airbus", "SpaceX", "NASA", "Space Force", "USSF",
    "DARPA", "Department of Defense", "DoD", "Army", "Navy", "Air Force",
    "Pfizer", "Merck", "Johnson & Johnson", "J&J", "Bristol-Myers", "BMS",
    "Eli Lilly", "Lilly", "Sanofi", "GSK", "AstraZeneca", "Novo Nordisk", "Roche",
    "Novartis", "Bayer", "Amgen", "AbbVie", "Takeda", "Gilead", "Biogen",
    "Regeneron", "Medtronic", "Boston Scientific", "Abbott", "GE Healthcare",
    "Philips", "Siemens Healthineers", "Intuitive Surgical", "BARDA", "HHS",
    "NIH", "CMS", "Medicare", "VA", "FDA", "EMA", "EC", "MHRA", "PMDA",
    "ExxonMobil", "Chevron", "BP", "Shell", "TotalEnergies", "Schlumberger",
    "Halliburton", "Caterpillar", "Deere", "GE", "Honeywell",
)

WIRE_HOSTS = frozenset(
    {
        "www.prnewswire.com",
        "www.globenewswire.com",
        "www.businesswire.com",
        "www.accesswire.com",
        "www.newsfilecorp.com",
    }
)
WIRE_TOKENS = ("PR Newswire", "GlobeNewswire", "Business Wire", "ACCESSWIRE", "Newsfile")
_IR_HOST = re.compile(r"^(ir|investors)\.", _I)

TIER1 = _rx(r"\b(?:%s)(?:'s)?\b" % "|".join(re.escape(name) for name in TIER1_COUNTERPARTIES))
TIER1_VERBS = _rx(
    r"\b(powered by|built (?:on|with)|integrat(?:es|ed)? with|adopt(?:s|ed)|selects?|"
    r"standardiz(?:es|ed) on|deploys?|rolls out)\b"
)
HOT_DISEASE = _rx(
    r"\b(Alzheimer'?s|ALS|Parkinson'?s|Huntington'?s|multiple sclerosis|MS\b|glioblastoma|GBM|"
    r"pancreatic cancer)\b"
)
LARGE_DOLLARS = _rx(r"\$?\s?(?:\d{2,4})\s*(?:million|billion|bn|mm|m)\b")
SCALE = _rx(r"\b(multi[- ]year|nationwide|global|enterprise[- ]wide|rollout)\b")
PREMIUM_QUALIFIER = _rx(r"premium|above[- ]market|strategic investor")
BIG_GROWTH = _rx(
    r"\b(revenue|sales|eps|earnings|arr|bookings|net income)\b[^.%]{0,80}?"
    r"\b(up|increase[sd]?|grow(?:n|th|s)?|jump(?:ed)?|soar(?:ed)?|surged)\b[^%]{0,20}?(\d{2,3})\s?%"
)
RECORD_REVENUE = _rx(r"\brecord\b[^.]{0,40}\b(revenue|sales)\b")
SWING_TO_PROFIT = _rx(
    r"\b(returns?|returned|swing|swung|back)\s+to\s+(profit|profitability|positive (?:net )?income)\b"
)

# Bio / clinical
PIVOTAL = _rx(
    r"\b(phase\s*(iii|3)|pivotal|registrational)\b.*"
    r"\b(success|met (?:the )?primary endpoint|statistically significant)\b"
)
TOPLINE = _rx(r"\b(top-?line)\b.*\b(positive|met (?:the )?primary endpoint|statistically significant)\b")
ADCOM = _rx(r"\b(advisory (committee|panel)|adcom)\b.*\b(vote|voted|recommends?)\b")
APPROVAL = _rx(
    r"\b(FDA|EMA|EC|MHRA|PMDA)\b.*"
    r"\b(approved?|approval|authorized|authorization|clearance|clears|EUA|510\(k\))"
)
DESIGNATION = _rx(r"\b(breakthrough therapy|BTD|fast[- ]track|orphan (drug )?designation|PRIME|RMAT)\b")
PRECLIN_NHP = _rx(
    r"\b(non[- ]?human|nonhuman)\s+primates?\b.*\b(well tolerated|tolerability|safety|safe)\b.*"
    r"\b(higher than|exceed(?:s|ed)|above)\b.*\b(efficacious|effective)\b"
)
CELL_MODEL_EARLY = _rx(
    r"\b(patient[- ]derived|iPSC|neurons?|organoids?)\b.*"
    r"\b(early (signals?|evidence) of (benefit|efficacy)|signals? of (benefit|efficacy)|improv(?:e|ed)|rescue)\b"
)
LATE_STAGE = _rx(r"\b(phase\s*(iii|3)|pivotal|registrational|late[- ]stage)\b")
STAT_SIG = _rx(r"\b(statistically significant|p\s?[<=]\s?0?\.0\d+|met (?:the |its )?primary endpoint)\b")
STRONG_TOPLINE = _rx(
    r"\b(positive top-?line|top-?line results? (?:were )?positive|met (?:the |its )?primary endpoint|"
    r"statistically significant)\b"
)
APPROVAL_VARIANT = _rx(
    r"\b(CE[- ]mark(?:ing)?|510\(k\)|label (?:expansion|update|supplement)|supplemental (?:NDA|BLA)|sNDA|sBLA)"
)
REG_PROCESS = _rx(
    r"\b(submit(?:s|ted)?|submission|files?|filed|filing|accepts? for review|accepted for (?:filing|review)|"
    r"PDUFA (?:date|goal)|IND clearance|meeting with (?:the )?FDA|Type [ABC] meeting)\b"
)
JOURNAL = _rx(r"\b(published in|publication in|journal|peer[- ]reviewed|Lancet|NEJM|New England Journal)\b")
STRONG_OUTCOME = _rx(
    r"\b(statistically significant|met (?:the |its )?primary endpoint|approved|approval|positive top-?line|"
    r"complete response|cure[sd]?|superior(?:ity)?)\b"
)

# M&A
MNA_BINDING = _rx(
    r"\b(definitive (agreement|merger)|merger agreement (executed|signed)|entered into (a )?definitive "
    r"(agreement|merger)|business combination|to be acquired|take[- ]private|go[- ]private|acquisition|"
    r"buyout|tender|exchange offer)\b"
)
MNA_DEFINITIVE = _rx(
    r"\b(definitive (agreement|merger)|merger agreement (executed|signed)|entered into (a )?definitive "
    r"(agreement|merger))\b"
)
MNA_WILL_ACQUIRE = _rx(r"\b(will|to)\s+acquire\b|\bto be acquired\b")
MNA_PER_SHARE_OR_VALUE = _rx(
    r"\$\s?\d+(?:\.\d+)?\s*(?:per|/)\s*share\b|(?:deal|transaction|enterprise|equity)\s+value(?:d)?\s+at\s+"
    r"\$?\d+(?:\.\d+)?\s*(?:million|billion|bn|mm|m)\b"
)
MNA_PER_SHARE = _rx(r"\$\s?\d+(?:\.\d+)?\s*(?:per|/)\s*share\b")
MNA_NON_BINDING = _rx(r"\b(non[- ]binding|indicative|letter of intent|LOI)\b")
MNA_ADMIN_ONLY = _rx(r"\b(extend(s|ed|ing)?|extension)\b.*\b(tender offer|offer)\b")
MNA_ASSET_OR_PROPERTY = _rx(
    r"\b(divestiture|asset sale|dispos(?:e|al)|acquisition of (?:property|facility|real estate|"
    r"inpatient rehabilitation))\b"
)
MNA_TENDER = _rx(r"\b(tender offer|commence[sd]? (?:a |an )?(?:cash )?tender|exchange offer)\b")
MNA_REVISED = _rx(r"\b(revised|sweetened|increased|raised|improved) (?:offer|proposal|bid)\b")
MNA_CASH_AND_STOCK = _rx(r"\bcash[- ]and[- ]stock\b|\bcash and shares\b")

# Partnerships / contracts
PARTNERSHIP_ANY = _rx(
    r"\b(partner(ship)?|strategic (?:alliance|partnership)|collaborat(?:e|ion)|distribution|licen[cs]e|"
    r"supply|integration|deployment)\b"
)
DEAL_SIGNED = _rx(
    r"\b(signed|signs|inks?|enters? into)\b.*\b(agreement|deal|contract|MOU|memorandum of understanding)\b"
)
CONTRACT_ANY = _rx(r"\b(contract|award|task order|IDIQ|grant|funding)\b")
GOV_WORDS = _rx(
    r"\b(NASA|USSF|Space Force|DoD|Department of Defense|Army|Navy|Air Force|DARPA|BARDA|HHS|NIH|CMS|"
    r"Medicare|VA)\b"
)
GOV_EQUITY = _rx(
    r"\b(?:government|DoD|Department of Defense|HHS|BARDA)\b.*"
    r"\b(preferred (stock|equity)|equity|investment|warrants?)\b"
)
GOV_ROUTINE = _rx(r"\b(continued production|follow[- ]on|option (exercise|exercised)|extension|renewal)\b")
NAME_DROP_CONTEXT = _rx(r"\b(mention(?:ed)?|blog|keynote|showcase|featured|ecosystem|catalog|marketplace)\b")

# Corporate
EARNINGS_BEAT_GUIDE_UP = _rx(
    r"\b(raises?|increas(?:es|ed)|hikes?)\b.*\b(guidance|outlook|forecast)\b|"
    r"\b(beat[s]?)\b.*\b(consensus|estimates|Street|expectations)\b"
)
INDEX_INCLUSION = _rx(
    r"\b(added|to be added|to join|inclusion|included)\b.*"
    r"\b(Russell\s?(2000|3000)|MSCI|S&P\s?(500|400|600)|S&P Dow Jones Indices|FTSE)"
)
MAJOR_INDEX = _rx(r"\b(S&P\s?(500|400|600)|MSCI|FTSE)")
MINOR_INDEX = _rx(r"\b(Russell\s?(2000|3000|Microcap)|TSX Venture|CSE|regional (?:index|exchange))\b")
UPLIST = _rx(r"\b(uplisting|uplist|approved to list)\b.*\b(Nasdaq|NYSE|NYSE American)\b")
LISTING_COMPLIANCE = _rx(r"\b(regain(?:ed|s)?|returns? to|back in)\b.*\b(compliance)\b.*\b(Nasdaq|NYSE|listing)\b")
SPECIAL_DIVIDEND = _rx(
    r"\b(special (cash )?dividend)\b.*\$\s?\d+(?:\.\d+)?\s*(?:per|/)\s*share|"
    r"\b(special (cash )?dividend of)\s*\$\s?\d+(?:\.\d+)?"
)
IPO_DEBUT = _rx(
    r"\b(prices|priced|pricing of)\b.*\b(initial public offering|IPO)\b|"
    r"\b(begins?|commences?|debuts?)\b.*\btrading\b.*\b(Nasdaq|NYSE)\b"
)
POLICY_TAILWIND = _rx(
    r"\b(executive order|tariff exemption|signed into law|legislation passes|passes (?:the )?(?:House|Senate))\b"
)

# Legal / meme
COURT_WIN = _rx(r"\b(court|judge|ITC|PTAB)\b.*\b(grants?|wins?|injunction|vacates?|stays?)\b")
MEME_OR_INFLUENCER = _rx(
    r"\b(Roaring Kitty|Keith Gill|meme stock|wallstreetbets|WSB|short squeeze|Jensen Huang|"
    r"Nvidia (blog|mention))\b"
)

# Low-impact guards
PROXY_ADVISOR = _rx(
    r"\b(ISS|Institutional Shareholder Services|Glass Lewis)\b.*\b(recommend(s|ed)?|support(s|ed)?)\b.*"
    r"\b(vote|proposal|deal|merger)\b"
)
VOTE_ADMIN_ONLY = _rx(
    r"\b(definitive proxy|proxy (statement|materials)|special meeting|annual meeting|"
    r"extraordinary general meeting|EGM|shareholder vote|record date)\b"
)
LAW_FIRM_PR = _rx(
    r"\b(class action|securities class action|investor (?:lawsuit|alert|reminder)|deadline alert|"
    r"shareholder rights law firm|securities litigation|investigat(?:ion|ing)|Hagens Berman|Pomerantz|"
    r"Rosen Law Firm|Glancy Prongay|Bronstein[, ]+Gewirtz|Kahn Swick|Saxena White|Kessler Topaz|"
    r"Levi & Korsinsky)\b"
)
AWARDS_PR = _rx(
    r"\b(award|awards|winner|wins|finalist|recipient|honoree|recognized|recognition|"
    r"named (?:as|to) (?:the )?(?:list|index|ranking)|anniversary|celebrat(es|ing|ion)|Respect the Drive)\b"
)
SECURITY_INCIDENT_UPDATE = _rx(
    r"\b(cyber(?:security)?|security|ransomware|data (?:breach|exposure)|cyber[- ]?attack)\b.*"
    r"\b(update|updated|provid(?:e|es)d? an? update)\b"
)
INVESTOR_CONFS = _rx(
    r"\b(participat(e|es|ing)|to participate|will participate)\b.*"
    r"\b(investor (?:conference|conferences)|conference|fireside chat|non-deal roadshow)\b"
)
MISINFO = _rx(
    r"\b(misinformation|unauthorized (press )?release|retracts? (?:a )?press release|clarif(?:y|ies) misinformation)\b"
)
FINANCIAL_RESULTS_ONLY = _rx(
    r"\b(financial results|first quarter|second quarter|third quarter|fourth quarter|first half|second half|"
    r"H1|H2|fiscal (?:Q\d|year) results)\b"
)
SHELF_OR_ATM = _rx(r"\b(Form\s*S-3|shelf registration|at[- ]the[- ]market|ATM (program|facility))\b")
PLAIN_DILUTION = _rx(
    r"\b(securities purchase agreement|registered direct|PIPE|private placement|unit financing|"
    r"equity offering|warrants?)\b"
)
ANTI_DILUTION_POSITIVE = _rx(
    r"\b(terminates?|terminated|withdraws?|withdrawn|cancels?|cancelled|reduces?|downsized?)\b.*"
    r"\b(offering|registered direct|ATM|at[- ]the[- ]market|public offering|securities purchase agreement)\b"
)
STRATEGIC_ALTS = _rx(r"\b(explore|evaluat(?:e|ing)|commence(?:s|d)?)\b.*\b(strategic alternatives|strategic review)\b")
CONFERENCE_ONLY = _rx(
    r"\b(presents?|to present|presentation at|poster|abstract|oral presentation|fireside chat|non-deal roadshow)\b"
)
ANALYST_MEDIA = _rx(r"\b(says|said|told|interview)\b.*\b(CNBC|Yahoo Finance|Bloomberg|Fox Business|Barron'?s)")
ANALYST_RATING = _rx(
    r"\b(?:upgrade[sd]?|downgrade[sd]?)\b(?:\W+\w+){0,4}?\W+(?:to|from)\W+(?:buy|sell|hold|neutral|outperform|underperform|"
    r"overweight|underweight|equal[- ]weight|market perform)\b|"
    r"\binitiates? coverage\b|"
    r"\breiterates? (?:a |an |its |the )?(?:buy|sell|hold|neutral|outperform|overweight|underweight|market perform) rating\b|"
    r"\b(?:raises?|lowers?|cuts?|sets?|boosts?) (?:its |the )?price target\b|\bprice target (?:of|to|raised|cut|lowered)\b|"
    r"\b(?:buy|outperform|overweight) rating\b"
)
TYPO_ERRATUM = _rx(r"\b(typo|erratum|correction|corrects|amended release)\b")

# Crypto / treasury
CRYPTO_TREASURY_BUY = _rx(
    r"\b(buy|bought|purchase[sd]?|acquire[sd]?)\b.*"
    r"\b(Bitcoin|BTC|Ethereum|ETH|Solana|SOL|LINK|Chainlink|crypto(?:currency)?|tokens?)\b"
)
CRYPTO_COMPLETED = _rx(r"\b(bought|purchased|acquired|completes?|completed)\b")
CRYPTO_TREASURY_DISCUSS = _rx(
    r"\b(treasury|reserve|policy|program|strategy)\b.*"
    r"\b(discuss(?:ions?)?|approached|proposal|term sheet|non[- ]binding|indicative)\b.*"
    r"(\$?\d+(?:\.\d+)?\s*(?:million|billion|bn|mm|m))\b"
)

# Universal boosters
LARGE_DOLLAR_AMOUNT = _rx(r"\$?\s?(?:\d{2,4})\s*(?:million|billion)\b")
SUPERLATIVE = _rx(r"\b(record|unprecedented|all-time|exclusive|breakthrough|pivotal)\b")
BIG_MOVE = _rx(r"\b(double|doubled|triple|tripled)\b")

_WHITESPACE = re.compile(r"\s+")
_TRANSLATE = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
        "‑": "-",
        "–": "-",
        "—": "-",
    }
)


def normalize(text: Optional[str]) -> str:
    """Collapse whitespace and map smart quotes/dashes to ASCII."""

    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.translate(_TRANSLATE)).strip()


def is_wire_pr(url: Optional[str], text: str) -> bool:
    """True for major wire hosts, issuer IR subdomains or wire boilerplate."""

    if url:
        try:
            host = (urlparse(url).hostname or "").lower()
        except ValueError:
            host = ""
        if host in WIRE_HOSTS or _IR_HOST.match(host):
            return True
    return any(token in text for token in WIRE_TOKENS)


def has_big_percent_growth(text: str) -> bool:
    match = BIG_GROWTH.search(text)
    if match and int(match.group(3)) >= 50:
        return True
    return bool(RECORD_REVENUE.search(text))


def swing_to_profit(text: str) -> bool:
    return bool(SWING_TO_PROFIT.search(text))


def results_exception(text: str) -> bool:
    """Return-to-profitability or >=50% growth inside a results release."""

    return swing_to_profit(text) or has_big_percent_growth(text)


def definitive_priced_mna(text: str) -> bool:
    return bool(
        (MNA_DEFINITIVE.search(text) or MNA_WILL_ACQUIRE.search(text))
        and MNA_PER_SHARE_OR_VALUE.search(text)
    )


def tier1_adoption(text: str) -> bool:
    return bool(TIER1.search(text) and TIER1_VERBS.search(text))


def offwire_admitted(text: str) -> bool:
    """Textual evidence strong enough to admit wire-gated classes off-wire."""

    return definitive_priced_mna(text) or tier1_adoption(text)
