"""Core enums for the lol-match-collector service."""

from enum import Enum


class PageStatus(Enum):
    """Outcome of processing one ladder page."""

    CONTINUE = "CONTINUE"
    EXHAUSTED = "EXHAUSTED"

    @property
    def has_more(self) -> bool:
        """Check if the crawler should request the next page."""
        return self == self.CONTINUE


class LadderQueue(Enum):
    """Ranked queues exposed by the league-v4 entries endpoint."""

    RANKED_SOLO_5X5 = "RANKED_SOLO_5x5"
    RANKED_FLEX_SR = "RANKED_FLEX_SR"
    RANKED_FLEX_TT = "RANKED_FLEX_TT"


class Tier(Enum):
    """Ranked tiers, lowest first."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"

    @property
    def is_apex(self) -> bool:
        """Apex tiers only have division I."""
        return self in (self.MASTER, self.GRANDMASTER, self.CHALLENGER)


class Division(Enum):
    """Divisions within a tier."""

    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    IV = "IV"


class Platform(Enum):
    """Riot platform routing values."""

    BR1 = "br1"
    LA1 = "la1"
    LA2 = "la2"
    NA1 = "na1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    RU = "ru"
    TR1 = "tr1"
    JP1 = "jp1"
    KR = "kr"
    OC1 = "oc1"
    PH2 = "ph2"
    SG2 = "sg2"
    TH2 = "th2"
    TW2 = "tw2"
    VN2 = "vn2"

    @property
    def regional_route(self) -> str:
        """Regional cluster serving match-v5 for this platform."""
        return _REGIONAL_ROUTES[self]


_REGIONAL_ROUTES = {
    Platform.BR1: "americas",
    Platform.LA1: "americas",
    Platform.LA2: "americas",
    Platform.NA1: "americas",
    Platform.EUN1: "europe",
    Platform.EUW1: "europe",
    Platform.RU: "europe",
    Platform.TR1: "europe",
    Platform.JP1: "asia",
    Platform.KR: "asia",
    Platform.OC1: "sea",
    Platform.PH2: "sea",
    Platform.SG2: "sea",
    Platform.TH2: "sea",
    Platform.TW2: "sea",
    Platform.VN2: "sea",
}
