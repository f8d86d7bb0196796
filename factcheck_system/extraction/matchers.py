"""Matcher table for body-text claim extraction.

Each ClaimMatcher pairs a claim type with an ordered list of compiled
patterns and an extractor that turns a match into the claim value. Patterns
are applied line by line, so no match spans a newline.

The table order is significant: it fixes the ``ct-N`` id sequence and, on a
duplicate (type, value), which line's match is kept.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from factcheck_system.data_management.schemas.claim_schema import ClaimType

Extractor = Callable[[re.Match], Optional[str]]


def group_or_match(match: re.Match) -> Optional[str]:
    """First capture group when the pattern has one and it matched, else the whole match."""
    if match.re.groups and match.group(1):
        return match.group(1)
    return match.group(0)


FREE_VALUE = "free"
FREE_WORD = re.compile(r"무료|\bfree\b", re.IGNORECASE)


def free_admission(match: re.Match) -> Optional[str]:
    # "무료" / "FREE" / "free" all mean the same price
    return FREE_VALUE


@dataclass(frozen=True)
class ClaimMatcher:
    name: str
    claim_type: ClaimType
    patterns: tuple[re.Pattern, ...]
    extract: Extractor = group_or_match

    def find(self, line: str):
        """Yield (match, value) for every pattern hit on one line, pattern by pattern."""
        for _, match, value in self.find_in([line]):
            yield match, value

    def find_in(self, lines: Sequence[str]):
        """Yield (line_index, match, value) in pattern, line, match order."""
        for pattern in self.patterns:
            for line_index, line in enumerate(lines):
                for match in pattern.finditer(line):
                    value = self.extract(match)
                    if value is not None:
                        yield line_index, match, value


def _compile(*patterns: str, flags: int = 0) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


_PROVINCES = "서울|부산|대구|인천|광주|대전|울산|세종|경기|강원|충북|충남|전북|전남|경북|경남|제주"
_DATE = r"\d{4}[.\-/]\d{1,2}[.\-/]\d{1,2}"
_HHMM_RANGE = r"\d{1,2}:\d{2}\s*[-~]\s*\d{1,2}:\d{2}"
_WON = r"\d{1,3}(?:,\d{3})*\s*원"
_PHONE = r"0\d{1,2}[-.\s]?\d{3,4}[-.\s]?\d{4}"

ADDRESS_MATCHER = ClaimMatcher(
    name="address",
    claim_type=ClaimType.LOCATION,
    patterns=_compile(
        r"(?:주소|위치|장소)\s*[:：]\s*([^\n]+)",
        rf"(?:{_PROVINCES})[시도]?\s+[가-힣]+(?:구|군|시)\s+[가-힣\s\d-]+",
        r"([가-힣]+(?:로|길|대로)\s*\d+(?:-\d+)?(?:\s*\d+층)?)",
        flags=re.IGNORECASE,
    ),
)

HOURS_MATCHER = ClaimMatcher(
    name="hours",
    claim_type=ClaimType.HOURS,
    patterns=_compile(
        rf"(?:운영시간|영업시간|오픈|마감)\s*[:：]?\s*({_HHMM_RANGE})",
        rf"({_HHMM_RANGE})",
        r"(?:오전|오후)\s*\d{1,2}시\s*[-~]\s*(?:오전|오후)?\s*\d{1,2}시",
        flags=re.IGNORECASE,
    ),
)

CLOSED_DAYS_MATCHER = ClaimMatcher(
    name="closed_days",
    claim_type=ClaimType.HOURS,
    patterns=_compile(
        r"(?:정기\s*휴무|휴무일|휴관일|휴무|휴일|휴관)\s*[:：]?\s*([^\n]+)",
        r"매주\s*[월화수목금토일]요일\s*휴무",
        flags=re.IGNORECASE,
    ),
)

EVENT_PERIOD_MATCHER = ClaimMatcher(
    name="event_period",
    claim_type=ClaimType.EVENT_PERIOD,
    patterns=_compile(
        rf"(?:전시|기간|일정)\s*[:：]?\s*({_DATE}\s*[-~]\s*{_DATE})",
        r"(\d{1,2}월\s*\d{1,2}일\s*[-~]\s*\d{1,2}월\s*\d{1,2}일)",
        r"(\d{4}년\s*\d{1,2}월\s*\d{1,2}일\s*[-~]\s*\d{1,2}월\s*\d{1,2}일)",
        flags=re.IGNORECASE,
    ),
)

PRICE_MATCHER = ClaimMatcher(
    name="price",
    claim_type=ClaimType.PRICE,
    patterns=_compile(
        rf"(?:가격|요금|입장료|티켓|비용)\s*[:：]?\s*({_WON})",
        rf"({_WON})",
        flags=re.IGNORECASE,
    ),
)

FREE_ADMISSION_MATCHER = ClaimMatcher(
    name="free_admission",
    claim_type=ClaimType.PRICE,
    patterns=_compile(
        r"(?:입장료|관람료|입장|관람|요금|가격|비용|티켓|admission|entry|entrance)\s*[:：]?\s*(?:은|는|is)?\s*(?:무료|free\b)",
        flags=re.IGNORECASE,
    ),
    extract=free_admission,
)

CONTACT_MATCHER = ClaimMatcher(
    name="contact",
    claim_type=ClaimType.CONTACT,
    patterns=_compile(
        rf"(?:전화|연락처|문의)\s*[:：]?\s*({_PHONE})",
        rf"({_PHONE})",
        flags=re.IGNORECASE,
    ),
)

FACILITIES_MATCHER = ClaimMatcher(
    name="facilities",
    claim_type=ClaimType.FACILITIES,
    patterns=_compile(
        r"\d+층\s*(?:건물|규모)",
        r"(?:좌석|수용)\s*\d+(?:석|명)",
        flags=re.IGNORECASE,
    ),
)

TRANSPORT_MATCHER = ClaimMatcher(
    name="transport",
    claim_type=ClaimType.TRANSPORT,
    patterns=_compile(
        r"([가-힣]+역)\s*\d+번\s*출구",
        r"(?:버스|지하철|전철)\s*[:：]?\s*([^\n]+)",
        flags=re.IGNORECASE,
    ),
)

HERITAGE_MATCHER = ClaimMatcher(
    name="heritage",
    claim_type=ClaimType.HERITAGE,
    patterns=_compile(
        r"(?:국보|보물|사적|명승|천연기념물|국가무형문화재)\s*제?\s*\d+\s*호",
        r"유네스코\s*세계\s*(?:문화|자연|복합)?\s*유산",
    ),
)

TRAIL_MATCHER = ClaimMatcher(
    name="trail",
    claim_type=ClaimType.TRAIL,
    patterns=_compile(
        r"(?:총\s*)?(?:거리|길이|코스)\s*[:：]?\s*(\d+(?:\.\d+)?\s*(?:km|㎞|킬로미터))",
        r"소요\s*시간\s*[:：]?\s*(약?\s*\d+\s*시간(?:\s*\d+\s*분)?|약?\s*\d+\s*분)",
        flags=re.IGNORECASE,
    ),
)

MATCHERS: tuple[ClaimMatcher, ...] = (
    ADDRESS_MATCHER,
    HOURS_MATCHER,
    CLOSED_DAYS_MATCHER,
    EVENT_PERIOD_MATCHER,
    PRICE_MATCHER,
    FREE_ADMISSION_MATCHER,
    CONTACT_MATCHER,
    FACILITIES_MATCHER,
    TRANSPORT_MATCHER,
    HERITAGE_MATCHER,
    TRAIL_MATCHER,
)
