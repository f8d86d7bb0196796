"""Coverage of the body-text matcher table, one matcher at a time."""

import pytest

from factcheck_system.extraction.matchers import (
    ADDRESS_MATCHER,
    CLOSED_DAYS_MATCHER,
    CONTACT_MATCHER,
    EVENT_PERIOD_MATCHER,
    FACILITIES_MATCHER,
    FREE_ADMISSION_MATCHER,
    HERITAGE_MATCHER,
    HOURS_MATCHER,
    PRICE_MATCHER,
    TRAIL_MATCHER,
    TRANSPORT_MATCHER,
    ClaimMatcher,
)


def _values(matcher: ClaimMatcher, line: str) -> list[str]:
    return [value.strip() for _, value in matcher.find(line)]


@pytest.mark.parametrize(
    "matcher, line, expected",
    [
        (HOURS_MATCHER, "운영시간: 10:00-18:00", "10:00-18:00"),
        (HOURS_MATCHER, "오전 9시 - 오후 6시까지 운영", "오전 9시 - 오후 6시"),
        (CLOSED_DAYS_MATCHER, "휴관일: 매주 월요일", "매주 월요일"),
        (CLOSED_DAYS_MATCHER, "매주 월요일 휴무", "매주 월요일 휴무"),
        (EVENT_PERIOD_MATCHER, "전시 기간: 2026.10.01 - 2026.12.31", "2026.10.01 - 2026.12.31"),
        (EVENT_PERIOD_MATCHER, "10월 1일 ~ 12월 31일 개최", "10월 1일 ~ 12월 31일"),
        (PRICE_MATCHER, "입장료: 5,000원", "5,000원"),
        (FREE_ADMISSION_MATCHER, "상설전시 관람료는 무료입니다", "free"),
        (FREE_ADMISSION_MATCHER, "입장료: 무료", "free"),
        (FREE_ADMISSION_MATCHER, "Admission is FREE", "free"),
        (CONTACT_MATCHER, "문의: 02-1234-5678", "02-1234-5678"),
        (FACILITIES_MATCHER, "지상 5층 규모의 건물", "5층 규모"),
        (FACILITIES_MATCHER, "좌석 300석 공연장", "좌석 300석"),
        (TRANSPORT_MATCHER, "안국역 1번 출구에서 도보 5분", "안국역"),
        (HERITAGE_MATCHER, "국보 제83호 반가사유상", "국보 제83호"),
        (HERITAGE_MATCHER, "유네스코 세계문화유산으로 등재", "유네스코 세계문화유산"),
        (TRAIL_MATCHER, "총 거리: 12.5km", "12.5km"),
        (TRAIL_MATCHER, "소요시간: 약 3시간 30분", "약 3시간 30분"),
        (ADDRESS_MATCHER, "주소: 서울 용산구 서빙고로 137", "서울 용산구 서빙고로 137"),
    ],
)
def test_matcher_value(matcher: ClaimMatcher, line: str, expected: str) -> None:
    assert expected in _values(matcher, line)


def test_free_needs_word_boundary() -> None:
    assert _values(FREE_ADMISSION_MATCHER, "freedom of movement") == []


def test_free_needs_a_price_label() -> None:
    assert _values(FREE_ADMISSION_MATCHER, "무료 주차 가능") == []
    assert _values(FREE_ADMISSION_MATCHER, "free wifi in the lobby") == []


def test_free_match_keeps_label_in_span() -> None:
    [(match, _)] = list(FREE_ADMISSION_MATCHER.find("주차: 무료 주차 가능, 입장료: 무료"))
    assert match.group(0) == "입장료: 무료"


def test_find_in_reports_line_index() -> None:
    hits = list(HOURS_MATCHER.find_in(["소개", "운영시간: 09:00-17:00"]))

    assert {index for index, _, _ in hits} == {1}
    _, match, value = hits[0]
    assert match.group(0) == "운영시간: 09:00-17:00"
    assert value == "09:00-17:00"

