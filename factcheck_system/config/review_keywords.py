"""Sensitive-topic keywords that route a post to human review.

Tuned for travel/culture posts: only concrete phrases are listed, so an
ordinary mention of a museum's political history does not trigger review.
"""

SENSITIVE_KEYWORDS: list[str] = [
    # Political controversy
    "정치적 논란",
    "정부 비판",
    "정치 갈등",
    # Religious conflict
    "종교 갈등",
    "종교 분쟁",
    # Serious safety issues
    "심각한 사고",
    "재난 발생",
    "폐쇄 조치",
]
